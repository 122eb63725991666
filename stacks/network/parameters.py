"""SSM Parameter Store paths published by the network stacks."""

from typing import Final, Literal

VPC_PARAMETER_PREFIX: Final[str] = "/accelerator/network/vpc"

ResourceKind = Literal["routeTable", "subnet", "natGateway", "transitGatewayAttachment"]


def vpc_id_parameter_name(vpc_name: str) -> str:
    return f"{VPC_PARAMETER_PREFIX}/{vpc_name}/id"


def vpc_resource_parameter_name(
    vpc_name: str,
    resource_kind: ResourceKind,
    resource_name: str,
) -> str:
    """Parameter holding the id of a resource that belongs to a VPC.

    Args:
        vpc_name: Name of the VPC.
        resource_kind: Kind of resource.
        resource_name: Name of the resource within the VPC.

    Returns:
        ``/accelerator/network/vpc/{vpc}/{kind}/{name}/id``
    """
    return f"{VPC_PARAMETER_PREFIX}/{vpc_name}/{resource_kind}/{resource_name}/id"
