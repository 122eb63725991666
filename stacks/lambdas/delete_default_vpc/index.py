"""
Lambda handler for the default VPC deletion custom resource.

Removes the default VPC of the region the function runs in, together with the
dependencies EC2 requires to be removed first: internet gateways, subnets,
non-main route tables, non-default network ACLs and non-default security groups.
"""

from typing import Any, Dict, List, Optional

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

logger = Logger()
ec2_client = boto3.client("ec2")


def find_default_vpc_id() -> Optional[str]:
    """
    Find the default VPC of the current region.

    Returns:
        The default VPC id, or None if the region has no default VPC
    """
    response = ec2_client.describe_vpcs(
        Filters=[{"Name": "isDefault", "Values": ["true"]}]
    )
    vpcs = response.get("Vpcs", [])
    if not vpcs:
        return None
    return vpcs[0]["VpcId"]


def _vpc_filter(vpc_id: str) -> List[Dict[str, Any]]:
    return [{"Name": "vpc-id", "Values": [vpc_id]}]


def delete_internet_gateways(vpc_id: str) -> None:
    """Detach and delete every internet gateway attached to the VPC."""
    response = ec2_client.describe_internet_gateways(
        Filters=[{"Name": "attachment.vpc-id", "Values": [vpc_id]}]
    )
    for igw in response.get("InternetGateways", []):
        igw_id = igw["InternetGatewayId"]
        logger.info("Deleting internet gateway", extra={"internet_gateway_id": igw_id})
        ec2_client.detach_internet_gateway(InternetGatewayId=igw_id, VpcId=vpc_id)
        ec2_client.delete_internet_gateway(InternetGatewayId=igw_id)


def delete_subnets(vpc_id: str) -> None:
    """Delete every subnet of the VPC."""
    response = ec2_client.describe_subnets(Filters=_vpc_filter(vpc_id))
    for subnet in response.get("Subnets", []):
        logger.info("Deleting subnet", extra={"subnet_id": subnet["SubnetId"]})
        ec2_client.delete_subnet(SubnetId=subnet["SubnetId"])


def delete_route_tables(vpc_id: str) -> None:
    """Delete every route table of the VPC except the main route table."""
    response = ec2_client.describe_route_tables(Filters=_vpc_filter(vpc_id))
    for route_table in response.get("RouteTables", []):
        if any(assoc.get("Main") for assoc in route_table.get("Associations", [])):
            continue
        route_table_id = route_table["RouteTableId"]
        logger.info("Deleting route table", extra={"route_table_id": route_table_id})
        ec2_client.delete_route_table(RouteTableId=route_table_id)


def delete_network_acls(vpc_id: str) -> None:
    """Delete every non-default network ACL of the VPC."""
    response = ec2_client.describe_network_acls(Filters=_vpc_filter(vpc_id))
    for acl in response.get("NetworkAcls", []):
        if acl.get("IsDefault"):
            continue
        logger.info("Deleting network ACL", extra={"network_acl_id": acl["NetworkAclId"]})
        ec2_client.delete_network_acl(NetworkAclId=acl["NetworkAclId"])


def delete_security_groups(vpc_id: str) -> None:
    """Delete every non-default security group of the VPC."""
    response = ec2_client.describe_security_groups(Filters=_vpc_filter(vpc_id))
    for group in response.get("SecurityGroups", []):
        if group.get("GroupName") == "default":
            continue
        logger.info("Deleting security group", extra={"group_id": group["GroupId"]})
        ec2_client.delete_security_group(GroupId=group["GroupId"])


def delete_default_vpc() -> Optional[str]:
    """
    Delete the default VPC and its dependencies.

    Returns:
        The id of the deleted VPC, or None if there was no default VPC
    """
    vpc_id = find_default_vpc_id()
    if vpc_id is None:
        logger.info("No default VPC found")
        return None

    logger.info("Deleting default VPC", extra={"vpc_id": vpc_id})
    delete_internet_gateways(vpc_id)
    delete_subnets(vpc_id)
    delete_route_tables(vpc_id)
    delete_network_acls(vpc_id)
    delete_security_groups(vpc_id)
    ec2_client.delete_vpc(VpcId=vpc_id)
    return vpc_id


@logger.inject_lambda_context
def on_event_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Handle custom resource lifecycle events.

    Only Create removes the default VPC; a deleted default VPC is never
    recreated, so Update and Delete are no-ops.

    Args:
        event: CloudFormation custom resource event
        context: Lambda execution context

    Returns:
        Provider framework response
    """
    logger.info("Delete default VPC event received", extra={"event": event})

    request_type = event["RequestType"]
    physical_resource_id = event.get("PhysicalResourceId", "DeleteDefaultVpc")

    if request_type == "Create":
        try:
            vpc_id = delete_default_vpc()
        except Exception:
            logger.exception("Failed to delete default VPC")
            raise
        return {
            "PhysicalResourceId": physical_resource_id,
            "Data": {"DeletedVpcId": vpc_id or ""},
        }

    return {"PhysicalResourceId": physical_resource_id}
