"""Transit gateway VPC attachment construct."""

import aws_cdk as cdk
from aws_cdk import aws_ec2 as ec2
from constructs import Construct


class TransitGatewayAttachment(cdk.Resource):
    """Attaches a VPC to a transit gateway through a set of subnets.

    Attributes:
        transit_gateway_attachment_id: Identifier of the attachment.
        transit_gateway_attachment_name: Value of the ``Name`` tag.
        resource: The L1 attachment resource, used for explicit route dependencies.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        transit_gateway_id: str,
        subnet_ids: list[str],
        vpc_id: str,
    ) -> None:
        super().__init__(scope, construct_id)

        self.transit_gateway_attachment_name = name
        self.resource = ec2.CfnTransitGatewayAttachment(
            self,
            "Resource",
            transit_gateway_id=transit_gateway_id,
            subnet_ids=subnet_ids,
            vpc_id=vpc_id,
            tags=[cdk.CfnTag(key="Name", value=name)],
        )
        self.transit_gateway_attachment_id: str = self.resource.ref
