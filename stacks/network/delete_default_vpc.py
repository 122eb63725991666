"""Custom resource removing the default VPC of the stack region."""

from aws_cdk import aws_iam as iam
from constructs import Construct

from stacks.common.custom_resource_base import CustomResourceBase


class DeleteDefaultVpc(CustomResourceBase):
    """Deletes the default VPC, and its dependencies, when the stack is created.

    The default VPC is removed once; stack updates and deletion leave the
    region untouched.
    """

    def __init__(self, scope: Construct, construct_id: str) -> None:
        iam_policy = iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=[
                "ec2:DescribeInternetGateways",
                "ec2:DescribeNetworkAcls",
                "ec2:DescribeRouteTables",
                "ec2:DescribeSecurityGroups",
                "ec2:DescribeSubnets",
                "ec2:DescribeVpcs",
                "ec2:DeleteInternetGateway",
                "ec2:DeleteNetworkAcl",
                "ec2:DeleteRouteTable",
                "ec2:DeleteSecurityGroup",
                "ec2:DeleteSubnet",
                "ec2:DeleteVpc",
                "ec2:DetachInternetGateway",
            ],
            resources=["*"],
        )

        super().__init__(
            scope,
            construct_id,
            resource_type="Custom::DeleteDefaultVpc",
            properties={},
            lambda_file_path="delete_default_vpc",
            iam_statements=[iam_policy],
        )
