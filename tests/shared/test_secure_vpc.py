"""Tests for the compliant VPC building blocks."""

import pytest
from aws_cdk import App, Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk.assertions import Match, Template

from shared.secure_vpc import (
    InternetGatewayNotDefinedError,
    SecureNatGateway,
    SecureRouteTable,
    SecureSubnet,
    SecureVpc,
)


@pytest.fixture
def stack():
    return Stack(App(), "TestStack")


class TestSecureVpc:
    def test_vpc_without_internet_gateway(self, stack):
        """Verify no internet gateway is created unless requested."""
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        template = Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::VPC", 1)
        template.resource_count_is("AWS::EC2::InternetGateway", 0)
        assert vpc.internet_gateway_id is None

    def test_vpc_with_internet_gateway(self, stack):
        """Verify the internet gateway is created and attached."""
        vpc = SecureVpc(
            stack,
            "Vpc",
            name="Main",
            ipv4_cidr_block="10.0.0.0/16",
            internet_gateway=True,
        )
        template = Template.from_stack(stack)
        igw_id = next(iter(template.find_resources("AWS::EC2::InternetGateway")))

        template.has_resource_properties(
            "AWS::EC2::VPCGatewayAttachment",
            {"InternetGatewayId": {"Ref": igw_id}, "VpcId": Match.any_value()},
        )
        assert vpc.internet_gateway_id is not None

    def test_gateway_endpoint(self, stack):
        """Verify gateway endpoints are bound to the given route tables."""
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        route_table = SecureRouteTable(stack, "RouteTable", name="Private", vpc=vpc)

        vpc.add_gateway_vpc_endpoint("S3", "s3", [route_table.route_table_id])
        template = Template.from_stack(stack)
        route_table_id = next(iter(template.find_resources("AWS::EC2::RouteTable")))

        template.has_resource_properties(
            "AWS::EC2::VPCEndpoint",
            {
                "RouteTableIds": [{"Ref": route_table_id}],
                "ServiceName": Match.any_value(),
            },
        )


class TestSecureRouteTable:
    def test_internet_gateway_route_requires_gateway(self, stack):
        """Verify the internet gateway route invariant is enforced."""
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        route_table = SecureRouteTable(stack, "RouteTable", name="Public", vpc=vpc)

        with pytest.raises(
            InternetGatewayNotDefinedError,
            match=r"without an IGW defined \(route table Public in VPC Main\)",
        ):
            route_table.add_internet_gateway_route("Default", "0.0.0.0/0")

        Template.from_stack(stack).resource_count_is("AWS::EC2::Route", 0)

    def test_transit_gateway_route_depends_on_attachment(self, stack):
        """Verify transit gateway routes depend on the attachment resource."""
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        route_table = SecureRouteTable(stack, "RouteTable", name="Private", vpc=vpc)
        attachment = ec2.CfnTransitGatewayAttachment(
            stack,
            "Attachment",
            transit_gateway_id="tgw-0123456789abcdef0",
            subnet_ids=["subnet-1"],
            vpc_id=vpc.vpc_id,
        )

        route_table.add_transit_gateway_route(
            "Tgw",
            "10.0.0.0/8",
            "tgw-0123456789abcdef0",
            attachment,
        )
        template = Template.from_stack(stack)

        template.has_resource(
            "AWS::EC2::Route",
            {
                "Properties": {"TransitGatewayId": "tgw-0123456789abcdef0"},
                "DependsOn": [stack.get_logical_id(attachment)],
            },
        )


class TestSecureSubnetAndNatGateway:
    def test_subnet_is_associated_with_route_table(self, stack):
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        route_table = SecureRouteTable(stack, "RouteTable", name="Public", vpc=vpc)
        SecureSubnet(
            stack,
            "Subnet",
            name="Web",
            availability_zone="us-east-1a",
            ipv4_cidr_block="10.0.0.0/24",
            route_table=route_table,
            vpc=vpc,
            map_public_ip_on_launch=True,
        )
        template = Template.from_stack(stack)

        template.has_resource_properties(
            "AWS::EC2::Subnet",
            {"MapPublicIpOnLaunch": True, "AvailabilityZone": "us-east-1a"},
        )
        template.resource_count_is("AWS::EC2::SubnetRouteTableAssociation", 1)

    def test_each_nat_gateway_gets_an_eip(self, stack):
        """Verify Elastic IPs are never shared between NAT gateways."""
        vpc = SecureVpc(stack, "Vpc", name="Main", ipv4_cidr_block="10.0.0.0/16")
        route_table = SecureRouteTable(stack, "RouteTable", name="Public", vpc=vpc)
        subnet = SecureSubnet(
            stack,
            "Subnet",
            name="Web",
            availability_zone="us-east-1a",
            ipv4_cidr_block="10.0.0.0/24",
            route_table=route_table,
            vpc=vpc,
        )
        SecureNatGateway(stack, "NatA", name="Nat-A", subnet=subnet)
        SecureNatGateway(stack, "NatB", name="Nat-B", subnet=subnet)
        template = Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::EIP", 2)
        template.resource_count_is("AWS::EC2::NatGateway", 2)
