"""Compliant VPC building blocks.

Thin, typed wrappers around the CloudFormation VPC resources. Each construct
maps to one resource type and adds only the invariants the EC2 API does not
enforce by itself:

- every subnet is associated with exactly one route table at creation time
- every NAT gateway gets its own Elastic IP
- internet gateway routes can only be added to VPCs that own an internet gateway
"""

import aws_cdk as cdk
from aws_cdk import aws_ec2 as ec2
from constructs import Construct


class InternetGatewayNotDefinedError(ValueError):
    """An internet gateway route was requested on a VPC without an internet gateway."""


class SecureVpc(cdk.Resource):
    """VPC with an optional attached internet gateway.

    Attributes:
        vpc_name: Value of the ``Name`` tag.
        vpc_id: Identifier of the VPC.
        internet_gateway_id: Identifier of the attached internet gateway, or
            None when the VPC was created without one.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        ipv4_cidr_block: str,
        enable_dns_hostnames: bool | None = None,
        enable_dns_support: bool | None = None,
        instance_tenancy: str | None = None,
        internet_gateway: bool = False,
    ) -> None:
        """Create the VPC and, when requested, its internet gateway.

        Args:
            scope: Parent construct scope.
            construct_id: Unique identifier for this construct.
            name: Value of the ``Name`` tag.
            ipv4_cidr_block: Primary CIDR block.
            enable_dns_hostnames: Enable DNS hostnames.
            enable_dns_support: Enable DNS resolution.
            instance_tenancy: Default instance tenancy (``default`` or ``dedicated``).
            internet_gateway: Create and attach an internet gateway.
        """
        super().__init__(scope, construct_id)

        resource = ec2.CfnVPC(
            self,
            "Resource",
            cidr_block=ipv4_cidr_block,
            enable_dns_hostnames=enable_dns_hostnames,
            enable_dns_support=enable_dns_support,
            instance_tenancy=instance_tenancy,
            tags=[cdk.CfnTag(key="Name", value=name)],
        )
        self.vpc_name = name
        self.vpc_id: str = resource.ref
        self.internet_gateway_id: str | None = None

        if internet_gateway:
            igw = ec2.CfnInternetGateway(self, "InternetGateway")
            ec2.CfnVPCGatewayAttachment(
                self,
                "InternetGatewayAttachment",
                internet_gateway_id=igw.ref,
                vpc_id=self.vpc_id,
            )
            self.internet_gateway_id = igw.ref

    def add_gateway_vpc_endpoint(
        self,
        construct_id: str,
        service: str,
        route_table_ids: list[str],
    ) -> ec2.CfnVPCEndpoint:
        """Add a gateway endpoint for an AWS service to the given route tables.

        Args:
            construct_id: Identifier of the endpoint construct.
            service: Gateway service short name (``s3`` or ``dynamodb``).
            route_table_ids: Route tables that receive the endpoint routes.

        Returns:
            The created endpoint resource.
        """
        return ec2.CfnVPCEndpoint(
            self,
            construct_id,
            service_name=ec2.GatewayVpcEndpointAwsService(service).name,
            vpc_id=self.vpc_id,
            route_table_ids=route_table_ids,
        )


class SecureRouteTable(cdk.Resource):
    """Route table bound to a SecureVpc.

    Attributes:
        route_table_name: Value of the ``Name`` tag.
        route_table_id: Identifier of the route table.
        vpc: The VPC the route table belongs to.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        vpc: SecureVpc,
    ) -> None:
        super().__init__(scope, construct_id)

        self.vpc = vpc
        self.route_table_name = name
        resource = ec2.CfnRouteTable(
            self,
            "Resource",
            vpc_id=vpc.vpc_id,
            tags=[cdk.CfnTag(key="Name", value=name)],
        )
        self.route_table_id: str = resource.ref

    def add_transit_gateway_route(
        self,
        construct_id: str,
        destination: str,
        transit_gateway_id: str,
        transit_gateway_attachment: cdk.CfnResource,
    ) -> ec2.CfnRoute:
        """Route a destination to a transit gateway.

        The route depends on the attachment explicitly; CloudFormation rejects
        transit gateway routes created before the VPC attachment is available.

        Args:
            construct_id: Identifier of the route construct.
            destination: Destination CIDR block.
            transit_gateway_id: Transit gateway identifier.
            transit_gateway_attachment: Attachment resource the route depends on.

        Returns:
            The created route.
        """
        route = ec2.CfnRoute(
            self,
            construct_id,
            route_table_id=self.route_table_id,
            destination_cidr_block=destination,
            transit_gateway_id=transit_gateway_id,
        )
        route.add_dependency(transit_gateway_attachment)
        return route

    def add_nat_gateway_route(
        self,
        construct_id: str,
        destination: str,
        nat_gateway_id: str,
    ) -> ec2.CfnRoute:
        """Route a destination to a NAT gateway."""
        return ec2.CfnRoute(
            self,
            construct_id,
            route_table_id=self.route_table_id,
            destination_cidr_block=destination,
            nat_gateway_id=nat_gateway_id,
        )

    def add_internet_gateway_route(
        self,
        construct_id: str,
        destination: str,
    ) -> ec2.CfnRoute:
        """Route a destination to the VPC internet gateway.

        Args:
            construct_id: Identifier of the route construct.
            destination: Destination CIDR block.

        Returns:
            The created route.

        Raises:
            InternetGatewayNotDefinedError: If the VPC has no internet gateway.
        """
        if not self.vpc.internet_gateway_id:
            msg = (
                "Attempting to add Internet Gateway route without an IGW defined "
                f"(route table {self.route_table_name} in VPC {self.vpc.vpc_name})."
            )
            raise InternetGatewayNotDefinedError(msg)

        return ec2.CfnRoute(
            self,
            construct_id,
            route_table_id=self.route_table_id,
            destination_cidr_block=destination,
            gateway_id=self.vpc.internet_gateway_id,
        )


class SecureSubnet(cdk.Resource):
    """Subnet associated with exactly one route table.

    Attributes:
        subnet_id: Identifier of the subnet.
        subnet_name: Value of the ``Name`` tag.
        availability_zone: Availability zone the subnet lives in.
        ipv4_cidr_block: Subnet CIDR block.
        map_public_ip_on_launch: Public IPv4 assignment on launch.
        route_table: The associated route table.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        availability_zone: str,
        ipv4_cidr_block: str,
        route_table: SecureRouteTable,
        vpc: SecureVpc,
        map_public_ip_on_launch: bool | None = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self.subnet_name = name
        self.availability_zone = availability_zone
        self.ipv4_cidr_block = ipv4_cidr_block
        self.map_public_ip_on_launch = map_public_ip_on_launch
        self.route_table = route_table

        resource = ec2.CfnSubnet(
            self,
            "Resource",
            vpc_id=vpc.vpc_id,
            cidr_block=ipv4_cidr_block,
            availability_zone=availability_zone,
            map_public_ip_on_launch=map_public_ip_on_launch,
            tags=[cdk.CfnTag(key="Name", value=name)],
        )
        self.subnet_id: str = resource.ref

        ec2.CfnSubnetRouteTableAssociation(
            self,
            "RouteTableAssociation",
            subnet_id=self.subnet_id,
            route_table_id=route_table.route_table_id,
        )


class SecureNatGateway(cdk.Resource):
    """NAT gateway with a dedicated Elastic IP.

    Attributes:
        nat_gateway_id: Identifier of the NAT gateway.
        nat_gateway_name: Value of the ``Name`` tag.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        subnet: SecureSubnet,
    ) -> None:
        super().__init__(scope, construct_id)

        self.nat_gateway_name = name
        eip = ec2.CfnEIP(self, "Eip", domain="vpc")
        resource = ec2.CfnNatGateway(
            self,
            "Resource",
            subnet_id=subnet.subnet_id,
            allocation_id=eip.attr_allocation_id,
            tags=[cdk.CfnTag(key="Name", value=name)],
        )
        self.nat_gateway_id: str = resource.ref
