"""Network VPC stack for accelerator workload and shared network accounts.

This module turns the declarative network configuration into VPC resources for
the account and region the stack is deployed to. Every identifier created here
is published to SSM Parameter Store so dependent stacks can look it up without
CloudFormation exports.

Build order per VPC:
    - VPC, optionally with an internet gateway
    - Route tables
    - Subnets, each associated with a route table by name
    - NAT gateways, each placed in a subnet by name
    - Transit gateway attachments, using subnets by name
    - Route table entries targeting the resources above
    - Gateway endpoints for the route tables that requested them
    - Route53 Resolver query logging associations

Configuration items reference each other by name. A reference to a name not yet
created aborts synthesis with a ConfigurationError.
"""

import logging

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_ssm as ssm
from cdk_nag import NagSuppressions
from constructs import Construct

from shared.secure_vpc import (
    SecureNatGateway,
    SecureRouteTable,
    SecureSubnet,
    SecureVpc,
)
from stacks.accelerator_stack import AcceleratorStack, AcceleratorStackProps
from stacks.common.utils import pascal_case
from stacks.configs.network_config import GATEWAY_ENDPOINT_SERVICES, VpcConfig
from stacks.errors import ConfigurationError
from stacks.network.delete_default_vpc import DeleteDefaultVpc
from stacks.network.parameters import (
    vpc_id_parameter_name,
    vpc_resource_parameter_name,
)
from stacks.network.transit_gateway_attachment import TransitGatewayAttachment
from stacks.network.transit_gateway_ids import TransitGatewayIds
from stacks.resolver.query_logging_config import (
    QueryLoggingConfig,
    QueryLoggingConfigAssociation,
)

logger = logging.getLogger(__name__)

DESCRIBE_TGW_ATTACHMENTS_ROLE_NAME = "AWSAccelerator-DescribeTransitGatewayAttachmentsRole"


class NetworkVpcStack(AcceleratorStack):
    """VPCs of the network configuration that belong to this account and region.

    Attributes:
        transit_gateway_ids: Transit gateway ids resolved for the VPCs of this stack.
        vpcs: VPC constructs by VPC name.
        describe_attachments_role: Role other transit gateway owners assume to
            describe attachments, or None when every transit gateway is local.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        props: AcceleratorStackProps,
        **kwargs,
    ) -> None:
        """Initialize the network VPC stack.

        Args:
            scope: CDK construct scope.
            construct_id: Unique identifier for this stack.
            props: Accelerator configuration and resolved account ids.
            **kwargs: Additional stack properties, such as ``env``.

        Raises:
            ConfigurationError: If a configuration reference cannot be resolved.
            InternetGatewayNotDefinedError: If an internet gateway route is
                declared on a VPC without an internet gateway.
        """
        super().__init__(scope, construct_id, props=props, **kwargs)

        self.vpcs: dict[str, SecureVpc] = {}
        self.describe_attachments_role: iam.Role | None = None
        self._query_logging_configs: dict[str, QueryLoggingConfig] = {}

        if props.network_config.default_vpc.delete:
            logger.info("Add DeleteDefaultVpc")
            DeleteDefaultVpc(self, "DeleteDefaultVpc")

        vpc_items = [
            vpc_item for vpc_item in props.network_config.vpcs if self._is_in_scope(vpc_item)
        ]

        self.transit_gateway_ids = TransitGatewayIds(self, self.account)
        for vpc_item in vpc_items:
            for tgw_attachment_item in vpc_item.transit_gateway_attachments:
                self.transit_gateway_ids.add(
                    tgw_attachment_item.transit_gateway.name,
                    self.get_account_id(tgw_attachment_item.transit_gateway.account),
                )

        if self.transit_gateway_ids.external_account_ids:
            self.describe_attachments_role = self._create_describe_attachments_role(
                self.transit_gateway_ids.external_account_ids,
            )

        for vpc_item in vpc_items:
            self._add_vpc(vpc_item)

    def _is_in_scope(self, vpc_item: VpcConfig) -> bool:
        account_id = self.get_account_id(vpc_item.account)
        return account_id == self.account and vpc_item.region == self.region

    def _create_describe_attachments_role(self, account_ids: list[str]) -> iam.Role:
        """Let transit gateway owners describe the attachments of this account."""
        logger.info("Create IAM Cross Account Access Role")

        role = iam.Role(
            self,
            "DescribeTransitGatewaysAttachmentsRole",
            role_name=DESCRIBE_TGW_ATTACHMENTS_ROLE_NAME,
            assumed_by=iam.CompositePrincipal(
                *[iam.AccountPrincipal(account_id) for account_id in account_ids],
            ),
            inline_policies={
                "default": iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=["ec2:DescribeTransitGatewayAttachments"],
                            resources=["*"],
                        ),
                    ],
                ),
            },
        )

        NagSuppressions.add_resource_suppressions(
            role,
            [
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "DescribeTransitGatewayAttachments does not support resource-level permissions.",
                },
            ],
        )
        return role

    def _publish(self, construct_id: str, parameter_name: str, value: str) -> None:
        ssm.StringParameter(
            self,
            construct_id,
            parameter_name=parameter_name,
            string_value=value,
        )

    def _add_vpc(self, vpc_item: VpcConfig) -> None:
        """Create one VPC and everything it contains."""
        logger.info(f"Adding VPC {vpc_item.name}")

        vpc_prefix = pascal_case(f"{vpc_item.name}Vpc")
        vpc_name = pascal_case(vpc_item.name)

        vpc = SecureVpc(
            self,
            vpc_prefix,
            name=vpc_item.name,
            ipv4_cidr_block=vpc_item.cidrs[0],
            internet_gateway=vpc_item.internet_gateway,
            enable_dns_hostnames=vpc_item.enable_dns_hostnames,
            enable_dns_support=vpc_item.enable_dns_support,
            instance_tenancy=vpc_item.instance_tenancy,
        )
        self.vpcs[vpc_item.name] = vpc
        self._publish(
            pascal_case(f"SsmParam{vpc_name}VpcId"),
            vpc_id_parameter_name(vpc_item.name),
            vpc.vpc_id,
        )

        route_tables: dict[str, SecureRouteTable] = {}
        for route_table_item in vpc_item.route_tables:
            logger.info(f"Adding Route Table {route_table_item.name}")
            route_table = SecureRouteTable(
                self,
                vpc_prefix + pascal_case(f"{route_table_item.name}RouteTable"),
                name=route_table_item.name,
                vpc=vpc,
            )
            route_tables[route_table_item.name] = route_table
            self._publish(
                pascal_case(f"SsmParam{vpc_name}{pascal_case(route_table_item.name)}RouteTableId"),
                vpc_resource_parameter_name(vpc_item.name, "routeTable", route_table_item.name),
                route_table.route_table_id,
            )

        subnets: dict[str, SecureSubnet] = {}
        for subnet_item in vpc_item.subnets:
            logger.info(f"Adding Subnet {subnet_item.name}")
            route_table = route_tables.get(subnet_item.route_table)
            if route_table is None:
                msg = f"Route table {subnet_item.route_table} not defined in VPC {vpc_item.name}"
                raise ConfigurationError(msg)

            subnet = SecureSubnet(
                self,
                vpc_prefix + pascal_case(f"{subnet_item.name}Subnet"),
                name=subnet_item.name,
                availability_zone=f"{vpc_item.region}{subnet_item.availability_zone}",
                ipv4_cidr_block=subnet_item.ipv4_cidr_block,
                map_public_ip_on_launch=subnet_item.map_public_ip_on_launch,
                route_table=route_table,
                vpc=vpc,
            )
            subnets[subnet_item.name] = subnet
            self._publish(
                pascal_case(f"SsmParam{vpc_name}{pascal_case(subnet_item.name)}SubnetId"),
                vpc_resource_parameter_name(vpc_item.name, "subnet", subnet_item.name),
                subnet.subnet_id,
            )

        nat_gateways: dict[str, SecureNatGateway] = {}
        for nat_gateway_item in vpc_item.nat_gateways:
            logger.info(f"Adding NAT Gateway {nat_gateway_item.name}")
            subnet = subnets.get(nat_gateway_item.subnet)
            if subnet is None:
                msg = f"Subnet {nat_gateway_item.subnet} not defined in VPC {vpc_item.name}"
                raise ConfigurationError(msg)

            nat_gateway = SecureNatGateway(
                self,
                vpc_prefix + pascal_case(f"{nat_gateway_item.name}NatGateway"),
                name=nat_gateway_item.name,
                subnet=subnet,
            )
            nat_gateways[nat_gateway_item.name] = nat_gateway
            self._publish(
                pascal_case(f"SsmParam{vpc_name}{pascal_case(nat_gateway_item.name)}NatGatewayId"),
                vpc_resource_parameter_name(vpc_item.name, "natGateway", nat_gateway_item.name),
                nat_gateway.nat_gateway_id,
            )

        # Keyed by transit gateway name, route entries target transit gateways.
        transit_gateway_attachments: dict[str, TransitGatewayAttachment] = {}
        for tgw_attachment_item in vpc_item.transit_gateway_attachments:
            tgw_name = tgw_attachment_item.transit_gateway.name
            logger.info(f"Adding Transit Gateway Attachment for {tgw_name}")
            transit_gateway_id = self.transit_gateway_ids.get(
                tgw_name,
                f"attachment {tgw_attachment_item.name} in VPC {vpc_item.name}",
            )

            subnet_ids = []
            for subnet_name in tgw_attachment_item.subnets:
                subnet = subnets.get(subnet_name)
                if subnet is None:
                    msg = f"Subnet {subnet_name} not defined in VPC {vpc_item.name}"
                    raise ConfigurationError(msg)
                subnet_ids.append(subnet.subnet_id)

            attachment = TransitGatewayAttachment(
                self,
                pascal_case(f"{tgw_attachment_item.name}VpcTransitGatewayAttachment"),
                name=tgw_attachment_item.name,
                transit_gateway_id=transit_gateway_id,
                subnet_ids=subnet_ids,
                vpc_id=vpc.vpc_id,
            )
            transit_gateway_attachments[tgw_name] = attachment
            self._publish(
                pascal_case(
                    f"SsmParam{vpc_name}{pascal_case(tgw_attachment_item.name)}"
                    "TransitGatewayAttachmentId",
                ),
                vpc_resource_parameter_name(
                    vpc_item.name,
                    "transitGatewayAttachment",
                    tgw_attachment_item.name,
                ),
                attachment.transit_gateway_attachment_id,
            )

        # Route table ids per gateway endpoint service, deduplicated in insertion order.
        endpoint_route_tables: dict[str, dict[str, None]] = {
            service: {} for service in GATEWAY_ENDPOINT_SERVICES
        }
        for route_table_item in vpc_item.route_tables:
            route_table = route_tables[route_table_item.name]

            for entry in route_table_item.routes:
                entry_id = (
                    vpc_prefix
                    + pascal_case(f"{route_table_item.name}RouteTable")
                    + pascal_case(entry.name)
                )
                location = f"route table {route_table_item.name} in VPC {vpc_item.name}"

                if entry.type == "transitGateway":
                    logger.info(f"Adding Transit Gateway Route Table Entry {entry.name}")
                    transit_gateway_id = self.transit_gateway_ids.get(entry.target, location)
                    attachment = transit_gateway_attachments.get(entry.target)
                    if attachment is None:
                        msg = f"Transit Gateway Attachment {entry.target} not found ({location})"
                        raise ConfigurationError(msg)
                    route_table.add_transit_gateway_route(
                        entry_id,
                        entry.destination,
                        transit_gateway_id,
                        attachment.resource,
                    )
                elif entry.type == "natGateway":
                    logger.info(f"Adding NAT Gateway Route Table Entry {entry.name}")
                    nat_gateway = nat_gateways.get(entry.target)
                    if nat_gateway is None:
                        msg = f"NAT Gateway {entry.target} not found ({location})"
                        raise ConfigurationError(msg)
                    route_table.add_nat_gateway_route(
                        entry_id,
                        entry.destination,
                        nat_gateway.nat_gateway_id,
                    )
                elif entry.type == "internetGateway":
                    logger.info(f"Adding Internet Gateway Route Table Entry {entry.name}")
                    route_table.add_internet_gateway_route(entry_id, entry.destination)
                elif entry.target in endpoint_route_tables:
                    endpoint_route_tables[entry.target].setdefault(route_table.route_table_id)

        for service in vpc_item.gateway_endpoints:
            logger.info(f"Adding Gateway Endpoint for {service}")
            vpc.add_gateway_vpc_endpoint(
                vpc_prefix + pascal_case(service),
                service,
                list(endpoint_route_tables[service]),
            )

        for query_logs_name in vpc_item.query_logs:
            self._associate_query_logs(vpc_item, vpc, query_logs_name)

    def _associate_query_logs(
        self,
        vpc_item: VpcConfig,
        vpc: SecureVpc,
        query_logs_name: str,
    ) -> None:
        """Associate every destination of a query logging configuration with a VPC."""
        query_logs_item = self.props.network_config.get_query_logs(query_logs_name)
        if query_logs_item is None:
            msg = f"Query logs {query_logs_name} not defined, referenced by VPC {vpc_item.name}"
            raise ConfigurationError(msg)

        for destination in query_logs_item.destinations:
            logger.info(
                f"Adding Query Logging Association for {query_logs_name} ({destination}) "
                f"to VPC {vpc_item.name}",
            )
            config = self._get_query_logging_config(query_logs_item.name, destination)
            QueryLoggingConfigAssociation(
                self,
                pascal_case(f"{vpc_item.name}Vpc")
                + pascal_case(f"{query_logs_name}-{destination}QueryLogsAssociation"),
                resolver_query_log_config_id=config.log_id,
                vpc_id=vpc.vpc_id,
            )

    def _get_query_logging_config(self, name: str, destination: str) -> QueryLoggingConfig:
        """Return the query logging configuration for a destination, creating it once."""
        key = f"{name}/{destination}"
        if key in self._query_logging_configs:
            return self._query_logging_configs[key]

        query_logs_item = self.props.network_config.get_query_logs(name)
        construct_id = pascal_case(f"{name}-{destination}QueryLogs")
        organization_id = self.props.accounts_config.organization_id

        if destination == "s3":
            bucket = s3.Bucket.from_bucket_name(
                self,
                f"{construct_id}Bucket",
                query_logs_item.s3_bucket_name,
            )
            config = QueryLoggingConfig(
                self,
                construct_id,
                name=f"{name}-s3",
                s3_bucket=bucket,
                organization_id=organization_id,
            )
        else:
            log_group = logs.LogGroup(
                self,
                f"{construct_id}LogGroup",
                log_group_name=f"/aws/route53resolver/{name}",
                retention=logs.RetentionDays.ONE_YEAR,
                removal_policy=cdk.RemovalPolicy.RETAIN,
            )
            config = QueryLoggingConfig(
                self,
                construct_id,
                name=f"{name}-cwl",
                log_group=log_group,
                organization_id=organization_id,
            )

        self._query_logging_configs[key] = config
        return config
