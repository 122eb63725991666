"""Configuration module for accelerator network settings.

Defines the declarative network topology consumed by the network VPC stack:
VPCs with their route tables, subnets, NAT gateways, transit gateway
attachments, gateway endpoints and Route53 Resolver query logging.

Child definitions reference their siblings by name. Definitions must be
declared in dependency order (route tables before the subnets that use them,
subnets before NAT gateways, and so on); references are resolved in a single
pass while the stack is assembled.
"""

from pathlib import Path
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from stacks.common.utils import load_json_config

NETWORK_CONFIG_FILE: Final[str] = "network-config.json"

GatewayEndpointService = Literal["s3", "dynamodb"]
GATEWAY_ENDPOINT_SERVICES: Final[tuple[str, ...]] = ("s3", "dynamodb")

RouteTableEntryType = Literal[
    "transitGateway",
    "natGateway",
    "internetGateway",
    "gatewayEndpoint",
]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class DefaultVpcsConfig(_ConfigModel):
    """Settings for the default VPC AWS creates in every region.

    Attributes:
        delete: Remove the default VPC and its dependencies.
    """

    delete: bool = False


class RouteTableEntryConfig(_ConfigModel):
    """A single entry of a route table.

    Attributes:
        name: Entry name, unique within the route table.
        destination: Destination CIDR block. Not used for gateway endpoint targets.
        type: Kind of route target. Entries without a type must target a
            gateway endpoint service.
        target: Name of the NAT gateway or transit gateway, or a gateway
            endpoint service name (``s3`` / ``dynamodb``).
    """

    name: str
    destination: str | None = None
    type: RouteTableEntryType | None = None
    target: str

    @model_validator(mode="after")
    def _check_target(self) -> "RouteTableEntryConfig":
        if self.type in (None, "gatewayEndpoint"):
            if self.target not in GATEWAY_ENDPOINT_SERVICES:
                msg = (
                    f"Route table entry {self.name} must target one of "
                    f"{', '.join(GATEWAY_ENDPOINT_SERVICES)}, got {self.target}"
                )
                raise ValueError(msg)
        elif not self.destination:
            msg = f"Route table entry {self.name} of type {self.type} requires a destination"
            raise ValueError(msg)
        return self


class RouteTableConfig(_ConfigModel):
    """Route table definition.

    Attributes:
        name: Route table name, unique within the VPC.
        routes: Route entries added after all route targets exist.
    """

    name: str
    routes: list[RouteTableEntryConfig] = Field(default_factory=list)


class SubnetConfig(_ConfigModel):
    """Subnet definition.

    Attributes:
        name: Subnet name, unique within the VPC.
        availability_zone: Availability zone letter appended to the region (``a``).
        route_table: Name of the route table the subnet is associated with.
        ipv4_cidr_block: Subnet CIDR block.
        map_public_ip_on_launch: Assign public IPv4 addresses to instances.
    """

    name: str
    availability_zone: str
    route_table: str
    ipv4_cidr_block: str
    map_public_ip_on_launch: bool | None = None


class NatGatewayConfig(_ConfigModel):
    """NAT gateway definition.

    Attributes:
        name: NAT gateway name, unique within the VPC.
        subnet: Name of the subnet hosting the NAT gateway.
    """

    name: str
    subnet: str


class TransitGatewayAttachmentTargetConfig(_ConfigModel):
    """Reference to a transit gateway and its owning account.

    Attributes:
        name: Transit gateway name.
        account: Name of the account that owns the transit gateway.
    """

    name: str
    account: str


class TransitGatewayAttachmentConfig(_ConfigModel):
    """Transit gateway VPC attachment definition.

    Attributes:
        name: Attachment name.
        transit_gateway: Transit gateway to attach to.
        subnets: Names of the subnets the attachment uses.
    """

    name: str
    transit_gateway: TransitGatewayAttachmentTargetConfig
    subnets: list[str] = Field(default_factory=list)


class QueryLogsConfig(_ConfigModel):
    """Route53 Resolver query logging definition.

    Attributes:
        name: Query logging configuration name referenced from VPCs.
        destinations: Where query logs are delivered.
        s3_bucket_name: Destination bucket, required for the ``s3`` destination.
    """

    name: str
    destinations: list[Literal["s3", "cloud-watch-logs"]] = Field(min_length=1)
    s3_bucket_name: str | None = None

    @model_validator(mode="after")
    def _check_bucket(self) -> "QueryLogsConfig":
        if "s3" in self.destinations and not self.s3_bucket_name:
            msg = f"Query logs {self.name} delivers to s3 but s3BucketName is not set"
            raise ValueError(msg)
        return self


class VpcConfig(_ConfigModel):
    """VPC definition.

    Attributes:
        name: VPC name, used in construct ids and published parameter paths.
        account: Name of the account the VPC is deployed to.
        region: Region the VPC is deployed to.
        cidrs: CIDR blocks; the first entry is the primary CIDR.
        internet_gateway: Create and attach an internet gateway.
        enable_dns_hostnames: Enable DNS hostnames.
        enable_dns_support: Enable DNS resolution.
        instance_tenancy: Default tenancy of instances launched into the VPC.
        route_tables: Route tables, declared before the subnets using them.
        subnets: Subnets, declared before NAT gateways and attachments using them.
        nat_gateways: NAT gateways.
        transit_gateway_attachments: Transit gateway attachments.
        gateway_endpoints: Gateway endpoint services to create.
        query_logs: Names of query logging configurations to associate.
    """

    name: str
    account: str
    region: str
    cidrs: list[str] = Field(min_length=1)
    internet_gateway: bool = False
    enable_dns_hostnames: bool = False
    enable_dns_support: bool = True
    instance_tenancy: Literal["default", "dedicated"] = "default"
    route_tables: list[RouteTableConfig] = Field(default_factory=list)
    subnets: list[SubnetConfig] = Field(default_factory=list)
    nat_gateways: list[NatGatewayConfig] = Field(default_factory=list)
    transit_gateway_attachments: list[TransitGatewayAttachmentConfig] = Field(
        default_factory=list,
    )
    gateway_endpoints: list[GatewayEndpointService] = Field(default_factory=list)
    query_logs: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_gateway_endpoints(self) -> "VpcConfig":
        services = self.gateway_endpoints
        duplicates = sorted({service for service in services if services.count(service) > 1})
        if duplicates:
            msg = (
                f"VPC {self.name} declares gateway endpoints more than once: "
                f"{', '.join(duplicates)}"
            )
            raise ValueError(msg)
        return self


class NetworkConfig(_ConfigModel):
    """Top level network configuration.

    Attributes:
        default_vpc: Default VPC handling.
        vpcs: VPC definitions, evaluated in order.
        query_logs: Route53 Resolver query logging configurations.
    """

    default_vpc: DefaultVpcsConfig = Field(default_factory=DefaultVpcsConfig)
    vpcs: list[VpcConfig] = Field(default_factory=list)
    query_logs: list[QueryLogsConfig] = Field(default_factory=list)

    def get_query_logs(self, name: str) -> QueryLogsConfig | None:
        """Return the query logging configuration with the given name, if any."""
        for query_logs in self.query_logs:
            if query_logs.name == name:
                return query_logs
        return None

    @classmethod
    def load(cls, config_dir: Path) -> "NetworkConfig":
        """Load the network configuration from a configuration directory.

        Args:
            config_dir: Directory containing ``network-config.json``.

        Returns:
            Validated network configuration.
        """
        return cls.model_validate(load_json_config(NETWORK_CONFIG_FILE, config_dir))
