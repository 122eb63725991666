"""Transit gateway identifier resolution.

A VPC can attach to a transit gateway owned by its own account or by another
account of the organization. The identifier is obtained differently in each
case:

- same account: the transit gateway stack published the identifier to SSM
  Parameter Store under ``/accelerator/network/transitGateways/{name}/id``
- other account: the owning account shared the transit gateway through AWS RAM
  as ``{Name}TransitGatewayShare``; the share and then the shared transit
  gateway are looked up

Each transit gateway name is resolved at most once per stack.
"""

import logging
from dataclasses import dataclass
from typing import Final, Union

from aws_cdk import aws_ssm as ssm
from constructs import Construct

from stacks.access.resource_share import (
    ResourceShare,
    ResourceShareItem,
    ResourceShareOwner,
)
from stacks.common.utils import pascal_case
from stacks.errors import ConfigurationError

logger = logging.getLogger(__name__)

TRANSIT_GATEWAY_RESOURCE_TYPE: Final[str] = "ec2:TransitGateway"


def transit_gateway_parameter_name(name: str) -> str:
    """SSM parameter holding the id of a transit gateway owned by this account."""
    return f"/accelerator/network/transitGateways/{name}/id"


@dataclass(frozen=True)
class LocalTransitGatewayLookup:
    """Transit gateway owned by the current account, read from SSM."""

    name: str
    parameter_name: str


@dataclass(frozen=True)
class SharedTransitGatewayLookup:
    """Transit gateway owned by another account, read from a RAM share."""

    name: str
    owning_account_id: str
    share_name: str


TransitGatewayLookup = Union[LocalTransitGatewayLookup, SharedTransitGatewayLookup]


def plan_transit_gateway_lookup(
    name: str,
    owning_account_id: str,
    account_id: str,
) -> TransitGatewayLookup:
    """Choose how the identifier of a transit gateway is obtained.

    Args:
        name: Transit gateway name.
        owning_account_id: Account that owns the transit gateway.
        account_id: Account the stack is deployed to.

    Returns:
        The lookup to perform.
    """
    if owning_account_id == account_id:
        return LocalTransitGatewayLookup(
            name=name,
            parameter_name=transit_gateway_parameter_name(name),
        )
    return SharedTransitGatewayLookup(
        name=name,
        owning_account_id=owning_account_id,
        share_name=pascal_case(f"{name}TransitGatewayShare"),
    )


class TransitGatewayIds:
    """Per-stack cache of transit gateway identifiers.

    Attributes:
        external_account_ids: Owning accounts of every transit gateway resolved
            through RAM, in first-seen order.
    """

    def __init__(self, scope: Construct, account_id: str) -> None:
        """Initialize an empty cache.

        Args:
            scope: Scope the lookup constructs are created in.
            account_id: Account the stack is deployed to.
        """
        self._scope = scope
        self._account_id = account_id
        self._ids: dict[str, str] = {}
        self.external_account_ids: list[str] = []

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def add(self, name: str, owning_account_id: str) -> str:
        """Resolve a transit gateway identifier unless it is already cached.

        Args:
            name: Transit gateway name.
            owning_account_id: Account that owns the transit gateway.

        Returns:
            The transit gateway identifier.
        """
        logger.info(f"Evaluating Transit Gateway key {name}")
        if name in self._ids:
            logger.info(f"Transit Gateway {name} already in dictionary")
            return self._ids[name]

        logger.info(f"Transit Gateway key {name} is not in map, add resources to look up")
        lookup = plan_transit_gateway_lookup(name, owning_account_id, self._account_id)
        if isinstance(lookup, SharedTransitGatewayLookup):
            if lookup.owning_account_id not in self.external_account_ids:
                self.external_account_ids.append(lookup.owning_account_id)
            transit_gateway_id = self._resolve_shared(lookup)
        else:
            transit_gateway_id = self._resolve_local(lookup)

        logger.info(f"Adding [{name}] to transitGatewayIds Map")
        self._ids[name] = transit_gateway_id
        return transit_gateway_id

    def get(self, name: str, context: str = "") -> str:
        """Return a cached transit gateway identifier.

        Args:
            name: Transit gateway name.
            context: Description of the referencing configuration item, used
                in the error message.

        Raises:
            ConfigurationError: If the transit gateway was never resolved.
        """
        transit_gateway_id = self._ids.get(name)
        if transit_gateway_id is None:
            msg = f"Transit Gateway {name} not found"
            if context:
                msg = f"{msg} ({context})"
            raise ConfigurationError(msg)
        return transit_gateway_id

    def _resolve_local(self, lookup: LocalTransitGatewayLookup) -> str:
        return ssm.StringParameter.value_for_string_parameter(
            self._scope,
            lookup.parameter_name,
        )

    def _resolve_shared(self, lookup: SharedTransitGatewayLookup) -> str:
        resource_share = ResourceShare.from_lookup(
            self._scope,
            lookup.share_name,
            resource_share_owner=ResourceShareOwner.OTHER_ACCOUNTS,
            resource_share_name=lookup.share_name,
            owning_account_id=lookup.owning_account_id,
        )
        item = ResourceShareItem.from_lookup(
            self._scope,
            pascal_case(f"{lookup.name}TransitGateway"),
            resource_share=resource_share,
            resource_share_item_type=TRANSIT_GATEWAY_RESOURCE_TYPE,
        )
        return item.resource_share_item_id
