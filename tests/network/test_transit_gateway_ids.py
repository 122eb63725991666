"""Tests for transit gateway id resolution."""

import pytest
from aws_cdk import App, Environment, Stack
from aws_cdk.assertions import Template

from stacks.errors import ConfigurationError
from stacks.network.transit_gateway_ids import (
    LocalTransitGatewayLookup,
    SharedTransitGatewayLookup,
    TransitGatewayIds,
    plan_transit_gateway_lookup,
)

ACCOUNT_ID = "123456789012"
NETWORK_ACCOUNT_ID = "210987654321"
OTHER_ACCOUNT_ID = "555555555555"


@pytest.fixture
def stack():
    return Stack(
        App(),
        "TestStack",
        env=Environment(account=ACCOUNT_ID, region="us-east-1"),
    )


class TestPlanTransitGatewayLookup:
    def test_same_account_reads_parameter(self):
        lookup = plan_transit_gateway_lookup("Main", ACCOUNT_ID, ACCOUNT_ID)

        assert lookup == LocalTransitGatewayLookup(
            name="Main",
            parameter_name="/accelerator/network/transitGateways/Main/id",
        )

    def test_other_account_reads_resource_share(self):
        lookup = plan_transit_gateway_lookup("shared-tgw", NETWORK_ACCOUNT_ID, ACCOUNT_ID)

        assert lookup == SharedTransitGatewayLookup(
            name="shared-tgw",
            owning_account_id=NETWORK_ACCOUNT_ID,
            share_name="SharedTgwTransitGatewayShare",
        )


class TestTransitGatewayIds:
    def test_cache_hit_creates_no_new_lookup(self, stack):
        """Verify each transit gateway name is resolved once."""
        ids = TransitGatewayIds(stack, ACCOUNT_ID)

        first = ids.add("Main", NETWORK_ACCOUNT_ID)
        second = ids.add("Main", NETWORK_ACCOUNT_ID)

        assert first == second
        assert "Main" in ids
        Template.from_stack(stack).resource_count_is("Custom::ResourceShareLookup", 1)

    def test_external_accounts_in_first_seen_order(self, stack):
        ids = TransitGatewayIds(stack, ACCOUNT_ID)

        ids.add("Edge", OTHER_ACCOUNT_ID)
        ids.add("Local", ACCOUNT_ID)
        ids.add("Main", NETWORK_ACCOUNT_ID)
        ids.add("Backup", OTHER_ACCOUNT_ID)

        assert ids.external_account_ids == [OTHER_ACCOUNT_ID, NETWORK_ACCOUNT_ID]

    def test_local_lookup_creates_no_custom_resources(self, stack):
        ids = TransitGatewayIds(stack, ACCOUNT_ID)

        ids.add("Local", ACCOUNT_ID)
        template = Template.from_stack(stack)

        assert ids.external_account_ids == []
        template.resource_count_is("Custom::ResourceShareLookup", 0)
        template.has_parameter(
            "*",
            {"Default": "/accelerator/network/transitGateways/Local/id"},
        )

    def test_get_unknown_name_fails(self, stack):
        ids = TransitGatewayIds(stack, ACCOUNT_ID)

        with pytest.raises(ConfigurationError, match="Transit Gateway Missing not found"):
            ids.get("Missing", "route table Private in VPC B")
