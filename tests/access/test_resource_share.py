"""Tests for the RAM resource share lookup constructs."""

import pytest
from aws_cdk import App, Environment, Stack
from aws_cdk.assertions import Match, Template

from stacks.access.resource_share import (
    ResourceShare,
    ResourceShareItem,
    ResourceShareOwner,
)


@pytest.fixture
def stack():
    return Stack(
        App(),
        "TestStack",
        env=Environment(account="123456789012", region="us-east-1"),
    )


def test_resource_share_lookup(stack):
    """Verify the share lookup passes owner, name and owning account."""
    share = ResourceShare.from_lookup(
        stack,
        "Share",
        resource_share_owner=ResourceShareOwner.OTHER_ACCOUNTS,
        resource_share_name="MainTransitGatewayShare",
        owning_account_id="210987654321",
    )
    template = Template.from_stack(stack)

    template.has_resource_properties(
        "Custom::ResourceShareLookup",
        {
            "ServiceToken": Match.any_value(),
            "resourceOwner": "OTHER-ACCOUNTS",
            "resourceShareName": "MainTransitGatewayShare",
            "owningAccountId": "210987654321",
        },
    )
    assert share.resource_share_name == "MainTransitGatewayShare"


def test_resource_share_item_lookup(stack):
    """Verify the item lookup references the share ARN and item type."""
    share = ResourceShare.from_lookup(
        stack,
        "Share",
        resource_share_owner=ResourceShareOwner.OTHER_ACCOUNTS,
        resource_share_name="MainTransitGatewayShare",
    )
    ResourceShareItem.from_lookup(
        stack,
        "Item",
        resource_share=share,
        resource_share_item_type="ec2:TransitGateway",
    )
    template = Template.from_stack(stack)
    share_id = next(iter(template.find_resources("Custom::ResourceShareLookup")))

    template.has_resource_properties(
        "Custom::ResourceShareItemLookup",
        {
            "resourceOwner": "OTHER-ACCOUNTS",
            "resourceShareArn": {"Fn::GetAtt": [share_id, "resourceShareArn"]},
            "resourceShareItemType": "ec2:TransitGateway",
        },
    )


def test_handlers_shared_per_stack(stack):
    """Verify lookups of the same kind share one handler function."""
    for name in ("Main", "Edge"):
        ResourceShare.from_lookup(
            stack,
            f"{name}Share",
            resource_share_owner=ResourceShareOwner.OTHER_ACCOUNTS,
            resource_share_name=f"{name}TransitGatewayShare",
        )
    template = Template.from_stack(stack)

    template.resource_count_is("Custom::ResourceShareLookup", 2)
    handlers = template.find_resources(
        "AWS::Lambda::Function",
        {"Properties": {"Handler": "index.on_event_handler"}},
    )
    assert len(handlers) == 1
