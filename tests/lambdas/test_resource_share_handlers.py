import importlib.util
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


def _load_module(name: str, handler_dir: str):
    root = Path(__file__).resolve().parents[2]
    path = root / "stacks" / "lambdas" / handler_dir / "index.py"
    spec = importlib.util.spec_from_file_location(name, str(path))
    mod = importlib.util.module_from_spec(spec)
    sys.modules[name] = mod
    assert spec
    assert spec.loader
    spec.loader.exec_module(mod)  # type: ignore[attr-defined]
    return mod


class DummyContext:
    function_name = "test"
    memory_limit_in_mb = 128
    invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test"
    aws_request_id = "req-123"


SHARE_ARN = "arn:aws:ram:us-east-1:210987654321:resource-share/7ab63972-b505-7e2a-420d-6f5d3EXAMPLE"
TGW_ARN = "arn:aws:ec2:us-east-1:210987654321:transit-gateway/tgw-0123456789abcdef0"


def _paginated(ram, pages):
    ram.get_paginator.return_value.paginate.return_value = pages
    return ram


@pytest.fixture
def ram():
    return MagicMock()


@pytest.fixture
def share_module(ram):
    with patch("boto3.client", return_value=ram):
        return _load_module("tmp_get_resource_share", "get_resource_share")


@pytest.fixture
def item_module(ram):
    with patch("boto3.client", return_value=ram):
        return _load_module("tmp_get_resource_share_item", "get_resource_share_item")


def share_event(request_type="Create", **properties):
    event = {
        "RequestType": request_type,
        "ResourceProperties": {
            "resourceOwner": "OTHER-ACCOUNTS",
            "resourceShareName": "MainTransitGatewayShare",
            "owningAccountId": "210987654321",
            **properties,
        },
    }
    if request_type != "Create":
        event["PhysicalResourceId"] = SHARE_ARN
    return event


def test_share_found_for_owning_account(share_module, ram):
    _paginated(
        ram,
        [
            {
                "resourceShares": [
                    {
                        "resourceShareArn": "arn:aws:ram:us-east-1:555555555555:resource-share/other",
                        "owningAccountId": "555555555555",
                        "status": "ACTIVE",
                    },
                    {
                        "resourceShareArn": SHARE_ARN,
                        "owningAccountId": "210987654321",
                        "status": "ACTIVE",
                    },
                ],
            },
        ],
    )

    resp = share_module.on_event_handler(share_event(), DummyContext())

    assert resp["PhysicalResourceId"] == SHARE_ARN
    assert resp["Data"]["resourceShareArn"] == SHARE_ARN
    assert resp["Data"]["resourceShareId"] == "7ab63972-b505-7e2a-420d-6f5d3EXAMPLE"
    ram.get_paginator.return_value.paginate.assert_called_once_with(
        resourceOwner="OTHER-ACCOUNTS",
        name="MainTransitGatewayShare",
    )


def test_inactive_share_is_ignored(share_module, ram):
    _paginated(
        ram,
        [
            {
                "resourceShares": [
                    {
                        "resourceShareArn": SHARE_ARN,
                        "owningAccountId": "210987654321",
                        "status": "DELETED",
                    },
                ],
            },
        ],
    )

    with pytest.raises(ValueError, match="MainTransitGatewayShare"):
        share_module.on_event_handler(share_event(), DummyContext())


def test_missing_share_reports_name_and_owner(share_module, ram):
    """Verify the failure names the share and its owning account."""
    _paginated(ram, [{"resourceShares": []}])

    with pytest.raises(
        ValueError,
        match="Resource share MainTransitGatewayShare owned by 210987654321 not found",
    ):
        share_module.on_event_handler(share_event(), DummyContext())


def test_share_delete_is_noop(share_module, ram):
    resp = share_module.on_event_handler(share_event("Delete"), DummyContext())

    assert resp == {"PhysicalResourceId": SHARE_ARN}
    ram.get_paginator.assert_not_called()


def test_item_found(item_module, ram):
    _paginated(ram, [{"resources": [{"arn": TGW_ARN}]}])
    event = {
        "RequestType": "Create",
        "ResourceProperties": {
            "resourceOwner": "OTHER-ACCOUNTS",
            "resourceShareArn": SHARE_ARN,
            "resourceShareItemType": "ec2:TransitGateway",
        },
    }

    resp = item_module.on_event_handler(event, DummyContext())

    assert resp["Data"]["resourceShareItemId"] == "tgw-0123456789abcdef0"
    assert resp["Data"]["resourceShareItemArn"] == TGW_ARN


def test_item_missing_fails(item_module, ram):
    _paginated(ram, [{"resources": []}])
    event = {
        "RequestType": "Update",
        "PhysicalResourceId": TGW_ARN,
        "ResourceProperties": {
            "resourceShareArn": SHARE_ARN,
            "resourceShareItemType": "ec2:TransitGateway",
        },
    }

    with pytest.raises(ValueError, match="No ec2:TransitGateway resource found"):
        item_module.on_event_handler(event, DummyContext())


def test_resource_id_from_arn(item_module):
    assert item_module.resource_id_from_arn(TGW_ARN) == "tgw-0123456789abcdef0"
    assert item_module.resource_id_from_arn("arn:aws:ec2:us-east-1:1:subnet/subnet-1") == "subnet-1"
