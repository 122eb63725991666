"""Tests for the CDK application entry point."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from aws_cdk.assertions import Template

import app as app_module
from app import StackConfiguration, create_deployment_environment, initialize_app


class TestStackConfiguration:
    def test_stack_name_without_environment(self):
        assert StackConfiguration().stack_name == "AWSAcceleratorStack"

    def test_stack_name_with_environment(self):
        config = StackConfiguration(environment="prod").with_app_name("Network")

        assert config.stack_name == "NetworkStack-prod"


def test_environment_from_variables(monkeypatch):
    monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", "123456789012")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")

    env = create_deployment_environment(StackConfiguration())

    assert env.account == "123456789012"
    assert env.region == "eu-west-1"


def test_environment_from_profile():
    session = MagicMock()
    session.region_name = "us-west-2"
    session.client.return_value.get_caller_identity.return_value = {"Account": "210987654321"}

    with patch.object(app_module.boto3, "Session", return_value=session):
        env = create_deployment_environment(StackConfiguration(aws_profile="network"))

    assert env.account == "210987654321"
    assert env.region == "us-west-2"


def test_initialize_app_with_sample_configuration(monkeypatch):
    """Verify the bundled configuration synthesizes for the network account."""
    config_dir = Path(__file__).resolve().parents[1] / "config"
    monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", "222222222222")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("CDK_CONTEXT_JSON", json.dumps({"config-dir": str(config_dir)}))

    app = initialize_app()
    stack = app.node.find_child("AWSAccelerator-NetworkVpcStack")
    template = Template.from_stack(stack)

    template.resource_count_is("AWS::EC2::VPC", 1)
    template.resource_count_is("AWS::EC2::VPCEndpoint", 2)
    template.resource_count_is("Custom::DeleteDefaultVpc", 1)
