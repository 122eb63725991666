"""Global pytest configuration and fixtures for CDK testing."""

import os
import sys
from pathlib import Path

import pytest

# Add the repository root to Python path for imports
repo_path = Path(__file__).parent.parent
if str(repo_path) not in sys.path:
    sys.path.insert(0, str(repo_path))

from stacks.accelerator_stack import AcceleratorStackProps  # noqa: E402
from stacks.configs.accounts_config import AccountsConfig  # noqa: E402
from stacks.configs.network_config import NetworkConfig  # noqa: E402

WORKLOAD_ACCOUNT_ID = "123456789012"
NETWORK_ACCOUNT_ID = "210987654321"
OTHER_ACCOUNT_ID = "555555555555"


@pytest.fixture(scope="session", autouse=True)
def configure_test_environment():
    """Configure environment variables for consistent testing."""
    test_env = {
        "AWS_DEFAULT_REGION": "us-east-1",
        "AWS_REGION": "us-east-1",
        "CDK_DEFAULT_REGION": "us-east-1",
        "CDK_DEFAULT_ACCOUNT": WORKLOAD_ACCOUNT_ID,
        "CDK_DISABLE_VERSION_CHECK": "true",
        # Prevent actual AWS API calls during testing
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "POWERTOOLS_SERVICE_NAME": "test",
    }

    for key, value in test_env.items():
        if key not in os.environ:
            os.environ[key] = value


@pytest.fixture
def accounts_config():
    """Accounts configuration with a workload, a network and an unrelated account."""
    return AccountsConfig.model_validate(
        {
            "organizationId": "o-abc123def4",
            "mandatoryAccounts": [
                {"name": "Network", "email": "network@example.com"},
            ],
            "workloadAccounts": [
                {"name": "Workload", "email": "workload@example.com"},
                {"name": "Other", "email": "other@example.com"},
            ],
        },
    )


@pytest.fixture
def account_ids():
    """Resolved account ids keyed by account e-mail."""
    return {
        "workload@example.com": WORKLOAD_ACCOUNT_ID,
        "network@example.com": NETWORK_ACCOUNT_ID,
        "other@example.com": OTHER_ACCOUNT_ID,
    }


@pytest.fixture
def make_props(accounts_config, account_ids):
    """Build stack props from a raw network configuration dictionary."""

    def _make_props(network_config: dict) -> AcceleratorStackProps:
        return AcceleratorStackProps(
            accounts_config=accounts_config,
            network_config=NetworkConfig.model_validate(network_config),
            account_ids=account_ids,
        )

    return _make_props


@pytest.fixture
def public_vpc_config():
    """Single public VPC with an internet gateway route."""
    return {
        "name": "A",
        "account": "Workload",
        "region": "us-east-1",
        "cidrs": ["10.0.0.0/16"],
        "internetGateway": True,
        "routeTables": [
            {
                "name": "Public",
                "routes": [
                    {
                        "name": "Igw",
                        "destination": "0.0.0.0/0",
                        "type": "internetGateway",
                        "target": "IGW",
                    },
                ],
            },
        ],
        "subnets": [
            {
                "name": "Web",
                "availabilityZone": "a",
                "routeTable": "Public",
                "ipv4CidrBlock": "10.0.0.0/24",
            },
        ],
    }
