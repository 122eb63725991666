"""Entry point for accelerator network infrastructure deployment.

This module loads the accelerator configuration files, resolves account ids and
synthesizes the network VPC stack for the target account and region. It
supports both environment-based and profile-based configuration.

Environment Configuration Options:
    1. AWS Named Profile:
       AWS_PROFILE: Named profile from AWS credentials file

    2. Direct Environment Variables:
       AWS_DEFAULT_REGION: Target AWS region for deployment
       CDK_DEFAULT_ACCOUNT: Target AWS account for deployment

The configuration directory is read from the ``config-dir`` CDK context value
and defaults to ``config``.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

import boto3
import cdk_nag
from aws_cdk import App, Aspects, Environment

from stacks.accelerator_stack import AcceleratorStackProps
from stacks.configs.accounts_config import AccountsConfig, resolve_account_ids
from stacks.configs.network_config import NetworkConfig
from stacks.network import NetworkVpcStack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackConfiguration:
    """Configuration settings for stack deployment.

    Attributes:
        app_name: Base name for stack resources and identifiers.
        environment: Optional deployment environment name.
        aws_profile: Optional AWS credentials profile name.
    """

    app_name: str = "AWSAccelerator"
    environment: str | None = None
    aws_profile: str | None = None

    @property
    def stack_name(self) -> str:
        """Generate stack name with environment suffix when applicable."""
        if self.environment:
            return f"{self.app_name}Stack-{self.environment}"
        return f"{self.app_name}Stack"

    def with_app_name(self, app_name: str) -> "StackConfiguration":
        """Create new configuration with updated app name."""
        return replace(self, app_name=app_name)


def create_deployment_environment(config: StackConfiguration) -> Environment:
    """Creates CDK Environment from configuration.

    Args:
        config: Stack configuration containing environment details.

    Returns:
        CDK Environment with account and region resolved.
    """
    if config.aws_profile:
        session = boto3.Session(profile_name=config.aws_profile)
        sts = session.client("sts")
        account = sts.get_caller_identity()["Account"]
        return Environment(
            account=account,
            region=session.region_name or "us-east-1",
        )

    return Environment(
        account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
    )


def initialize_app(
    environment: str | None = None,
    aws_profile: str | None = None,
) -> App:
    """Initializes and configures the CDK application.

    Args:
        environment: Optional deployment environment name.
        aws_profile: Optional AWS credentials profile to use.

    Returns:
        Configured CDK App instance ready for synthesis.
    """
    config = StackConfiguration(environment=environment, aws_profile=aws_profile)
    env = create_deployment_environment(config)
    app = App()

    config_dir = Path(app.node.try_get_context("config-dir") or "config")
    logger.info(f"Loading configuration from {config_dir}")
    accounts_config = AccountsConfig.load(config_dir)
    network_config = NetworkConfig.load(config_dir)

    session = boto3.Session(profile_name=aws_profile) if aws_profile else None
    props = AcceleratorStackProps(
        accounts_config=accounts_config,
        network_config=network_config,
        account_ids=resolve_account_ids(accounts_config, session=session),
    )

    NetworkVpcStack(
        app,
        config.with_app_name("AWSAccelerator-NetworkVpc").stack_name,
        props=props,
        env=env,
        description="Accelerator VPCs, subnets, routing and transit gateway attachments",
        tags={
            "Environment": environment or "dev",
            "Application": config.app_name,
            "ManagedBy": "AWS-CDK",
        },
    )

    Aspects.of(app).add(cdk_nag.AwsSolutionsChecks(verbose=True))
    return app


def main() -> None:
    """Main execution entry point."""
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    environment = os.environ.get("ENVIRONMENT")
    aws_profile = os.environ.get("AWS_PROFILE")

    app = initialize_app(environment=environment, aws_profile=aws_profile)
    app.synth()


if __name__ == "__main__":
    main()
