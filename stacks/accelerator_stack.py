"""Base stack for accelerator deployments.

Every accelerator stack receives the validated configuration files and the
resolved account ids, and publishes its own CloudFormation stack id to SSM
Parameter Store so other stacks and tooling can find it.
"""

from dataclasses import dataclass

import aws_cdk as cdk
from aws_cdk import aws_ssm as ssm
from constructs import Construct

from stacks.configs.accounts_config import AccountsConfig
from stacks.configs.network_config import NetworkConfig
from stacks.errors import ConfigurationError


@dataclass(frozen=True)
class AcceleratorStackProps:
    """Configuration shared by all accelerator stacks.

    Attributes:
        accounts_config: Account names, e-mail addresses and organization id.
        network_config: Network topology.
        account_ids: Mapping of account e-mail address to account id.
    """

    accounts_config: AccountsConfig
    network_config: NetworkConfig
    account_ids: dict[str, str]


class AcceleratorStack(cdk.Stack):
    """Stack carrying accelerator configuration and publishing its stack id."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        props: AcceleratorStackProps,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.props = props

        ssm.StringParameter(
            self,
            "SsmParamStackId",
            parameter_name=f"/accelerator/{self.stack_name}/stack-id",
            string_value=self.stack_id,
        )

    def get_account_id(self, name: str) -> str:
        """Resolve an account name from the configuration to its account id.

        Args:
            name: Logical account name.

        Returns:
            The 12-digit account id.

        Raises:
            ConfigurationError: If the account or its id is unknown.
        """
        email = self.props.accounts_config.get_email(name)
        account_id = self.props.account_ids.get(email)
        if account_id is None:
            msg = f"Account id for {name} ({email}) not resolved"
            raise ConfigurationError(msg)
        return account_id
