"""Configuration module for accelerator account settings.

Accounts are referenced by name throughout the network configuration. The
accounts configuration maps those names to e-mail addresses, and the e-mail
addresses are mapped to AWS account IDs either explicitly or through AWS
Organizations.
"""

import logging
from pathlib import Path
from typing import Final

import boto3
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stacks.common.utils import load_json_config
from stacks.errors import ConfigurationError

logger = logging.getLogger(__name__)

ACCOUNTS_CONFIG_FILE: Final[str] = "accounts-config.json"


class AccountConfig(BaseModel):
    """Configuration model for a single AWS account.

    Attributes:
        name: Logical account name referenced from other configuration files.
        email: Root e-mail address of the account, unique within the organization.
        description: Free-form description of the account purpose.
        account_id: Optional explicit account ID. When omitted the ID is
            resolved from AWS Organizations by e-mail.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    name: str
    email: str
    description: str = ""
    account_id: str | None = Field(default=None, pattern=r"^\d{12}$")


class AccountsConfig(BaseModel):
    """Configuration model for all accounts managed by the accelerator.

    Attributes:
        mandatory_accounts: Core accounts (management, audit, log archive, network).
        workload_accounts: Application and workload accounts.
        organization_id: Optional AWS Organizations ID used in resource policies.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    mandatory_accounts: list[AccountConfig] = Field(default_factory=list)
    workload_accounts: list[AccountConfig] = Field(default_factory=list)
    organization_id: str | None = None

    @property
    def accounts(self) -> list[AccountConfig]:
        """All configured accounts, mandatory accounts first."""
        return [*self.mandatory_accounts, *self.workload_accounts]

    def get_email(self, name: str) -> str:
        """Return the e-mail address of the account with the given name.

        Args:
            name: Logical account name.

        Returns:
            The account e-mail address.

        Raises:
            ConfigurationError: If no account with that name is configured.
        """
        for account in self.accounts:
            if account.name == name:
                return account.email
        msg = f"Account {name} not defined in accounts configuration"
        raise ConfigurationError(msg)

    @classmethod
    def load(cls, config_dir: Path) -> "AccountsConfig":
        """Load the accounts configuration from a configuration directory.

        Args:
            config_dir: Directory containing ``accounts-config.json``.

        Returns:
            Validated accounts configuration.
        """
        return cls.model_validate(load_json_config(ACCOUNTS_CONFIG_FILE, config_dir))


def resolve_account_ids(
    accounts_config: AccountsConfig,
    session: boto3.Session | None = None,
) -> dict[str, str]:
    """Build the e-mail to account ID mapping for all configured accounts.

    Explicit ``account_id`` values are used as-is. Remaining accounts are looked
    up in AWS Organizations, which requires credentials for the management
    account.

    Args:
        accounts_config: Accounts configuration to resolve.
        session: Optional boto3 session; the default session is used otherwise.

    Returns:
        Mapping of account e-mail address to 12-digit account ID.

    Raises:
        ConfigurationError: If an account e-mail is not found in the organization.
    """
    account_ids = {
        account.email: account.account_id
        for account in accounts_config.accounts
        if account.account_id
    }
    unresolved = [
        account.email for account in accounts_config.accounts if not account.account_id
    ]
    if not unresolved:
        return account_ids

    logger.info(f"Resolving {len(unresolved)} account ids from AWS Organizations")
    client = (session or boto3).client("organizations")
    organization_ids: dict[str, str] = {}
    for page in client.get_paginator("list_accounts").paginate():
        for account in page.get("Accounts", []):
            organization_ids[account["Email"].lower()] = account["Id"]

    for email in unresolved:
        account_id = organization_ids.get(email.lower())
        if account_id is None:
            msg = f"Account with email {email} not found in the organization"
            raise ConfigurationError(msg)
        account_ids[email] = account_id

    return account_ids
