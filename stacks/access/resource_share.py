"""AWS RAM resource share lookups.

Resources created in one account and shared through AWS Resource Access Manager
(RAM) are discovered by other accounts in two steps: the resource share is
found by owning account and name, then the shared item of a given type is read
from that share. Both steps are read-only lookups evaluated by CloudFormation
at deploy time through Lambda-backed custom resources.
"""

from enum import Enum

from aws_cdk import aws_iam as iam
from constructs import Construct

from stacks.common.custom_resource_base import CustomResourceBase


class ResourceShareOwner(str, Enum):
    """RAM resource owner filter."""

    SELF = "SELF"
    OTHER_ACCOUNTS = "OTHER-ACCOUNTS"


class ResourceShare(CustomResourceBase):
    """A resource share looked up by owner and name.

    Attributes:
        resource_share_owner: Owner filter used for the lookup.
        resource_share_name: Name of the share.
        resource_share_id: Identifier of the share, resolved at deploy time.
        resource_share_arn: ARN of the share, resolved at deploy time.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        resource_share_owner: ResourceShareOwner,
        resource_share_name: str,
        owning_account_id: str | None = None,
    ) -> None:
        """Initialize the resource share lookup.

        Args:
            scope: CDK construct scope.
            construct_id: Unique identifier for this construct.
            resource_share_owner: Whether the share is owned by this or other accounts.
            resource_share_name: Name of the share.
            owning_account_id: Account expected to own the share.
        """
        iam_policy = iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=["ram:GetResourceShares"],
            resources=["*"],
        )

        properties = {
            "resourceOwner": resource_share_owner.value,
            "resourceShareName": resource_share_name,
        }
        if owning_account_id:
            properties["owningAccountId"] = owning_account_id

        super().__init__(
            scope,
            construct_id,
            resource_type="Custom::ResourceShareLookup",
            properties=properties,
            lambda_file_path="get_resource_share",
            iam_statements=[iam_policy],
        )

        self.resource_share_owner = resource_share_owner
        self.resource_share_name = resource_share_name
        self.resource_share_id = self.resource.get_att_string("resourceShareId")
        self.resource_share_arn = self.resource.get_att_string("resourceShareArn")

    @classmethod
    def from_lookup(
        cls,
        scope: Construct,
        construct_id: str,
        *,
        resource_share_owner: ResourceShareOwner,
        resource_share_name: str,
        owning_account_id: str | None = None,
    ) -> "ResourceShare":
        """Look up an existing resource share.

        Args:
            scope: CDK construct scope.
            construct_id: Unique identifier for the lookup construct.
            resource_share_owner: Whether the share is owned by this or other accounts.
            resource_share_name: Name of the share.
            owning_account_id: Account expected to own the share.

        Returns:
            The looked-up resource share.
        """
        return cls(
            scope,
            construct_id,
            resource_share_owner=resource_share_owner,
            resource_share_name=resource_share_name,
            owning_account_id=owning_account_id,
        )


class ResourceShareItem(CustomResourceBase):
    """A resource of a given type contained in a resource share.

    Attributes:
        resource_share: The share the item belongs to.
        resource_share_item_type: RAM resource type, e.g. ``ec2:TransitGateway``.
        resource_share_item_id: Identifier of the shared resource, resolved at deploy time.
        resource_share_item_arn: ARN of the shared resource, resolved at deploy time.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        resource_share: ResourceShare,
        resource_share_item_type: str,
    ) -> None:
        iam_policy = iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=["ram:ListResources"],
            resources=["*"],
        )

        super().__init__(
            scope,
            construct_id,
            resource_type="Custom::ResourceShareItemLookup",
            properties={
                "resourceOwner": resource_share.resource_share_owner.value,
                "resourceShareArn": resource_share.resource_share_arn,
                "resourceShareItemType": resource_share_item_type,
            },
            lambda_file_path="get_resource_share_item",
            iam_statements=[iam_policy],
        )

        self.resource_share = resource_share
        self.resource_share_item_type = resource_share_item_type
        self.resource_share_item_id = self.resource.get_att_string("resourceShareItemId")
        self.resource_share_item_arn = self.resource.get_att_string("resourceShareItemArn")

    @classmethod
    def from_lookup(
        cls,
        scope: Construct,
        construct_id: str,
        *,
        resource_share: ResourceShare,
        resource_share_item_type: str,
    ) -> "ResourceShareItem":
        """Look up the item of the given type in a resource share."""
        return cls(
            scope,
            construct_id,
            resource_share=resource_share,
            resource_share_item_type=resource_share_item_type,
        )
