"""
Lambda handler for the resource share lookup custom resource.

Finds an AWS RAM resource share by name and owning account so that stacks in
other accounts can discover resources published through RAM.
"""

from typing import Any, Dict, Optional

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

logger = Logger()
ram_client = boto3.client("ram")


def find_resource_share(
    name: str, owner: str, owning_account_id: Optional[str]
) -> Optional[Dict[str, Any]]:
    """
    Find an active resource share by name and owning account.

    Args:
        name: Name of the resource share
        owner: RAM resource owner filter (SELF or OTHER-ACCOUNTS)
        owning_account_id: Account that owns the share; any account when None

    Returns:
        The matching resource share, or None when no share matches
    """
    paginator = ram_client.get_paginator("get_resource_shares")
    for page in paginator.paginate(resourceOwner=owner, name=name):
        for share in page.get("resourceShares", []):
            if share.get("status") != "ACTIVE":
                continue
            if owning_account_id and share.get("owningAccountId") != owning_account_id:
                continue
            return share
    return None


@logger.inject_lambda_context
def on_event_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Handle custom resource lifecycle events.

    Args:
        event: CloudFormation custom resource event
        context: Lambda execution context

    Returns:
        Provider framework response with the resource share id and ARN

    Raises:
        ValueError: If no matching resource share exists
    """
    logger.info("Resource share lookup event received", extra={"event": event})

    request_type = event["RequestType"]
    properties = event.get("ResourceProperties", {})

    if request_type == "Delete":
        return {"PhysicalResourceId": event["PhysicalResourceId"]}

    name = properties["resourceShareName"]
    owning_account_id = properties.get("owningAccountId")
    share = find_resource_share(
        name, properties.get("resourceOwner", "OTHER-ACCOUNTS"), owning_account_id
    )
    if share is None:
        logger.error(
            "Resource share not found",
            extra={"resource_share_name": name, "owning_account_id": owning_account_id},
        )
        raise ValueError(
            f"Resource share {name} owned by {owning_account_id} not found"
        )

    share_arn = share["resourceShareArn"]
    logger.info("Resource share found", extra={"resource_share_arn": share_arn})
    return {
        "PhysicalResourceId": share_arn,
        "Data": {
            "resourceShareArn": share_arn,
            "resourceShareId": share_arn.split("/")[-1],
        },
    }
