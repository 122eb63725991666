"""
Lambda handler for the resource share item lookup custom resource.

Resolves the identifier of a resource of a given type (for example
``ec2:TransitGateway``) shared through an AWS RAM resource share.
"""

from typing import Any, Dict, List

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

logger = Logger()
ram_client = boto3.client("ram")


def list_shared_resources(
    resource_share_arn: str, resource_type: str, owner: str
) -> List[Dict[str, Any]]:
    """
    List the resources of one type contained in a resource share.

    Args:
        resource_share_arn: ARN of the resource share
        resource_type: RAM resource type, e.g. ec2:TransitGateway
        owner: RAM resource owner filter (SELF or OTHER-ACCOUNTS)

    Returns:
        The shared resources, in the order RAM returns them
    """
    resources: List[Dict[str, Any]] = []
    paginator = ram_client.get_paginator("list_resources")
    for page in paginator.paginate(
        resourceOwner=owner,
        resourceShareArns=[resource_share_arn],
        resourceType=resource_type,
    ):
        resources.extend(page.get("resources", []))
    return resources


def resource_id_from_arn(arn: str) -> str:
    """Return the resource id part of an ARN such as ``...:transit-gateway/tgw-123``."""
    return arn.split(":")[-1].split("/")[-1]


@logger.inject_lambda_context
def on_event_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Handle custom resource lifecycle events.

    Args:
        event: CloudFormation custom resource event
        context: Lambda execution context

    Returns:
        Provider framework response with the shared item id and ARN

    Raises:
        ValueError: If the share contains no resource of the requested type
    """
    logger.info("Resource share item lookup event received", extra={"event": event})

    request_type = event["RequestType"]
    properties = event.get("ResourceProperties", {})

    if request_type == "Delete":
        return {"PhysicalResourceId": event["PhysicalResourceId"]}

    resource_share_arn = properties["resourceShareArn"]
    resource_type = properties["resourceShareItemType"]
    resources = list_shared_resources(
        resource_share_arn,
        resource_type,
        properties.get("resourceOwner", "OTHER-ACCOUNTS"),
    )
    if not resources:
        logger.error(
            "No shared resource found",
            extra={
                "resource_share_arn": resource_share_arn,
                "resource_type": resource_type,
            },
        )
        raise ValueError(
            f"No {resource_type} resource found in resource share {resource_share_arn}"
        )

    item_arn = resources[0]["arn"]
    logger.info("Shared resource found", extra={"resource_arn": item_arn})
    return {
        "PhysicalResourceId": item_arn,
        "Data": {
            "resourceShareItemArn": item_arn,
            "resourceShareItemId": resource_id_from_arn(item_arn),
        },
    }
