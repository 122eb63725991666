"""Base construct for Lambda-backed custom resources.

Provides a standardized foundation for custom resources whose lifecycle events
are handled by a Python Lambda function shipped in ``stacks/lambdas``. The
handler function and provider framework are created once per stack and per
handler, and shared by every custom resource instance that uses them.
"""

from pathlib import Path

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_logs as logs
from aws_cdk.custom_resources import Provider
from cdk_nag import NagSuppressions
from constructs import Construct

from stacks.common.utils import pascal_case

LAMBDAS_PATH = Path(__file__).resolve().parents[1] / "lambdas"


def get_powertools_layer(scope: Construct, region: str) -> lambda_.ILayerVersion:
    """Get the AWS Lambda Powertools layer for Python 3.12 on arm64.

    Args:
        scope: Construct scope for resource lookup.
        region: AWS region for layer ARN.

    Returns:
        The Lambda layer for AWS Powertools.
    """
    return lambda_.LayerVersion.from_layer_version_arn(
        scope,
        "PowertoolsLayer",
        f"arn:aws:lambda:{region}:017000801446:layer:AWSLambdaPowertoolsPythonV3-python312-arm64:7",
    )


class CustomResourceProvider(Construct):
    """Event handler Lambda and provider framework for one handler directory.

    Attributes:
        service_token: Token custom resources use to reach the provider.
        on_event_handler: The Lambda function handling lifecycle events.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        lambda_file_path: str,
        iam_statements: list[iam.PolicyStatement],
        python_version: lambda_.Runtime = lambda_.Runtime.PYTHON_3_12,
        architecture: lambda_.Architecture = lambda_.Architecture.ARM_64,
        timeout: cdk.Duration | None = None,
    ) -> None:
        """Initialize the handler function and provider framework.

        Args:
            scope: CDK construct scope, normally the stack.
            construct_id: Unique identifier for this construct.
            lambda_file_path: Handler directory relative to ``stacks/lambdas``.
            iam_statements: IAM policy statements for the handler.
            python_version: Python runtime version for the handler.
            architecture: CPU architecture for the handler.
            timeout: Handler timeout, three minutes by default.
        """
        super().__init__(scope, construct_id)

        region = cdk.Stack.of(self).region

        self.on_event_handler = lambda_.Function(
            self,
            "EventHandler",
            runtime=python_version,
            handler="index.on_event_handler",
            architecture=architecture,
            code=lambda_.Code.from_asset(str(LAMBDAS_PATH / lambda_file_path)),
            timeout=timeout or cdk.Duration.minutes(3),
            initial_policy=iam_statements,
            layers=[get_powertools_layer(self, region)],
            environment={
                "POWERTOOLS_SERVICE_NAME": f"custom-resource-{lambda_file_path.replace('_', '-')}",
                "LOG_LEVEL": "INFO",
            },
        )

        provider = Provider(
            self,
            "Provider",
            on_event_handler=self.on_event_handler,
            log_retention=logs.RetentionDays.ONE_WEEK,
        )
        self.service_token = provider.service_token

        NagSuppressions.add_resource_suppressions(
            self,
            [
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "AWSLambdaBasicExecutionRole is required for custom resource handlers.",
                },
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "Describe and lookup APIs used by the handler do not support resource-level permissions.",
                },
                {
                    "id": "AwsSolutions-L1",
                    "reason": "Provider framework runtime is managed by the CDK.",
                },
            ],
            apply_to_children=True,
        )

    @classmethod
    def of(
        cls,
        scope: Construct,
        *,
        lambda_file_path: str,
        iam_statements: list[iam.PolicyStatement],
        timeout: cdk.Duration | None = None,
    ) -> "CustomResourceProvider":
        """Return the stack-wide provider for a handler, creating it on first use.

        Args:
            scope: Any construct inside the target stack.
            lambda_file_path: Handler directory relative to ``stacks/lambdas``.
            iam_statements: IAM policy statements used when the provider is created.
            timeout: Handler timeout used when the provider is created.

        Returns:
            The provider shared by all custom resources of this handler.
        """
        stack = cdk.Stack.of(scope)
        provider_id = f"{pascal_case(lambda_file_path)}Provider"
        existing = stack.node.try_find_child(provider_id)
        if existing is not None:
            return existing  # type: ignore[return-value]
        return cls(
            stack,
            provider_id,
            lambda_file_path=lambda_file_path,
            iam_statements=iam_statements,
            timeout=timeout,
        )


class CustomResourceBase(Construct):
    """Custom resource backed by a shared CustomResourceProvider.

    Attributes:
        resource: The underlying CloudFormation custom resource.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        resource_type: str,
        properties: dict,
        lambda_file_path: str,
        iam_statements: list[iam.PolicyStatement],
        timeout: cdk.Duration | None = None,
    ) -> None:
        """Initialize the custom resource.

        Args:
            scope: CDK construct scope.
            construct_id: Unique identifier for this construct.
            resource_type: CloudFormation type name, e.g. ``Custom::DeleteDefaultVpc``.
            properties: Properties passed to the handler.
            lambda_file_path: Handler directory relative to ``stacks/lambdas``.
            iam_statements: IAM policy statements for the handler.
            timeout: Handler timeout.
        """
        super().__init__(scope, construct_id)

        provider = CustomResourceProvider.of(
            self,
            lambda_file_path=lambda_file_path,
            iam_statements=iam_statements,
            timeout=timeout,
        )

        self.resource = cdk.CustomResource(
            self,
            "Resource",
            service_token=provider.service_token,
            resource_type=resource_type,
            properties=properties,
        )
