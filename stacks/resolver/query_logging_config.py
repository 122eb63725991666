"""Route53 Resolver query logging constructs.

Query logging configurations deliver DNS queries made from associated VPCs to
an S3 bucket or a CloudWatch Logs log group. Log group destinations receive a
resource policy allowing log delivery, and, when the log group is encrypted
with a customer managed KMS key, the key policy is extended so CloudWatch Logs
and the log delivery service can use it.
"""

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk import aws_logs as logs
from aws_cdk import aws_route53resolver as route53resolver
from aws_cdk import aws_s3 as s3
from constructs import Construct

LOG_DELIVERY_SERVICE = "delivery.logs.amazonaws.com"

KMS_LOGS_ACTIONS = [
    "kms:Encrypt*",
    "kms:Decrypt*",
    "kms:ReEncrypt*",
    "kms:GenerateDataKey*",
    "kms:Describe*",
]


class QueryLoggingConfig(cdk.Resource):
    """Route53 Resolver query logging configuration.

    Exactly one destination, ``s3_bucket`` or ``log_group``, must be given.

    Attributes:
        log_id: Identifier of the query logging configuration.
        name: Name of the query logging configuration.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        name: str,
        s3_bucket: s3.IBucket | None = None,
        log_group: logs.ILogGroup | None = None,
        key: kms.IKey | None = None,
        organization_id: str | None = None,
    ) -> None:
        """Initialize the query logging configuration.

        Args:
            scope: CDK construct scope.
            construct_id: Unique identifier for this construct.
            name: Name of the query logging configuration.
            s3_bucket: Destination bucket.
            log_group: Destination log group.
            key: KMS key encrypting the log group.
            organization_id: Restrict log delivery to principals of this organization.

        Raises:
            ValueError: If not exactly one destination is given.
        """
        super().__init__(scope, construct_id)

        if (s3_bucket is None) == (log_group is None):
            msg = f"Query logging config {name} requires exactly one destination"
            raise ValueError(msg)

        self.name = name

        if s3_bucket is not None:
            destination_arn = s3_bucket.bucket_arn
        else:
            destination_arn = log_group.log_group_arn
            self._add_log_group_policy(log_group, organization_id)
            if key is not None:
                self._add_key_policy(key, organization_id)

        resource = route53resolver.CfnResolverQueryLoggingConfig(
            self,
            "Resource",
            destination_arn=destination_arn,
            name=name,
        )
        self.log_id: str = resource.attr_id

    def _add_log_group_policy(
        self,
        log_group: logs.ILogGroup,
        organization_id: str | None,
    ) -> None:
        """Allow the log delivery service to write query logs to the log group."""
        conditions = None
        if organization_id:
            conditions = {"StringEquals": {"aws:PrincipalOrgId": organization_id}}

        log_group.add_to_resource_policy(
            iam.PolicyStatement(
                sid="Allow log delivery access",
                effect=iam.Effect.ALLOW,
                principals=[iam.ServicePrincipal(LOG_DELIVERY_SERVICE)],
                actions=["logs:CreateLogStream", "logs:PutLogEvents"],
                resources=[f"{log_group.log_group_arn}:log-stream:*"],
                conditions=conditions,
            ),
        )

    def _add_key_policy(self, key: kms.IKey, organization_id: str | None) -> None:
        """Allow CloudWatch Logs and log delivery to use the log group key."""
        stack = cdk.Stack.of(self)
        logs_arn_condition = {
            "ArnLike": {
                "kms:EncryptionContext:aws:logs:arn": (
                    f"arn:{stack.partition}:logs:{stack.region}:{stack.account}:*"
                ),
            },
        }

        key.add_to_resource_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                principals=[iam.ServicePrincipal(f"logs.{stack.region}.amazonaws.com")],
                actions=KMS_LOGS_ACTIONS,
                resources=["*"],
                conditions=logs_arn_condition,
            ),
        )

        delivery_conditions = dict(logs_arn_condition)
        if organization_id:
            delivery_conditions["StringEquals"] = {"aws:PrincipalOrgId": organization_id}

        key.add_to_resource_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                principals=[iam.ServicePrincipal(LOG_DELIVERY_SERVICE)],
                actions=KMS_LOGS_ACTIONS,
                resources=["*"],
                conditions=delivery_conditions,
            ),
        )


class QueryLoggingConfigAssociation(cdk.Resource):
    """Associates a query logging configuration with a VPC."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        resolver_query_log_config_id: str,
        vpc_id: str,
    ) -> None:
        super().__init__(scope, construct_id)

        route53resolver.CfnResolverQueryLoggingConfigAssociation(
            self,
            "Resource",
            resolver_query_log_config_id=resolver_query_log_config_id,
            resource_id=vpc_id,
        )
