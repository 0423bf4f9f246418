"""Pre-scan permission probes."""

import asyncio
from datetime import date, timedelta

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from finopsguard.core.config import Settings
from finopsguard.core.exceptions import ValidationError
from finopsguard.providers.aws.client import (
    DEFAULT_SESSION_FACTORY,
    SessionFactory,
    build_client_config,
    create_session,
    error_code,
    error_message,
)
from finopsguard.providers.base import PermissionProber
from finopsguard.schemas.credentials import AssumedCredentials
from finopsguard.schemas.permissions import (
    CheckResult,
    PermissionChecks,
    PermissionReport,
    PermissionServiceError,
)

logger = structlog.get_logger()

COST_EXPLORER_SERVICE = "Cost Explorer"
EC2_SERVICE = "EC2"

PROBE_WINDOW_DAYS = 7
# DescribeInstances rejects MaxResults below 5
EC2_PROBE_MAX_RESULTS = 5

COST_EXPLORER_MESSAGES = {
    "AccessDenied": "Access denied to Cost Explorer. Ensure the role has ce:GetCostAndUsage permission.",
    "AccessDeniedException": "Access denied to Cost Explorer. Ensure the role has ce:GetCostAndUsage permission.",
    "UnrecognizedClientException": "Invalid AWS credentials. Check your access key and secret.",
}

EC2_MESSAGES = {
    "UnauthorizedOperation": "Access denied to EC2. Ensure the role has ec2:DescribeInstances permission.",
    "AuthFailure": "Authentication failed. Check your AWS credentials and region.",
}


def failed_check(error: Exception, messages: dict[str, str]) -> CheckResult:
    """Turn a probe exception into a failed CheckResult with a friendly message."""
    if isinstance(error, ClientError):
        code = error_code(error)
        return CheckResult(success=False, error=messages.get(code, error_message(error)), code=code)
    return CheckResult(success=False, error=str(error), code=type(error).__name__)


class AWSPermissionProber(PermissionProber):
    """Validates the assumed role against Cost Explorer and EC2."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
    ) -> None:
        self.settings = settings
        self.config = build_client_config(settings)
        self.session_factory = session_factory

    async def check_cost_explorer(
        self, credentials: AssumedCredentials, today: date | None = None
    ) -> CheckResult:
        end = today or date.today()
        start = end - timedelta(days=PROBE_WINDOW_DAYS)
        session = create_session(self.session_factory, credentials)
        try:
            async with session.client(
                "ce", region_name=self.settings.COST_EXPLORER_REGION, config=self.config
            ) as ce:
                await ce.get_cost_and_usage(
                    TimePeriod={"Start": start.isoformat(), "End": end.isoformat()},
                    Granularity="DAILY",
                    Metrics=["BlendedCost"],
                )
        except (ClientError, BotoCoreError) as e:
            return failed_check(e, COST_EXPLORER_MESSAGES)
        return CheckResult(success=True)

    async def check_ec2(self, credentials: AssumedCredentials, region: str) -> CheckResult:
        session = create_session(self.session_factory, credentials)
        try:
            async with session.client("ec2", region_name=region, config=self.config) as ec2:
                await ec2.describe_instances(MaxResults=EC2_PROBE_MAX_RESULTS)
        except (ClientError, BotoCoreError) as e:
            return failed_check(e, EC2_MESSAGES)
        return CheckResult(success=True)

    async def validate(self, credentials: AssumedCredentials, region: str) -> PermissionReport:
        cost_explorer, ec2 = await asyncio.gather(
            self.check_cost_explorer(credentials),
            self.check_ec2(credentials, region),
        )

        errors = [
            PermissionServiceError(service=service, error=check.error or "Unknown error", code=check.code)
            for service, check in ((COST_EXPLORER_SERVICE, cost_explorer), (EC2_SERVICE, ec2))
            if not check.success
        ]
        report = PermissionReport(
            success=not errors,
            errors=errors,
            checks=PermissionChecks(cost_explorer=cost_explorer, ec2=ec2),
        )

        if not report.success:
            failed = ", ".join(error.service for error in errors)
            logger.warning(
                "permissions.validation_failed",
                region=region,
                services=failed,
                codes=[error.code for error in errors],
            )
            raise ValidationError(f"Permission validation failed: {failed}", report)

        logger.info("permissions.validated", region=region)
        return report
