"""Fixture-backed implementations of every provider interface."""

from datetime import date, datetime, timedelta
from typing import Callable

import structlog

from finopsguard.providers.aws.client import utc_now
from finopsguard.providers.aws.sts import clamp_duration, validate_role_arn
from finopsguard.providers.base import (
    CostCollector,
    CredentialBroker,
    InstanceCollector,
    PermissionProber,
    SnapshotCollector,
    VolumeCollector,
)
from finopsguard.providers.mock.fixtures import (
    MOCK_MONTHLY_SERVICE_COSTS,
    mock_instances,
    mock_snapshots,
    mock_volumes,
)
from finopsguard.schemas.cost import CostSummary
from finopsguard.schemas.credentials import AssumedCredentials, BaseCredentials
from finopsguard.schemas.permissions import CheckResult, PermissionChecks, PermissionReport
from finopsguard.schemas.resource import BlockSnapshot, BlockVolume, ComputeInstance
from finopsguard.services.cost_summary import DAYS_PER_MONTH, build_cost_summary, validate_window

logger = structlog.get_logger()


class MockCredentialBroker(CredentialBroker):
    """Issues fake credentials; the role ARN is still validated."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self.clock = clock

    async def assume_role(
        self,
        role_arn: str,
        session_name: str,
        external_id: str | None = None,
        base_credentials: BaseCredentials | None = None,
        duration_seconds: int = 3600,
    ) -> AssumedCredentials:
        validate_role_arn(role_arn)
        logger.info("mock.assume_role", role_arn=role_arn, session_name=session_name)
        return AssumedCredentials(
            access_key_id="ASIAMOCKACCESSKEY",
            secret_access_key="mock-secret-access-key",
            session_token="mock-session-token",
            expiration=self.clock() + timedelta(seconds=clamp_duration(duration_seconds)),
        )


class MockPermissionProber(PermissionProber):
    async def validate(self, credentials: AssumedCredentials, region: str) -> PermissionReport:
        return PermissionReport(
            success=True,
            errors=[],
            checks=PermissionChecks(
                cost_explorer=CheckResult(success=True),
                ec2=CheckResult(success=True),
            ),
        )


class MockInstanceCollector(InstanceCollector):
    async def collect(
        self,
        credentials: AssumedCredentials,
        region: str,
        include_metrics: bool = False,
    ) -> list[ComputeInstance]:
        instances = mock_instances(region)
        if not include_metrics:
            instances = [i.model_copy(update={"cpu_utilization": None}) for i in instances]
        return instances


class MockVolumeCollector(VolumeCollector):
    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockVolume]:
        return mock_volumes(region)


class MockSnapshotCollector(SnapshotCollector):
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self.clock = clock

    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockSnapshot]:
        return mock_snapshots(self.clock(), region)


class MockCostCollector(CostCollector):
    """
    Rescales the fixture monthly spend to the requested window and runs it
    through the same normalization as the real collector.
    """

    async def get_cost_by_service(
        self,
        credentials: AssumedCredentials,
        start: date,
        end: date,
    ) -> CostSummary:
        days = validate_window(start, end)
        raw = {
            service: monthly * days / DAYS_PER_MONTH
            for service, monthly in MOCK_MONTHLY_SERVICE_COSTS.items()
        }
        return build_cost_summary(raw, start, end)
