"""Abstract interfaces for the scan pipeline's external collaborators.

The AWS and mock implementations both implement every interface here; the
set to use is picked once at composition time (see ``build_provider_set``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta

from finopsguard.core.money import round_money
from finopsguard.schemas.cost import CostSummary
from finopsguard.schemas.credentials import AssumedCredentials, BaseCredentials
from finopsguard.schemas.permissions import PermissionReport
from finopsguard.schemas.resource import BlockSnapshot, BlockVolume, ComputeInstance
from finopsguard.services.cost_summary import DAYS_PER_MONTH


class CredentialBroker(ABC):
    """Exchanges a role ARN for temporary credentials."""

    @abstractmethod
    async def assume_role(
        self,
        role_arn: str,
        session_name: str,
        external_id: str | None = None,
        base_credentials: BaseCredentials | None = None,
        duration_seconds: int = 3600,
    ) -> AssumedCredentials:
        """
        Assume an IAM role.

        Raises:
            AssumeRoleError: If the ARN is malformed or STS rejects the call
        """


class PermissionProber(ABC):
    """Probes every capability the scan needs before collection starts."""

    @abstractmethod
    async def validate(self, credentials: AssumedCredentials, region: str) -> PermissionReport:
        """
        Run all probes and aggregate the outcome.

        Raises:
            ValidationError: If any probe fails (carries the full report)
        """


class InstanceCollector(ABC):
    """Lists EC2 instances."""

    @abstractmethod
    async def collect(
        self,
        credentials: AssumedCredentials,
        region: str,
        include_metrics: bool = False,
    ) -> list[ComputeInstance]:
        """Return every instance in the region, optionally with CPU utilization."""


class VolumeCollector(ABC):
    """Lists EBS volumes."""

    @abstractmethod
    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockVolume]:
        """Return every volume in the region."""


class SnapshotCollector(ABC):
    """Lists EBS snapshots owned by the account."""

    @abstractmethod
    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockSnapshot]:
        """Return every snapshot owned by the account in the region."""


class CostCollector(ABC):
    """Fetches account spend grouped by service."""

    @abstractmethod
    async def get_cost_by_service(
        self,
        credentials: AssumedCredentials,
        start: date,
        end: date,
    ) -> CostSummary:
        """
        Return monthly-normalized spend for ``[start, end)``.

        Raises:
            CostExplorerError: On an invalid window or a provider failure
        """

    async def get_last_days_cost_by_service(
        self, credentials: AssumedCredentials, days: int = 30, today: date | None = None
    ) -> CostSummary:
        """Spend over the trailing ``days`` window ending today."""
        end = today or date.today()
        return await self.get_cost_by_service(credentials, end - timedelta(days=days), end)

    async def get_service_cost(
        self,
        credentials: AssumedCredentials,
        service: str,
        start: date,
        end: date,
    ) -> float:
        """Period cost for one service (0 when the service has no spend)."""
        summary = await self.get_cost_by_service(credentials, start, end)
        for line in summary.services:
            if line.service == service:
                return round_money(line.cost / DAYS_PER_MONTH * summary.period.days)
        return 0.0


@dataclass(frozen=True)
class ProviderSet:
    """One complete implementation of every external interface."""

    broker: CredentialBroker
    prober: PermissionProber
    instances: InstanceCollector
    volumes: VolumeCollector
    snapshots: SnapshotCollector
    costs: CostCollector
