"""Scan orchestration: role assumption through result assembly."""

import asyncio
import secrets
import string
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterator

import structlog

from finopsguard.core.config import Settings
from finopsguard.core.exceptions import (
    FinOpsGuardError,
    InvalidScanResultError,
    ScanError,
    ScanTimeoutError,
)
from finopsguard.providers.base import ProviderSet
from finopsguard.schemas.credentials import BaseCredentials
from finopsguard.schemas.scan import (
    ResourceInventory,
    ScanOptions,
    ScanResult,
    ScanStage,
    ScanSummary,
)
from finopsguard.services.rules_engine import RulesEngine
from finopsguard.services.savings_calculator import SavingsCalculator

logger = structlog.get_logger()

SCAN_ID_ALPHABET = string.digits + string.ascii_lowercase
SCAN_ID_SUFFIX_LENGTH = 7


def generate_scan_id() -> str:
    """``scan-<epoch ms>-<7 base36 chars>``."""
    suffix = "".join(secrets.choice(SCAN_ID_ALPHABET) for _ in range(SCAN_ID_SUFFIX_LENGTH))
    return f"scan-{int(time.time() * 1000)}-{suffix}"


def base_credentials_from_settings(settings: Settings) -> BaseCredentials | None:
    """Explicit STS credentials, or None to fall back to the default chain."""
    if not settings.has_explicit_aws_credentials:
        return None
    return BaseCredentials(
        access_key_id=settings.AWS_ACCESS_KEY_ID.strip(),
        secret_access_key=settings.AWS_SECRET_ACCESS_KEY.strip(),
        session_token=settings.AWS_SESSION_TOKEN.strip() or None,
    )


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; the first failure cancels the others."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class _ScanProgress:
    """Tracks the current stage so a timeout can report where it happened."""

    def __init__(self, scan_id: str) -> None:
        self.scan_id = scan_id
        self.stage = ScanStage.ASSUMING_ROLE
        self.started = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


class ScanService:
    """
    Runs one scan end to end.

    Every failure is terminal and surfaces as a ``ScanError`` carrying the
    stage that failed and the underlying cause's code and message.
    """

    def __init__(
        self,
        settings: Settings,
        providers: ProviderSet,
        rules_engine: RulesEngine | None = None,
        calculator: SavingsCalculator | None = None,
    ) -> None:
        self.settings = settings
        self.providers = providers
        self.rules_engine = rules_engine or RulesEngine(rules_path=settings.RULES_PATH or None)
        self.calculator = calculator or SavingsCalculator()

    async def run_scan(self, options: ScanOptions) -> ScanResult:
        progress = _ScanProgress(generate_scan_id())
        logger.info(
            "scan.started",
            scan_id=progress.scan_id,
            region=options.region,
            role_arn=options.role_arn,
            include_metrics=options.include_metrics,
        )

        try:
            result = await asyncio.wait_for(
                self._run(options, progress), timeout=self.settings.SCAN_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.error(
                "scan.timeout",
                scan_id=progress.scan_id,
                stage=progress.stage.value,
                elapsed_ms=progress.elapsed_ms,
            )
            raise ScanError(
                progress.stage.value,
                ScanTimeoutError(
                    f"Scan exceeded the {self.settings.SCAN_TIMEOUT_SECONDS:g}s time limit"
                ),
            ) from None

        logger.info(
            "scan.completed",
            scan_id=result.scan_id,
            issues=len(result.issues),
            total_cost=result.cost_summary.total_cost,
            monthly_savings=result.savings.total_monthly_savings,
            elapsed_ms=progress.elapsed_ms,
        )
        return result

    @contextmanager
    def _stage(self, progress: _ScanProgress, stage: ScanStage) -> Iterator[None]:
        progress.stage = stage
        logger.info(
            "scan.stage", scan_id=progress.scan_id, stage=stage.value, elapsed_ms=progress.elapsed_ms
        )
        try:
            yield
        except FinOpsGuardError as e:
            logger.warning(
                "scan.stage_failed",
                scan_id=progress.scan_id,
                stage=stage.value,
                code=e.code,
                error=e.message,
            )
            raise ScanError(stage.value, e) from e
        except Exception as e:
            logger.exception("scan.stage_error", scan_id=progress.scan_id, stage=stage.value)
            raise ScanError(
                stage.value, FinOpsGuardError(f"Unexpected error during {stage.value}: {e}", original_error=e)
            ) from e

    async def _run(self, options: ScanOptions, progress: _ScanProgress) -> ScanResult:
        timestamp = datetime.now(timezone.utc)
        region = options.region

        with self._stage(progress, ScanStage.ASSUMING_ROLE):
            credentials = await self.providers.broker.assume_role(
                role_arn=options.role_arn,
                session_name=f"finops-scan-{progress.scan_id}",
                external_id=options.external_id,
                base_credentials=base_credentials_from_settings(self.settings),
                duration_seconds=self.settings.ASSUME_ROLE_DURATION_SECONDS,
            )

        with self._stage(progress, ScanStage.VALIDATING_PERMISSIONS):
            await self.providers.prober.validate(credentials, region)

        with self._stage(progress, ScanStage.COLLECTING):
            if options.cost_window is not None:
                cost_call = self.providers.costs.get_cost_by_service(
                    credentials, options.cost_window.start, options.cost_window.end
                )
            else:
                cost_call = self.providers.costs.get_last_days_cost_by_service(
                    credentials, days=self.settings.COST_WINDOW_DAYS
                )
            cost_summary, instances, volumes, snapshots = await gather_or_cancel(
                cost_call,
                self.providers.instances.collect(
                    credentials, region, include_metrics=options.include_metrics
                ),
                self.providers.volumes.collect(credentials, region),
                self.providers.snapshots.collect(credentials, region),
            )

        resources = [*instances, *volumes, *snapshots]

        with self._stage(progress, ScanStage.EVALUATING_RULES):
            issues = self.rules_engine.evaluate(resources)

        with self._stage(progress, ScanStage.CALCULATING_SAVINGS):
            savings = self.calculator.summarize(
                issues, {resource.id: resource.pricing_attributes() for resource in resources}
            )

        with self._stage(progress, ScanStage.ASSEMBLING):
            return ScanResult(
                scan_id=progress.scan_id,
                timestamp=timestamp,
                region=region,
                cost_summary=cost_summary,
                resource_inventory=ResourceInventory(
                    instance_count=len(instances),
                    volume_count=len(volumes),
                    snapshot_count=len(snapshots),
                ),
                issues=issues,
                savings=savings,
            )

    def to_summary(self, result: ScanResult) -> ScanSummary:
        """
        Condense a scan result.

        Raises:
            InvalidScanResultError: If the result is missing or incomplete
        """
        if not isinstance(result, ScanResult):
            raise InvalidScanResultError("Invalid scan result: cannot create summary")
        return ScanSummary(
            scan_id=result.scan_id,
            total_cost=result.cost_summary.total_cost,
            potential_savings=result.savings.total_monthly_savings,
            issue_count=len(result.issues),
            issues=result.issues,
        )
