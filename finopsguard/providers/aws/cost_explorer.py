"""Cost Explorer spend collector."""

from collections import defaultdict
from datetime import date
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from finopsguard.core.config import Settings
from finopsguard.core.exceptions import CostExplorerError
from finopsguard.providers.aws.client import (
    DEFAULT_SESSION_FACTORY,
    SessionFactory,
    build_client_config,
    create_session,
    error_code,
    error_message,
)
from finopsguard.providers.base import CostCollector
from finopsguard.schemas.cost import CostSummary
from finopsguard.schemas.credentials import AssumedCredentials
from finopsguard.services.cost_summary import build_cost_summary, validate_window

logger = structlog.get_logger()


def classify_cost_error(error: ClientError) -> CostExplorerError:
    code = error_code(error)

    if code in ("AccessDenied", "AccessDeniedException"):
        return CostExplorerError(
            "Access denied to Cost Explorer. Ensure the role has ce:GetCostAndUsage permission.",
            "AccessDenied",
            error,
        )
    if code == "DataUnavailableException":
        return CostExplorerError(
            "Cost data is not available for the specified time period. "
            "Cost data may take up to 24 hours to appear.",
            "DataUnavailable",
            error,
        )
    if code == "InvalidNextTokenException":
        return CostExplorerError(
            "Invalid pagination token returned by Cost Explorer.",
            "InvalidToken",
            error,
        )
    return CostExplorerError(
        f"Failed to fetch cost data: {error_message(error)}",
        "UnknownError",
        error,
    )


def accumulate_results(
    results_by_time: list[dict[str, Any]],
    totals: dict[str, float],
    currency: str | None,
) -> str | None:
    """Add one page of grouped results into ``totals``; return the currency seen so far."""
    for result in results_by_time:
        for group in result.get("Groups", []):
            keys = group.get("Keys") or []
            service = keys[0] if keys else "Unknown"
            metric = group.get("Metrics", {}).get("BlendedCost", {})
            amount = metric.get("Amount")
            if not amount:
                continue
            totals[service] += float(amount)
            if currency is None and metric.get("Unit"):
                currency = metric["Unit"]
    return currency


class AWSCostCollector(CostCollector):
    """Reads spend grouped by service from Cost Explorer."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
    ) -> None:
        self.settings = settings
        self.config = build_client_config(settings)
        self.session_factory = session_factory

    async def get_cost_by_service(
        self,
        credentials: AssumedCredentials,
        start: date,
        end: date,
    ) -> CostSummary:
        validate_window(start, end)

        params: dict[str, Any] = {
            "TimePeriod": {"Start": start.isoformat(), "End": end.isoformat()},
            "Granularity": "DAILY",
            "Metrics": ["BlendedCost"],
            "GroupBy": [{"Type": "DIMENSION", "Key": "SERVICE"}],
        }
        totals: dict[str, float] = defaultdict(float)
        currency: str | None = None
        pages = 0

        session = create_session(self.session_factory, credentials)
        try:
            async with session.client(
                "ce", region_name=self.settings.COST_EXPLORER_REGION, config=self.config
            ) as ce:
                while True:
                    response = await ce.get_cost_and_usage(**params)
                    pages += 1
                    currency = accumulate_results(
                        response.get("ResultsByTime", []), totals, currency
                    )
                    token = response.get("NextPageToken")
                    if not token:
                        break
                    params["NextPageToken"] = token

        except ClientError as e:
            failure = classify_cost_error(e)
            logger.warning("cost_explorer.query_failed", code=failure.code)
            raise failure from e

        except BotoCoreError as e:
            logger.error("cost_explorer.query_error", error=str(e))
            raise CostExplorerError(
                f"Unexpected error fetching cost data: {e}", "UnknownError", e
            ) from e

        summary = build_cost_summary(dict(totals), start, end, currency or "USD")
        logger.info(
            "cost_explorer.collected",
            start=start.isoformat(),
            end=end.isoformat(),
            pages=pages,
            services=len(summary.services),
            total_cost=summary.total_cost,
        )
        return summary
