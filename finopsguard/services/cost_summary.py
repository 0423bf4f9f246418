"""Cost window validation and monthly normalization."""

from datetime import date

from finopsguard.core.exceptions import CostExplorerError
from finopsguard.core.money import round_money
from finopsguard.schemas.cost import CostPeriod, CostSummary, ServiceCost

MAX_WINDOW_DAYS = 365
DAYS_PER_MONTH = 30


def validate_window(start: date, end: date) -> int:
    """
    Check a billing window and return its length in days.

    Raises:
        CostExplorerError: If start is not before end or the window exceeds a year
    """
    if start >= end:
        raise CostExplorerError("Start date must be before end date", "InvalidDateRange")

    days = (end - start).days
    if days > MAX_WINDOW_DAYS:
        raise CostExplorerError(
            f"Date range cannot exceed {MAX_WINDOW_DAYS} days", "InvalidDateRange"
        )
    return days


def normalize_to_month(raw_cost: float, window_days: int) -> float:
    """Rescale a cost over ``window_days`` to a 30-day equivalent (unrounded)."""
    return raw_cost / window_days * DAYS_PER_MONTH


def build_cost_summary(
    raw_by_service: dict[str, float],
    start: date,
    end: date,
    currency: str = "USD",
) -> CostSummary:
    """
    Build a monthly-normalized summary from raw per-service window totals.

    Total and service costs are normalized with ``raw / days * 30``.
    Percentages come from the raw proportions. All money values are rounded
    half-up to cents and services are sorted by cost, descending.
    """
    days = validate_window(start, end)
    raw_total = sum(raw_by_service.values())

    services = [
        ServiceCost(
            service=service,
            cost=round_money(normalize_to_month(raw_cost, days)),
            percentage=round_money(raw_cost / raw_total * 100) if raw_total > 0 else 0.0,
        )
        for service, raw_cost in raw_by_service.items()
    ]
    services.sort(key=lambda s: s.cost, reverse=True)

    return CostSummary(
        total_cost=round_money(normalize_to_month(raw_total, days)),
        currency=currency or "USD",
        period=CostPeriod(start=start.isoformat(), end=end.isoformat(), days=days),
        services=services,
    )
