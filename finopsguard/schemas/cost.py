"""Cost summary schemas."""

from pydantic import Field

from finopsguard.schemas.base import CamelModel


class ServiceCost(CamelModel):
    """Monthly-normalized cost of one AWS service."""

    service: str
    cost: float
    percentage: float


class CostPeriod(CamelModel):
    """Queried window (ISO dates, end exclusive)."""

    start: str
    end: str
    days: int


class CostSummary(CamelModel):
    """Account spend normalized to a 30-day month, grouped by service."""

    total_cost: float
    currency: str = "USD"
    period: CostPeriod
    services: list[ServiceCost] = Field(default_factory=list)
