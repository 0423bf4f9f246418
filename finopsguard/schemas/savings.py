"""Savings schemas."""

from pydantic import Field

from finopsguard.schemas.base import CamelModel


class PricingAttributes(CamelModel):
    """Resource metadata used to price a detected issue."""

    instance_type: str | None = None
    volume_size_gb: int | None = None
    volume_type: str | None = None
    snapshot_size_gb: int | None = None


class SavingsEstimate(CamelModel):
    """Priced savings estimate for one detected issue."""

    rule_id: str
    rule_name: str
    resource_id: str
    resource_type: str
    current_monthly_cost: float
    potential_monthly_savings: float
    savings_percentage: float


class RuleSavings(CamelModel):
    """Savings aggregated per rule."""

    count: int = 0
    monthly_savings: float = 0.0
    annual_savings: float = 0.0


class SavingsSummary(CamelModel):
    """Savings totals plus per-rule and per-resource breakdowns."""

    total_monthly_savings: float = 0.0
    total_annual_savings: float = 0.0
    rule_breakdown: dict[str, RuleSavings] = Field(default_factory=dict)
    resource_breakdown: list[SavingsEstimate] = Field(default_factory=list)
