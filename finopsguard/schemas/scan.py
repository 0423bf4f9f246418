"""Scan Pydantic schemas."""

from datetime import date, datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_validator

from finopsguard.schemas.base import CamelModel
from finopsguard.schemas.cost import CostSummary
from finopsguard.schemas.credentials import ROLE_ARN_PATTERN
from finopsguard.schemas.rule import DetectedIssue
from finopsguard.schemas.savings import SavingsSummary


class ScanStage(str, Enum):
    """Pipeline stages, in execution order."""

    ASSUMING_ROLE = "assuming_role"
    VALIDATING_PERMISSIONS = "validating_permissions"
    COLLECTING = "collecting"
    EVALUATING_RULES = "evaluating_rules"
    CALCULATING_SAVINGS = "calculating_savings"
    ASSEMBLING = "assembling"


class CostWindow(CamelModel):
    """Explicit billing window (end exclusive)."""

    start: date
    end: date


class ScanOptions(CamelModel):
    """Options for a single scan invocation."""

    region: str = Field(min_length=1)
    role_arn: str = Field(min_length=1)
    external_id: str | None = None
    include_metrics: bool = True
    cost_window: CostWindow | None = None


class ScanRequest(ScanOptions):
    """Schema for the scan run request body."""

    @field_validator("role_arn")
    @classmethod
    def validate_role_arn(cls, v: str) -> str:
        if not ROLE_ARN_PATTERN.fullmatch(v):
            raise ValueError(
                "Invalid IAM Role ARN format. Must be: arn:aws:iam::ACCOUNT_ID:role/ROLE_NAME"
            )
        return v


class ResourceInventory(CamelModel):
    """Resource counts collected during a scan."""

    instance_count: int = 0
    volume_count: int = 0
    snapshot_count: int = 0


class ScanResult(CamelModel):
    """Self-describing, immutable outcome of one scan."""

    model_config = ConfigDict(frozen=True)

    scan_id: str = Field(min_length=1)
    timestamp: datetime
    region: str = Field(min_length=1)
    cost_summary: CostSummary
    resource_inventory: ResourceInventory
    issues: list[DetectedIssue]
    savings: SavingsSummary


class ScanSummary(CamelModel):
    """Condensed view of a scan result."""

    scan_id: str
    total_cost: float
    potential_savings: float
    issue_count: int
    issues: list[DetectedIssue]


class ScanRunResponse(CamelModel):
    """Response body of a successful scan run."""

    scan_id: str
    timestamp: datetime
    summary: ScanSummary
