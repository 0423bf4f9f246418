"""Permission probe schemas."""

from pydantic import Field

from finopsguard.schemas.base import CamelModel


class CheckResult(CamelModel):
    """Outcome of one capability probe."""

    success: bool = False
    error: str | None = None
    code: str | None = None


class PermissionServiceError(CamelModel):
    """A failed capability, as reported to the customer."""

    service: str
    error: str
    code: str | None = None


class PermissionChecks(CamelModel):
    """Per-capability probe results."""

    cost_explorer: CheckResult = Field(default_factory=CheckResult)
    ec2: CheckResult = Field(default_factory=CheckResult)


class PermissionReport(CamelModel):
    """Aggregated probe outcome."""

    success: bool
    errors: list[PermissionServiceError] = Field(default_factory=list)
    checks: PermissionChecks = Field(default_factory=PermissionChecks)
