"""Error taxonomy for the scan pipeline.

Every error carries a stable machine-readable ``code``, a message suitable
for direct display, and the HTTP status band the API layer maps it to.
"""

from typing import Any

# Status band per error code (400 input, 403 authorization,
# 503 unavailable, 504 timeout, everything else 500)
ERROR_STATUS_CODES: dict[str, int] = {
    "InvalidRoleArn": 400,
    "InvalidDateRange": 400,
    "MalformedPolicy": 400,
    "InvalidRequest": 400,
    "AccessDenied": 403,
    "InvalidCredentials": 403,
    "NoCredentials": 403,
    "PermissionValidationFailed": 403,
    "DataUnavailable": 503,
    "Throttled": 503,
    "ScanTimeout": 504,
}


def status_for_code(code: str) -> int:
    """Return the HTTP status band for an error code (500 when unclassified)."""
    return ERROR_STATUS_CODES.get(code, 500)


class FinOpsGuardError(Exception):
    """Base class for all typed pipeline errors."""

    default_code = "UnknownError"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.original_error = original_error

    @property
    def status_code(self) -> int:
        return status_for_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the code+message pair exposed to callers."""
        return {"error": self.code, "message": self.message}


class AssumeRoleError(FinOpsGuardError):
    """STS role assumption failed or the role ARN is malformed."""


class ValidationError(FinOpsGuardError):
    """
    One or more permission probes failed.

    Carries the full itemized report so the customer can fix every missing
    permission in one pass.
    """

    default_code = "PermissionValidationFailed"

    def __init__(self, message: str, report: Any) -> None:
        super().__init__(message)
        self.report = report

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["details"] = [error.model_dump() for error in self.report.errors]
        return data


class CostExplorerError(FinOpsGuardError):
    """Cost Explorer query failed or was rejected locally."""


class CollectorError(FinOpsGuardError):
    """A resource inventory listing failed."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        service: str = "",
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, code, original_error)
        self.service = service


class RuleConfigurationError(FinOpsGuardError):
    """The rule configuration source could not be loaded."""

    default_code = "RuleConfigurationError"


class InvalidScanResultError(FinOpsGuardError):
    """A scan result is missing required data."""

    default_code = "InvalidScanResult"


class StorageError(FinOpsGuardError):
    """Scan storage failed to persist or read a result."""

    default_code = "StorageError"


class ScanTimeoutError(FinOpsGuardError):
    """The scan exceeded its overall deadline."""

    default_code = "ScanTimeout"


class ScanError(FinOpsGuardError):
    """
    Terminal scan failure, annotated with the stage that failed.

    The code, message and status of the underlying cause are preserved.
    """

    def __init__(self, stage: str, cause: FinOpsGuardError) -> None:
        super().__init__(cause.message, cause.code, cause)
        self.stage = stage
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        data = self.cause.to_dict()
        data["stage"] = self.stage
        return data
