"""Rule and detected issue schemas."""

import string
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, field_validator, model_validator

from finopsguard.schemas.base import CamelModel


class RiskLevel(str, Enum):
    """Issue severity, ordered critical > high > medium > low."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_RANK = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
}


class ConditionOperator(str, Enum):
    """Supported condition operators."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    CONTAINS = "contains"
    EXISTS = "exists"


class RuleCondition(CamelModel):
    """A (field, operator, value) triple evaluated against one resource."""

    model_config = ConfigDict(frozen=True)

    field: str
    operator: ConditionOperator
    value: str | int | float | bool | None = None


class Rule(CamelModel):
    """
    Static cost-optimization rule.

    The predicate is the conjunction of ``conditions``. Configuration files
    may also use the single-condition form ``{"condition": {...}}``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    resource_type: str = "*"
    conditions: tuple[RuleCondition, ...] = Field(min_length=1)
    risk_level: RiskLevel = RiskLevel.MEDIUM
    action: str
    issue_template: str = ""
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def wrap_single_condition(cls, data: Any) -> Any:
        """Accept ``condition`` as a one-element ``conditions`` list."""
        if isinstance(data, dict) and "condition" in data and "conditions" not in data:
            data = dict(data)
            data["conditions"] = [data.pop("condition")]
        return data

    @field_validator("issue_template")
    @classmethod
    def validate_issue_template(cls, v: str) -> str:
        try:
            list(string.Formatter().parse(v))
        except ValueError as e:
            raise ValueError(f"Malformed issue template: {e}") from e
        return v

    def applies_to(self, resource_type: str) -> bool:
        return self.resource_type in ("*", resource_type)


class DetectedIssue(CamelModel):
    """One (rule, matching resource) finding."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_name: str
    resource_id: str
    resource_type: str
    issue_description: str
    risk_level: RiskLevel
    action: str
