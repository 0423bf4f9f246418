"""Pydantic schemas for the scan pipeline."""

from finopsguard.schemas.cost import CostPeriod, CostSummary, ServiceCost
from finopsguard.schemas.credentials import AssumedCredentials, BaseCredentials
from finopsguard.schemas.permissions import (
    CheckResult,
    PermissionChecks,
    PermissionReport,
    PermissionServiceError,
)
from finopsguard.schemas.resource import (
    BlockSnapshot,
    BlockVolume,
    ComputeInstance,
    CpuUtilization,
    InstanceState,
    NormalizedResource,
    ResourceType,
)
from finopsguard.schemas.rule import (
    ConditionOperator,
    DetectedIssue,
    RiskLevel,
    Rule,
    RuleCondition,
)
from finopsguard.schemas.savings import (
    PricingAttributes,
    RuleSavings,
    SavingsEstimate,
    SavingsSummary,
)
from finopsguard.schemas.scan import (
    CostWindow,
    ResourceInventory,
    ScanOptions,
    ScanRequest,
    ScanResult,
    ScanRunResponse,
    ScanStage,
    ScanSummary,
)

__all__ = [
    "AssumedCredentials",
    "BaseCredentials",
    "BlockSnapshot",
    "BlockVolume",
    "CheckResult",
    "ComputeInstance",
    "ConditionOperator",
    "CostPeriod",
    "CostSummary",
    "CostWindow",
    "CpuUtilization",
    "DetectedIssue",
    "InstanceState",
    "NormalizedResource",
    "PermissionChecks",
    "PermissionReport",
    "PermissionServiceError",
    "PricingAttributes",
    "ResourceInventory",
    "ResourceType",
    "RiskLevel",
    "Rule",
    "RuleCondition",
    "RuleSavings",
    "SavingsEstimate",
    "SavingsSummary",
    "ScanOptions",
    "ScanRequest",
    "ScanResult",
    "ScanRunResponse",
    "ScanStage",
    "ScanSummary",
    "ServiceCost",
]
