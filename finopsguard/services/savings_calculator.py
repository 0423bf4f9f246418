"""Savings estimation for detected issues."""

from typing import Mapping

from finopsguard.core.money import round_money
from finopsguard.schemas.rule import DetectedIssue
from finopsguard.schemas.savings import (
    PricingAttributes,
    RuleSavings,
    SavingsEstimate,
    SavingsSummary,
)
from finopsguard.services.pricing import (
    ebs_snapshot_monthly_cost,
    ebs_volume_monthly_cost,
    ec2_monthly_cost,
)

# Defaults when resource metadata is missing
DEFAULT_INSTANCE_TYPE = "t3.medium"
DEFAULT_VOLUME_SIZE_GB = 20
DEFAULT_VOLUME_TYPE = "gp3"
DEFAULT_SNAPSHOT_SIZE_GB = 20

# Stopping an idle instance still leaves some cost behind (EBS, data transfer)
IDLE_EC2_SAVINGS_RATIO = 0.9

UNKNOWN_RULE_MONTHLY_COST = 50.0
UNKNOWN_RULE_SAVINGS_RATIO = 0.8

MONTHS_PER_YEAR = 12


class SavingsCalculator:
    """Prices detected issues against the static price tables."""

    def current_and_savings(
        self, rule_id: str, attributes: PricingAttributes
    ) -> tuple[float, float]:
        """Unrounded (current monthly cost, potential monthly savings) for one issue."""
        if rule_id == "idle_ec2":
            current = ec2_monthly_cost(attributes.instance_type or DEFAULT_INSTANCE_TYPE)
            return current, current * IDLE_EC2_SAVINGS_RATIO

        if rule_id == "unattached_ebs":
            current = ebs_volume_monthly_cost(
                attributes.volume_type or DEFAULT_VOLUME_TYPE,
                attributes.volume_size_gb or DEFAULT_VOLUME_SIZE_GB,
            )
            return current, current

        if rule_id == "old_snapshot":
            current = ebs_snapshot_monthly_cost(
                attributes.snapshot_size_gb or DEFAULT_SNAPSHOT_SIZE_GB
            )
            return current, current

        return UNKNOWN_RULE_MONTHLY_COST, UNKNOWN_RULE_MONTHLY_COST * UNKNOWN_RULE_SAVINGS_RATIO

    def estimate(
        self, issue: DetectedIssue, attributes: PricingAttributes | None = None
    ) -> SavingsEstimate:
        """
        Price a single detected issue.

        Args:
            issue: The detected issue
            attributes: Pricing metadata of the affected resource (defaults apply when missing)

        Returns:
            Estimate with all money values rounded half-up to cents
        """
        current, savings = self.current_and_savings(issue.rule_id, attributes or PricingAttributes())
        percentage = round_money(savings / current * 100) if current > 0 else 0.0

        return SavingsEstimate(
            rule_id=issue.rule_id,
            rule_name=issue.rule_name,
            resource_id=issue.resource_id,
            resource_type=issue.resource_type,
            current_monthly_cost=round_money(current),
            potential_monthly_savings=round_money(savings),
            savings_percentage=percentage,
        )

    def summarize(
        self,
        issues: list[DetectedIssue],
        attributes_by_resource_id: Mapping[str, PricingAttributes] | None = None,
    ) -> SavingsSummary:
        """Aggregate per-issue estimates into totals and a per-rule breakdown."""
        attributes_by_resource_id = attributes_by_resource_id or {}
        estimates: list[SavingsEstimate] = []
        monthly_by_rule: dict[str, float] = {}
        count_by_rule: dict[str, int] = {}

        for issue in issues:
            estimate = self.estimate(issue, attributes_by_resource_id.get(issue.resource_id))
            estimates.append(estimate)
            monthly_by_rule[issue.rule_id] = (
                monthly_by_rule.get(issue.rule_id, 0.0) + estimate.potential_monthly_savings
            )
            count_by_rule[issue.rule_id] = count_by_rule.get(issue.rule_id, 0) + 1

        total_monthly = round_money(sum(e.potential_monthly_savings for e in estimates))

        rule_breakdown = {}
        for rule_id, monthly in monthly_by_rule.items():
            monthly = round_money(monthly)
            rule_breakdown[rule_id] = RuleSavings(
                count=count_by_rule[rule_id],
                monthly_savings=monthly,
                annual_savings=round_money(monthly * MONTHS_PER_YEAR),
            )

        return SavingsSummary(
            total_monthly_savings=total_monthly,
            total_annual_savings=round_money(total_monthly * MONTHS_PER_YEAR),
            rule_breakdown=rule_breakdown,
            resource_breakdown=estimates,
        )
