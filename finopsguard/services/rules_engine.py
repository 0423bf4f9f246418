"""Rule evaluation engine."""

import json
import string
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import pydantic
import structlog

from finopsguard.core.exceptions import RuleConfigurationError
from finopsguard.schemas.resource import ResourceBase
from finopsguard.schemas.rule import ConditionOperator, DetectedIssue, Rule, RuleCondition

logger = structlog.get_logger()

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent / "rules" / "default_rules.json"


def load_rules(path: str | Path | None = None) -> tuple[Rule, ...]:
    """
    Load rule definitions from a JSON file.

    Args:
        path: Rules file (defaults to the packaged rule set)

    Returns:
        All rules in file order, enabled or not

    Raises:
        RuleConfigurationError: If the file is unreadable or any rule is invalid
    """
    rules_path = Path(path) if path else DEFAULT_RULES_PATH

    try:
        raw = json.loads(rules_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RuleConfigurationError(f"Failed to load rules from {rules_path}: {e}", original_error=e) from e

    if not isinstance(raw, list):
        raise RuleConfigurationError(f"Rules file {rules_path} must contain a JSON array")

    try:
        rules = tuple(Rule.model_validate(item) for item in raw)
    except pydantic.ValidationError as e:
        raise RuleConfigurationError(f"Invalid rule in {rules_path}: {e}", original_error=e) from e

    seen: set[str] = set()
    for rule in rules:
        if rule.id in seen:
            raise RuleConfigurationError(f"Duplicate rule id '{rule.id}' in {rules_path}")
        seen.add(rule.id)

    return rules


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _as_number(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _values_equal(actual: Any, expected: Any) -> bool:
    """Numeric comparison when both sides are numbers, text comparison otherwise."""
    if not isinstance(actual, bool) and not isinstance(expected, bool):
        left, right = _as_number(actual), _as_number(expected)
        if left is not None and right is not None:
            return left == right
    return _as_text(actual) == _as_text(expected)


def check_condition(condition: RuleCondition, resource: ResourceBase) -> bool:
    """Evaluate one condition; a missing field only satisfies ``exists``."""
    actual = resource.get_field(condition.field)

    if condition.operator == ConditionOperator.EXISTS:
        return actual is not None
    if actual is None:
        return False

    if condition.operator == ConditionOperator.EQUALS:
        return _values_equal(actual, condition.value)
    if condition.operator == ConditionOperator.NOT_EQUALS:
        return not _values_equal(actual, condition.value)
    if condition.operator == ConditionOperator.CONTAINS:
        return _as_text(condition.value) in _as_text(actual)

    left, right = _as_number(actual), _as_number(condition.value)
    if left is None or right is None:
        return False
    if condition.operator == ConditionOperator.GREATER_THAN:
        return left > right
    if condition.operator == ConditionOperator.LESS_THAN:
        return left < right
    return False


_FORMATTER = string.Formatter()


def describe_issue(rule: Rule, resource: ResourceBase) -> str:
    """
    Render the rule's issue template for one resource.

    Placeholders are field paths read through ``get_field`` (``{volume_id}``,
    ``{tags.Name}``). Unresolvable placeholders are left in the text as-is.
    """
    if not rule.issue_template:
        return rule.description or rule.name

    parts: list[str] = []
    for literal, field_name, _, _ in _FORMATTER.parse(rule.issue_template):
        parts.append(literal)
        if field_name is None:
            continue
        value = resource.get_field(field_name) if field_name else None
        if value is None:
            parts.append("{" + field_name + "}")
        elif isinstance(value, datetime):
            parts.append(value.isoformat())
        else:
            parts.append(_as_text(value))
    return "".join(parts)


class RulesEngine:
    """
    Evaluates normalized resources against a fixed rule set.

    The enabled rules are loaded once and never change afterwards.
    """

    def __init__(self, rules: Iterable[Rule] | None = None, rules_path: str | Path | None = None) -> None:
        loaded = tuple(rules) if rules is not None else load_rules(rules_path)
        self._rules = tuple(rule for rule in loaded if rule.enabled)
        logger.debug("rules.loaded", count=len(self._rules), rule_ids=[r.id for r in self._rules])

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Enabled rules, in configuration order."""
        return self._rules

    def get_rule(self, rule_id: str) -> Rule | None:
        return next((rule for rule in self._rules if rule.id == rule_id), None)

    def matches(self, rule: Rule, resource: ResourceBase) -> bool:
        if not rule.applies_to(resource.resource_type):
            return False
        return all(check_condition(condition, resource) for condition in rule.conditions)

    def evaluate_resource(self, resource: ResourceBase) -> list[DetectedIssue]:
        """Issues raised by every enabled rule matching one resource."""
        return [
            DetectedIssue(
                rule_id=rule.id,
                rule_name=rule.name,
                resource_id=resource.id,
                resource_type=resource.resource_type,
                issue_description=describe_issue(rule, resource),
                risk_level=rule.risk_level,
                action=rule.action,
            )
            for rule in self._rules
            if self.matches(rule, resource)
        ]

    def evaluate(self, resources: Iterable[ResourceBase]) -> list[DetectedIssue]:
        """
        Evaluate resources in input order against rules in configuration order.

        Pure and deterministic: the same input always yields the same issues
        in the same order.
        """
        issues: list[DetectedIssue] = []
        for resource in resources:
            issues.extend(self.evaluate_resource(resource))
        return issues
