"""Tests for the rule evaluation engine."""

import json
from datetime import timedelta

import pytest

from finopsguard.core.exceptions import RuleConfigurationError
from finopsguard.schemas.resource import (
    BlockSnapshot,
    BlockVolume,
    ComputeInstance,
    CpuUtilization,
    InstanceState,
)
from finopsguard.schemas.rule import RiskLevel, Rule
from finopsguard.services.rules_engine import RulesEngine, load_rules
from tests.fakes import FIXED_NOW


def instance(instance_id="i-1", state=InstanceState.RUNNING, cpu=3.0, tags=None):
    return ComputeInstance(
        id=instance_id,
        instance_id=instance_id,
        instance_type="t3.medium",
        region="us-east-1",
        state=state,
        launch_time=FIXED_NOW,
        cpu_utilization=CpuUtilization(average=cpu) if cpu is not None else None,
        tags=tags,
    )


def volume(volume_id="vol-1", state="available", attached=False, size=200):
    return BlockVolume(
        id=volume_id,
        volume_id=volume_id,
        region="us-east-1",
        size_gb=size,
        volume_type="gp2",
        state=state,
        attached=attached,
        create_time=FIXED_NOW,
    )


def snapshot(snapshot_id="snap-1", age=135, state="completed", size=1000):
    return BlockSnapshot(
        id=snapshot_id,
        snapshot_id=snapshot_id,
        region="us-east-1",
        volume_size_gb=size,
        state=state,
        start_time=FIXED_NOW - timedelta(days=age),
        age_in_days=age,
    )


@pytest.fixture
def engine() -> RulesEngine:
    return RulesEngine()


class TestDefaultRules:
    """Test the shipped rule set."""

    def test_loads_three_rules(self, engine):
        assert [r.id for r in engine.rules] == ["idle_ec2", "unattached_ebs", "old_snapshot"]
        assert engine.get_rule("unattached_ebs").risk_level == RiskLevel.HIGH
        assert engine.get_rule("missing") is None

    def test_idle_instance(self, engine):
        issues = engine.evaluate_resource(instance(cpu=4.99))

        assert len(issues) == 1
        issue = issues[0]
        assert issue.rule_id == "idle_ec2"
        assert issue.rule_name == "Idle EC2 Instance"
        assert issue.resource_id == "i-1"
        assert issue.resource_type == "ec2-instance"
        assert issue.risk_level == RiskLevel.MEDIUM
        assert issue.action == "stop"
        assert issue.issue_description == "EC2 instance i-1 has CPU utilization below 5% for 7 days"

    @pytest.mark.parametrize(
        "resource",
        [
            instance(cpu=5.0),
            instance(cpu=None),
            instance(state=InstanceState.STOPPED, cpu=1.0),
        ],
    )
    def test_instance_not_idle(self, engine, resource):
        assert engine.evaluate_resource(resource) == []

    def test_unattached_volume(self, engine):
        issues = engine.evaluate_resource(volume())

        assert [i.rule_id for i in issues] == ["unattached_ebs"]
        assert issues[0].issue_description == "EBS volume vol-1 (200GB) is not attached to any instance"
        assert issues[0].action == "delete"

    def test_attached_volume(self, engine):
        assert engine.evaluate_resource(volume(state="in-use", attached=True)) == []

    def test_old_snapshot(self, engine):
        issues = engine.evaluate_resource(snapshot())

        assert [i.rule_id for i in issues] == ["old_snapshot"]
        assert issues[0].issue_description == "EBS snapshot snap-1 is 135 days old (1000GB)"
        assert issues[0].risk_level == RiskLevel.LOW

    @pytest.mark.parametrize("resource", [snapshot(age=30), snapshot(state="pending")])
    def test_recent_or_incomplete_snapshot(self, engine, resource):
        assert engine.evaluate_resource(resource) == []


class TestEvaluation:
    """Test ordering and operator semantics."""

    def test_order_stable_and_idempotent(self, engine):
        resources = [snapshot("snap-9"), instance("i-2", cpu=1.0), volume("vol-3"), volume("vol-4", attached=True)]

        first = engine.evaluate(resources)
        second = engine.evaluate(resources)

        assert first == second
        assert [i.resource_id for i in first] == ["snap-9", "i-2", "vol-3"]

    def test_one_issue_per_rule_and_resource(self):
        rules = [
            Rule.model_validate(
                {
                    "id": "any_dev",
                    "name": "Dev resource",
                    "condition": {"field": "tags.Environment", "operator": "equals", "value": "dev"},
                    "action": "review",
                }
            ),
            Rule.model_validate(
                {
                    "id": "web",
                    "name": "Web resource",
                    "conditions": [{"field": "tags.Name", "operator": "contains", "value": "web"}],
                    "action": "review",
                }
            ),
        ]
        engine = RulesEngine(rules=rules)

        issues = engine.evaluate([instance(tags={"Environment": "dev", "Name": "web-01"})])

        assert [i.rule_id for i in issues] == ["any_dev", "web"]

    def test_disabled_rules_skipped(self):
        rule = Rule.model_validate(
            {
                "id": "off",
                "name": "Off",
                "condition": {"field": "state", "operator": "exists"},
                "action": "stop",
                "enabled": False,
            }
        )

        engine = RulesEngine(rules=[rule])

        assert engine.rules == ()
        assert engine.evaluate([instance()]) == []

    @pytest.mark.parametrize(
        "operator,value,expected",
        [
            ("notEquals", "running", False),
            ("notEquals", "stopped", True),
            ("greaterThan", "abc", False),
            ("lessThan", 10, True),
        ],
    )
    def test_operators(self, operator, value, expected):
        field = "state" if operator == "notEquals" else "cpu_utilization.average"
        rule = Rule.model_validate(
            {"id": "r", "name": "r", "condition": {"field": field, "operator": operator, "value": value}, "action": "x"}
        )

        assert bool(RulesEngine(rules=[rule]).evaluate([instance(cpu=3.0)])) is expected

    def test_missing_field_only_matches_exists(self):
        rules = [
            Rule.model_validate(
                {"id": "ne", "name": "ne", "condition": {"field": "tags.Owner", "operator": "notEquals", "value": "x"}, "action": "x"}
            ),
            Rule.model_validate(
                {"id": "ex", "name": "ex", "condition": {"field": "tags.Owner", "operator": "exists"}, "action": "x"}
            ),
        ]

        assert RulesEngine(rules=rules).evaluate([instance()]) == []

    @pytest.mark.parametrize(
        "operator,value,expected",
        [
            ("equals", 2, True),
            ("equals", "2", True),
            ("equals", 3, False),
            ("notEquals", 2, False),
        ],
    )
    def test_float_field_against_int_value(self, operator, value, expected):
        rule = Rule.model_validate(
            {
                "id": "r",
                "name": "r",
                "condition": {"field": "cpu_utilization.average", "operator": operator, "value": value},
                "action": "x",
            }
        )

        assert bool(RulesEngine(rules=[rule]).evaluate([instance(cpu=2.0)])) is expected

    def test_boolean_field_compared_as_text(self):
        rule = Rule.model_validate(
            {"id": "r", "name": "r", "condition": {"field": "attached", "operator": "equals", "value": 0}, "action": "x"}
        )

        assert RulesEngine(rules=[rule]).evaluate([volume()]) == []


class TestIssueTemplates:
    """Test issue description rendering."""

    def make_rule(self, template: str) -> Rule:
        return Rule.model_validate(
            {
                "id": "tagged",
                "name": "Tagged",
                "condition": {"field": "state", "operator": "exists"},
                "action": "review",
                "issueTemplate": template,
            }
        )

    def test_tag_placeholder(self):
        engine = RulesEngine(rules=[self.make_rule("Instance {tags.Name} idle at {cpu_utilization.average}%")])

        issues = engine.evaluate([instance(tags={"Name": "web-01"})])

        assert issues[0].issue_description == "Instance web-01 idle at 3.0%"

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("Instance {tags.Owner} idle", "Instance {tags.Owner} idle"),
            ("Instance {0} idle", "Instance {0} idle"),
            ("Instance {} idle", "Instance {} idle"),
            ("{{literal}} {instance_id}", "{literal} i-1"),
        ],
    )
    def test_unresolved_placeholders_kept(self, template, expected):
        issues = RulesEngine(rules=[self.make_rule(template)]).evaluate([instance()])

        assert issues[0].issue_description == expected

    def test_no_template_uses_description(self):
        rule = self.make_rule("").model_copy(update={"description": "Needs review"})

        assert RulesEngine(rules=[rule]).evaluate([instance()])[0].issue_description == "Needs review"


class TestLoading:
    """Test rule configuration loading."""

    def test_custom_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "id": "big_volume",
                        "name": "Big volume",
                        "resourceType": "ebs-volume",
                        "condition": {"field": "size_gb", "operator": "greaterThan", "value": 500},
                        "riskLevel": "critical",
                        "action": "review",
                        "issueTemplate": "{volume_id} is {size_gb}GB",
                    }
                ]
            )
        )

        engine = RulesEngine(rules_path=path)
        issues = engine.evaluate([volume(size=1000), volume("vol-2", size=100)])

        assert [i.issue_description for i in issues] == ["vol-1 is 1000GB"]
        assert issues[0].risk_level == RiskLevel.CRITICAL

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleConfigurationError) as exc_info:
            load_rules(tmp_path / "nope.json")

        assert exc_info.value.status_code == 500

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps({"id": "x"}),
            json.dumps([{"id": "x", "name": "x", "action": "x"}]),
            json.dumps([{"id": "x", "name": "x", "action": "x", "condition": {"field": "a", "operator": "between"}}]),
            json.dumps(
                [{"id": "x", "name": "x", "action": "x", "condition": {"field": "a", "operator": "exists"}, "issueTemplate": "Size {size_gb"}]
            ),
        ],
    )
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "rules.json"
        path.write_text(content)

        with pytest.raises(RuleConfigurationError):
            load_rules(path)

    def test_duplicate_ids(self, tmp_path):
        rule = {"id": "dup", "name": "x", "action": "x", "condition": {"field": "state", "operator": "exists"}}
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([rule, rule]))

        with pytest.raises(RuleConfigurationError) as exc_info:
            load_rules(path)

        assert "Duplicate" in exc_info.value.message
