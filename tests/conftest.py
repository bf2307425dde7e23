"""Shared fixtures for rule engine, coverage and API tests."""

import pytest

from models.rule_models import Condition, ExtractedInfo, Rule, RoutingAction
from services.coverage_analyzer import RuleCoverageAnalyzer
from services.rule_engine import RuleEngine


def cond(field: str, value, operator: str = "equals") -> Condition:
    return Condition(field=field, operator=operator, value=value)


def make_rule(
    rule_id: str,
    *conditions: Condition,
    priority: int = 1,
    assign_to: str | None = None,
    enabled: bool = True,
    name: str | None = None,
    description: str | None = None,
) -> Rule:
    return Rule(
        id=rule_id,
        name=name or f"Rule {rule_id}",
        description=description,
        enabled=enabled,
        priority=priority,
        conditions=list(conditions),
        action=RoutingAction(assign_to=assign_to or f"{rule_id}@acme.corp"),
    )


def info(**fields) -> ExtractedInfo:
    fields.setdefault("raw_text", "test")
    return ExtractedInfo(**fields)


@pytest.fixture
def engine() -> RuleEngine:
    return RuleEngine()


@pytest.fixture
def small_analyzer() -> RuleCoverageAnalyzer:
    """Three request types by two locations."""
    return RuleCoverageAnalyzer(
        request_types=["contracts", "employment_hr", "nda"],
        locations=["australia", "europe"],
    )


@pytest.fixture
def analyzer() -> RuleCoverageAnalyzer:
    """Full legal request type x location matrix."""
    return RuleCoverageAnalyzer()
