"""Tests for routing decisions, confidence scoring and rule testing."""

import pytest

from conftest import cond, info, make_rule
from models.rule_models import ConditionField
from services.seed_data import get_seed_rules


class TestSingleMatch:

    def test_clean_match(self, engine):
        rules = [
            make_rule(
                "au-contracts",
                cond("requestType", "contracts"),
                cond("location", "australia"),
                priority=1,
                assign_to="jane@acme.corp",
            )
        ]

        decision = engine.route(info(request_type="contracts", location="australia"), rules)

        assert decision.matched is True
        assert decision.assign_to == "jane@acme.corp"
        assert decision.matched_rule.id == "au-contracts"
        assert decision.needs_clarification is None
        # 50 + 20 + 20, then +20 capped at 98
        assert decision.confidence == 98

    def test_only_potential_match_is_committed_to(self, engine):
        # location unknown, but there is nothing else this could route to
        rules = [make_rule("eu-privacy", cond("requestType", "privacy_data"), cond("location", "europe"))]

        decision = engine.route(info(request_type="privacy_data"), rules)

        assert decision.matched is True
        assert decision.matched_rule.id == "eu-privacy"
        assert decision.confidence == 90

    def test_reasoning_names_rule_and_priority(self, engine):
        rules = [make_rule("r1", cond("requestType", "contracts"), priority=4, name="Contracts",
                           description="All contracts")]

        decision = engine.route(info(request_type="contracts"), rules)

        assert 'Matched rule "Contracts" (Priority 4).' in decision.reasoning
        assert "All contracts" in decision.reasoning

    def test_empty_conditions_match_anything(self, engine):
        catch_all = make_rule("catch-all", priority=10)

        for record in (info(), info(request_type="contracts", location="canada", value=5)):
            decision = engine.route(record, [catch_all])
            assert decision.matched is True
            assert decision.matched_rule.id == "catch-all"


class TestAmbiguity:

    def test_unknown_location_needs_clarification(self, engine):
        rules = [
            make_rule("a", cond("requestType", "contracts"), assign_to="a@acme.corp"),
            make_rule("b", cond("requestType", "contracts"), cond("location", "australia"),
                      assign_to="b@acme.corp"),
        ]

        decision = engine.route(info(request_type="contracts"), rules)

        assert decision.matched is False
        assert decision.confidence == 30
        assert decision.assign_to is None
        assert decision.needs_clarification.missing_fields == [ConditionField.LOCATION]
        assert decision.needs_clarification.questions == ["Where are you located?"]

    def test_one_question_per_missing_field_in_first_seen_order(self, engine):
        rules = [
            make_rule("hi", cond("requestType", "contracts"), cond("urgency", "high"), priority=5),
            make_rule("lo", cond("requestType", "contracts"), cond("location", "canada"),
                      cond("department", "sales"), priority=1),
        ]

        decision = engine.route(info(request_type="contracts"), rules)

        clarification = decision.needs_clarification
        assert clarification.missing_fields == [
            ConditionField.URGENCY,
            ConditionField.LOCATION,
            ConditionField.DEPARTMENT,
        ]
        assert clarification.questions == [
            "How urgent is this request?",
            "Where are you located?",
            "Which department is this for?",
        ]

    def test_threshold_rules_keep_asking_about_the_same_field(self, engine):
        # Rules split only by value thresholds: asking for value again would
        # not settle them once value is supplied, but while value is unknown
        # it is always reported as the differentiating field.
        rules = [
            make_rule("big", cond("requestType", "contracts"), cond("value", 100000, "greater_than"), priority=2),
            make_rule("small", cond("requestType", "contracts"), cond("value", 200000, "less_than"), priority=1),
        ]

        first = engine.route(info(request_type="contracts"), rules)
        second = engine.route(info(request_type="contracts"), rules)

        assert first.needs_clarification.missing_fields == [ConditionField.VALUE]
        assert second == first

    def test_overlapping_thresholds_fall_to_tie_break_once_value_known(self, engine):
        rules = [
            make_rule("big", cond("requestType", "contracts"), cond("value", 100000, "greater_than"), priority=2),
            make_rule("small", cond("requestType", "contracts"), cond("value", 200000, "less_than"), priority=1),
        ]

        decision = engine.route(info(request_type="contracts", value=150000), rules)

        assert decision.matched is True
        assert decision.matched_rule.id == "small"
        assert decision.confidence == 35


class TestTieBreak:

    def test_lowest_priority_value_wins(self, engine):
        # Deliberate: when nothing is left to ask, the LOWER priority value is
        # chosen, not the higher one used for evaluation order.
        rules = [
            make_rule("high", cond("requestType", "contracts"), cond("location", "canada"),
                      priority=9, assign_to="high@acme.corp"),
            make_rule("low", cond("requestType", "contracts"), cond("location", "canada"),
                      priority=2, assign_to="low@acme.corp"),
        ]

        decision = engine.route(info(request_type="contracts", location="canada"), rules)

        assert decision.matched is True
        assert decision.assign_to == "low@acme.corp"
        assert decision.matched_rule.priority == 2
        assert decision.confidence == 35
        assert decision.needs_clarification is None
        assert '"Rule low"' in decision.reasoning

    def test_equal_priorities_keep_input_order(self, engine):
        rules = [
            make_rule("first", cond("requestType", "nda"), priority=1),
            make_rule("second", cond("requestType", "nda"), priority=1),
        ]

        decision = engine.route(info(request_type="nda"), rules)

        assert decision.matched_rule.id == "first"

    def test_seed_rules_pick_standard_us_contracts_for_high_value(self, engine):
        # rule-4 (priority 2, value > 100k) and rule-1 (priority 1) both match
        decision = engine.route(
            info(request_type="contracts", location="united states", value=250000),
            get_seed_rules(),
        )

        assert decision.matched_rule.id == "rule-1"
        assert decision.assign_to == "john.smith@acme.corp"


class TestFallback:

    def test_no_rule_applies(self, engine):
        rules = [make_rule("nda", cond("requestType", "nda"))]

        decision = engine.route(info(request_type="contracts", location="other"), rules)

        assert decision.matched is False
        assert decision.confidence == 20
        assert decision.matched_rule is None
        assert decision.needs_clarification is None
        assert "No routing rule matches" in decision.reasoning

    def test_empty_rule_set(self, engine):
        decision = engine.route(info(), [])
        assert decision.matched is False
        assert decision.confidence == 20

    def test_disabled_rules_never_match(self, engine):
        rules = [
            make_rule("off", cond("requestType", "contracts"), enabled=False),
            make_rule("off-catch-all", enabled=False),
        ]

        decision = engine.route(info(request_type="contracts"), rules)

        assert decision.matched is False
        assert decision.confidence == 20

    def test_disabled_rule_does_not_create_ambiguity(self, engine):
        rules = [
            make_rule("on", cond("requestType", "contracts")),
            make_rule("off", cond("requestType", "contracts"), cond("location", "europe"), enabled=False),
        ]

        decision = engine.route(info(request_type="contracts"), rules)

        assert decision.matched is True
        assert decision.matched_rule.id == "on"


class TestPurity:

    def test_route_is_idempotent_and_does_not_mutate_rules(self, engine):
        rules = get_seed_rules()
        before = [r.model_copy(deep=True) for r in rules]
        record = info(request_type="contracts", location="united states")

        first = engine.route(record, rules)
        second = engine.route(record, rules)

        assert first == second
        assert rules == before
        assert [r.id for r in rules] == [r.id for r in before]
        assert all(r.match_count == 0 for r in rules)


class TestConfidence:

    @pytest.mark.parametrize(
        "fields, matched, expected",
        [
            ({}, True, 70),
            ({}, False, 20),
            ({"request_type": "contracts"}, True, 90),
            ({"request_type": "contracts", "location": "canada"}, False, 60),
            ({"request_type": "contracts", "location": "canada", "value": 10, "department": "ops"}, True, 98),
            ({"value": 10, "department": "ops"}, False, 30),
        ],
    )
    def test_scoring(self, engine, fields, matched, expected):
        rule = make_rule("r") if matched else None
        assert engine.calculate_confidence(info(**fields), rule) == expected

    def test_floor_when_unmatched(self, engine):
        assert engine.calculate_confidence(info(), None) >= 15

    def test_zero_value_earns_no_boost(self, engine):
        assert engine.calculate_confidence(info(value=0), None) == 20


class TestClarificationQuestions:

    def test_known_fields(self, engine):
        assert engine.generate_clarification_question("value") == "What is the contract value?"
        assert engine.generate_clarification_question(ConditionField.REQUEST_TYPE).startswith(
            "What type of request is this?"
        )

    def test_unknown_field_gets_generic_prompt(self, engine):
        assert engine.generate_clarification_question("budgetCode") == "Could you provide more details?"


class TestRuleTesting:

    def test_all_conditions_satisfied(self, engine):
        rule = make_rule("r", cond("requestType", "contracts"), assign_to="amy@acme.corp")

        result = engine.test_rule(rule, info(request_type="contracts"))

        assert result.matches is True
        assert result.reason == "All conditions satisfied. Would route to amy@acme.corp"

    def test_reports_failed_conditions_strictly(self, engine):
        rule = make_rule(
            "r",
            cond("requestType", "contracts"),
            cond("location", "australia"),
            cond("value", 100000, "greater_than"),
        )

        # location is missing: relaxed routing would accept it, strict testing does not
        result = engine.test_rule(rule, info(request_type="contracts", value=50))

        assert result.matches is False
        assert result.reason == "Failed conditions: location equals australia, value greater_than 100000"
        assert [c.field for c in result.failed_conditions] == [ConditionField.LOCATION, ConditionField.VALUE]

    def test_disabled_rule(self, engine):
        rule = make_rule("r", cond("requestType", "contracts"), enabled=False, name="Old")

        result = engine.test_rule(rule, info(request_type="contracts"))

        assert result.matches is False
        assert result.reason == 'Rule "Old" is disabled'

    def test_empty_conditions(self, engine):
        assert engine.test_rule(make_rule("any"), info()).matches is True
