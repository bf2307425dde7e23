"""
Rule Engine for legal request routing.

Deterministic routing of extracted request fields to an assignee. The LLM is
only used upstream to produce ExtractedInfo; every decision made here is a
pure function of the extracted fields and the rule snapshot passed in.

The engine never stores or mutates rules. Callers pass the current rule set
on every call, snapshotting it first if the store can change concurrently.
"""

from config.logging_config import get_logger
from models.rule_models import (
    Clarification,
    ConditionField,
    ExtractedInfo,
    Rule,
    RoutingDecision,
    RuleTestResult,
)
from services.condition_evaluator import (
    describe_condition,
    evaluate_condition,
    evaluate_rule_conditions,
)

logger = get_logger(__name__)


class RuleEngine:
    """
    Route extracted request info against admin-defined rules.

    Routing outcomes:
    - one rule still possible -> matched
    - several possible and some of their fields unknown -> ask about them
    - several possible with nothing left to ask -> tie-break on priority
    - none possible -> fallback
    """

    NO_MATCH_CONFIDENCE = 20
    CLARIFICATION_CONFIDENCE = 30
    TIE_BREAK_CONFIDENCE = 35

    CLARIFICATION_QUESTIONS = {
        ConditionField.REQUEST_TYPE: (
            "What type of request is this? (e.g., Employment contract, Sales contract, NDA)"
        ),
        ConditionField.LOCATION: "Where are you located?",
        ConditionField.VALUE: "What is the contract value?",
        ConditionField.DEPARTMENT: "Which department is this for?",
        ConditionField.URGENCY: "How urgent is this request?",
    }
    GENERIC_QUESTION = "Could you provide more details?"

    def route(self, info: ExtractedInfo, rules: list[Rule]) -> RoutingDecision:
        """
        Find the rule that applies to the extracted info.

        Args:
            info: Fields extracted from the conversation so far.
            rules: Current rule snapshot. Not modified.

        Returns:
            RoutingDecision. Never raises for well-typed input.
        """
        sorted_rules = sorted(rules, key=lambda r: r.priority, reverse=True)
        potential = [r for r in sorted_rules if self.could_match(r, info)]

        logger.debug(
            "Routing request",
            request_type=info.request_type,
            location=info.location,
            rule_count=len(rules),
            potential_matches=[r.id for r in potential],
        )

        if not potential:
            decision = RoutingDecision(
                matched=False,
                confidence=self.NO_MATCH_CONFIDENCE,
                extracted_info=info,
                reasoning="No routing rule matches this request. Routing to general legal team.",
            )
        elif len(potential) == 1:
            # Only reachable outcome, even if some of its fields are still unknown
            rule = potential[0]
            decision = RoutingDecision(
                matched=True,
                assign_to=rule.action.assign_to,
                confidence=self.calculate_confidence(info, rule),
                matched_rule=rule,
                extracted_info=info,
                reasoning=(
                    f'Matched rule "{rule.name}" (Priority {rule.priority}). '
                    f"{rule.description or ''}"
                ).strip(),
            )
        else:
            decision = self._resolve_ambiguity(info, potential)

        logger.info(
            "Routing decision",
            matched=decision.matched,
            rule_id=decision.matched_rule.id if decision.matched_rule else None,
            assign_to=decision.assign_to,
            confidence=decision.confidence,
            needs_clarification=decision.needs_clarification is not None,
        )
        return decision

    def _resolve_ambiguity(self, info: ExtractedInfo, candidates: list[Rule]) -> RoutingDecision:
        """Handle several potential matches (candidates sorted priority descending)."""
        fields = self.find_differentiating_fields(candidates, info)

        if fields:
            return RoutingDecision(
                matched=False,
                confidence=self.CLARIFICATION_CONFIDENCE,
                extracted_info=info,
                reasoning=(
                    "Multiple potential matches found. "
                    "Need more information to determine the best route."
                ),
                needs_clarification=Clarification(
                    missing_fields=fields,
                    questions=[self.generate_clarification_question(f) for f in fields],
                ),
            )

        # Nothing left to ask: the LOWEST priority value wins here, not the highest.
        chosen = min(candidates, key=lambda r: r.priority)
        return RoutingDecision(
            matched=True,
            assign_to=chosen.action.assign_to,
            confidence=self.TIE_BREAK_CONFIDENCE,
            matched_rule=chosen,
            extracted_info=info,
            reasoning=(
                f"Multiple similar rules could match ({len(candidates)} candidates). "
                f'Selected "{chosen.name}" (Priority {chosen.priority}) as the tie-break choice.'
            ),
        )

    def could_match(self, rule: Rule, info: ExtractedInfo) -> bool:
        """
        Relaxed check: every condition on a known field holds, unknown fields
        are assumed satisfiable. Disabled rules never match.
        """
        if not rule.enabled:
            return False
        return evaluate_rule_conditions(rule.conditions, info, could_match=True)

    def matches(self, rule: Rule, info: ExtractedInfo) -> bool:
        """Strict check: enabled and every condition concretely satisfied."""
        if not rule.enabled:
            return False
        return evaluate_rule_conditions(rule.conditions, info)

    def calculate_confidence(self, info: ExtractedInfo, matched_rule: Rule | None = None) -> int:
        """Score how much of the request is known, boosted when a rule matched."""
        confidence = 50

        if info.request_type:
            confidence += 20
        if info.location:
            confidence += 20
        if info.value:
            confidence += 5
        if info.department:
            confidence += 5

        if matched_rule is not None:
            confidence = min(confidence + 20, 98)
        else:
            confidence = max(confidence - 30, 15)

        return round(confidence)

    def find_differentiating_fields(
        self,
        rules: list[Rule],
        info: ExtractedInfo,
    ) -> list[ConditionField]:
        """
        Condition fields across the candidates that are not yet known.

        Fields already supplied cannot narrow things further. Rules that only
        differ on fields already known are not deduplicated, so this can keep
        asking about a field that will not separate them.
        """
        fields: dict[ConditionField, None] = {}

        for rule in rules:
            for condition in rule.conditions:
                if not info.has_field(condition.field):
                    fields.setdefault(ConditionField(condition.field))

        return list(fields)

    def generate_clarification_question(self, field: ConditionField | str) -> str:
        """Natural-language prompt for a missing field."""
        try:
            return self.CLARIFICATION_QUESTIONS[ConditionField(field)]
        except ValueError:
            return self.GENERIC_QUESTION

    def test_rule(self, rule: Rule, info: ExtractedInfo) -> RuleTestResult:
        """
        Strictly test a single rule against sample info.

        Used by the admin "test this rule" action; reports each failed
        condition instead of the relaxed potential-match check.
        """
        if self.matches(rule, info):
            return RuleTestResult(
                matches=True,
                reason=f"All conditions satisfied. Would route to {rule.action.assign_to}",
            )

        if not rule.enabled:
            return RuleTestResult(matches=False, reason=f'Rule "{rule.name}" is disabled')

        failed = [c for c in rule.conditions if not evaluate_condition(c, info)]
        return RuleTestResult(
            matches=False,
            reason="Failed conditions: " + ", ".join(describe_condition(c) for c in failed),
            failed_conditions=failed,
        )


# Singleton instance
_engine_instance: RuleEngine | None = None


def get_rule_engine() -> RuleEngine:
    """Get the singleton rule engine instance."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = RuleEngine()
    return _engine_instance
