"""
Pydantic models for the routing rule engine.

This module defines the structured representation of admin-defined routing
rules, the fields extracted from a conversation, and routing decisions.

Attributes are snake_case in Python and camelCase on the wire
(``requestType``, ``assignTo``, ``needsClarification``...). Both spellings
are accepted on input.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Enumerations
# ============================================================================

class ConditionField(str, Enum):
    """Extracted fields a condition can test."""
    REQUEST_TYPE = "requestType"
    LOCATION = "location"
    VALUE = "value"
    DEPARTMENT = "department"
    URGENCY = "urgency"


class ConditionOperator(str, Enum):
    """Comparison operators available to conditions."""
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    NOT_EQUALS = "not_equals"


class Urgency(str, Enum):
    """Urgency levels reported by the requester."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ============================================================================
# Rules
# ============================================================================

class Condition(CamelModel):
    """Single field/operator/value test. Immutable once attached to a rule."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    field: ConditionField = Field(..., description="Extracted field to test")
    operator: ConditionOperator = Field(..., description="Comparison operator")
    value: str | int | float = Field(..., description="Value to compare against")


class RoutingAction(CamelModel):
    """What to do when a rule applies."""
    assign_to: str = Field(..., description="Email address of the assignee")


class Rule(CamelModel):
    """
    Admin-defined routing rule.

    Conditions are ANDed; an empty condition list matches every request.
    Higher ``priority`` values are evaluated first.
    """
    id: str = Field(..., description="Unique rule ID (e.g., 'rule-1')")
    name: str = Field(..., description="Display name")
    description: str | None = Field(default=None, description="What the rule is for")
    enabled: bool = Field(default=True, description="Disabled rules never match")
    priority: int = Field(default=1, description="Higher = evaluated first")
    conditions: list[Condition] = Field(default_factory=list, description="ANDed conditions")
    action: RoutingAction = Field(..., description="Assignment action")
    created_at: str | None = Field(default=None, description="ISO timestamp of creation")
    match_count: int = Field(default=0, ge=0, description="Number of routed matches")


# ============================================================================
# Extracted Info (from the LLM collaborator)
# ============================================================================

# Condition field -> ExtractedInfo attribute
FIELD_ATTRIBUTES: dict[ConditionField, str] = {
    ConditionField.REQUEST_TYPE: "request_type",
    ConditionField.LOCATION: "location",
    ConditionField.VALUE: "value",
    ConditionField.DEPARTMENT: "department",
    ConditionField.URGENCY: "urgency",
}


class ExtractedInfo(CamelModel):
    """Structured fields extracted from one conversation turn."""
    request_type: str | None = Field(default=None, description="Legal request type")
    location: str | None = Field(default=None, description="Requester location")
    value: float | None = Field(default=None, description="Contract/deal value in dollars")
    department: str | None = Field(default=None, description="Requester department")
    urgency: Urgency | None = Field(default=None, description="Requester urgency")
    raw_text: str = Field(default="", description="Conversation text the fields came from")

    def get_field(self, field: ConditionField | str):
        """Return the value for a condition field, or None when absent or unknown."""
        try:
            attribute = FIELD_ATTRIBUTES[ConditionField(field)]
        except ValueError:
            return None
        return getattr(self, attribute)

    def has_field(self, field: ConditionField | str) -> bool:
        """A field is present when it is not None."""
        return self.get_field(field) is not None


# ============================================================================
# Routing Decision
# ============================================================================

class Clarification(CamelModel):
    """Fields to ask about when several rules are still possible."""
    missing_fields: list[ConditionField] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)


class RoutingDecision(CamelModel):
    """
    Outcome of routing one ExtractedInfo against a rule set.

    ``reasoning`` is informational only; callers must branch on ``matched``
    and ``needs_clarification``.
    """
    matched: bool = Field(..., description="Whether a rule was selected")
    assign_to: str | None = Field(default=None, description="Assignee from the selected rule")
    confidence: int = Field(..., ge=0, le=100, description="Routing confidence (0-100)")
    matched_rule: Rule | None = Field(default=None, description="Selected rule")
    extracted_info: ExtractedInfo = Field(..., description="Input the decision was made on")
    reasoning: str = Field(..., description="Human-readable explanation")
    needs_clarification: Clarification | None = Field(
        default=None, description="Questions that would disambiguate candidate rules"
    )


class RuleTestResult(CamelModel):
    """Result of strictly testing one rule against sample info."""
    matches: bool
    reason: str
    failed_conditions: list[Condition] = Field(default_factory=list)
