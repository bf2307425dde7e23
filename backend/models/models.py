"""
Pydantic models for API request/response validation.

Shape validation of rules and extracted info happens here, at the HTTP
boundary; the rule engine assumes its inputs already satisfy these models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from models.rule_models import CamelModel, Condition, ExtractedInfo, RoutingAction, RoutingDecision


class MessageRole(str, Enum):
    """Valid roles for chat messages."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(CamelModel):
    """
    A single message in a chat conversation.

    Attributes:
        role: Who sent the message (user, assistant, system).
        content: The message text content.
    """
    role: MessageRole = Field(..., description="Message sender role")
    content: str = Field(..., min_length=1, max_length=10000, description="Message content")

    @field_validator("content")
    @classmethod
    def validate_content_not_empty(cls, v: str) -> str:
        """Ensure content is not just whitespace."""
        if not v.strip():
            raise ValueError("Message content cannot be empty or whitespace only")
        return v.strip()


class ChatRequest(CamelModel):
    """
    Request to route a conversation to the right legal team member.

    Attributes:
        messages: Full conversation so far, oldest first.
        conversation_id: Optional ID to continue an existing conversation.
    """
    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation messages")
    conversation_id: UUID | None = Field(
        default=None,
        description="Existing conversation ID to continue"
    )

    @property
    def user_text(self) -> str:
        """All user messages joined, used as the extracted info's raw text."""
        return " ".join(m.content for m in self.messages if m.role == MessageRole.USER)


class ResponseType(str, Enum):
    """Type of response from the assistant."""
    ROUTED = "routed"  # A rule picked an assignee
    CLARIFICATION = "clarification"  # Rule engine needs more fields
    CLARIFICATION_FORM = "clarification_form"  # LLM could not infer type/location
    FALLBACK = "fallback"  # No rule applies, general team
    MESSAGE = "message"  # Plain assistant text, no routing yet


class SummaryField(CamelModel):
    """Editable summary entry shown with a routing response."""
    key: str
    label: str
    value: str | float
    editable: bool = True


class ActionButton(CamelModel):
    """Follow-up action offered after routing (email the assignee, view profile)."""
    type: Literal["email", "navigate"]
    label: str
    email: str | None = None
    subject: str | None = None
    body: str | None = None
    path: str | None = None
    highlight: dict[str, str] | None = None


class ClarificationForm(CamelModel):
    """Form asking the user for request type and/or location."""
    fields: list[str] = Field(default_factory=lambda: ["requestType", "location"])
    context_message: str = ""
    inferred_request_type: str | None = None
    options: dict[str, list[dict[str, str]]] = Field(default_factory=dict)


class ChatResponse(CamelModel):
    """
    Response from the routing assistant.

    Attributes:
        conversation_id: The conversation this response belongs to.
        message: Rendered assistant message (markdown).
        response_type: Classification of the response type.
        routing_decision: Rule engine output when routing ran.
        summary: Editable summary of extracted fields.
        actions: Follow-up actions for a routed request.
        clarification_form: Form to show when type/location are unknown.
        processing_time_ms: Time taken to generate the response.
    """
    conversation_id: UUID = Field(default_factory=uuid4, description="Conversation ID")
    message: str = Field(..., description="Assistant response")
    response_type: ResponseType = Field(..., description="Type of response")
    routing_decision: RoutingDecision | None = Field(default=None, description="Routing decision")
    summary: list[SummaryField] = Field(default_factory=list)
    actions: list[ActionButton] = Field(default_factory=list)
    clarification_form: ClarificationForm | None = Field(default=None)
    processing_time_ms: int = Field(default=0, ge=0, description="Processing time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class RuleCreate(CamelModel):
    """Payload for creating a rule. Missing id, priority and enabled get defaults."""
    id: str | None = None
    name: str = Field(..., min_length=1)
    description: str | None = None
    enabled: bool = True
    priority: int | None = None
    conditions: list[Condition]
    action: RoutingAction


class RuleUpdate(CamelModel):
    """Partial rule update; the rule id cannot be changed."""
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    enabled: bool | None = None
    priority: int | None = None
    conditions: list[Condition] | None = None
    action: RoutingAction | None = None

    @field_validator("name", "enabled", "priority", "conditions", "action")
    @classmethod
    def reject_explicit_null(cls, v):
        """Omit a field to leave it unchanged; only description may be cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class RuleTestRequest(CamelModel):
    """Sample extracted info to test a single rule against."""
    extracted_info: ExtractedInfo


class HealthStatus(str, Enum):
    """System health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(CamelModel):
    """
    Health check response for monitoring.

    Attributes:
        status: Overall system health status.
        version: Application version.
        environment: Deployment environment.
        checks: Individual component health checks.
    """
    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    checks: dict[str, bool] = Field(default_factory=dict, description="Component health checks")


class ErrorResponse(CamelModel):
    """
    Standardized error response.

    Attributes:
        error: Error type/code.
        message: Human-readable error message.
        details: Additional error details.
        request_id: Request ID for tracing.
    """
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Any | None = Field(default=None, description="Additional details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
