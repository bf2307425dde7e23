"""
Response builder for routing outcomes.

Renders a RoutingDecision into the assistant message shown in chat, along
with the editable summary, follow-up actions and clarification form payloads.
"""

from config.legal_constants import LOCATION_OPTIONS, REQUEST_TYPE_OPTIONS
from models.models import ActionButton, ClarificationForm, SummaryField
from models.rule_models import ExtractedInfo, RoutingDecision
from services.condition_evaluator import stringify


def format_for_display(value: str | None) -> str:
    """
    Title-case an enumeration value.

    ``employment_hr`` -> ``Employment Hr``, ``united states`` -> ``United States``.
    """
    if not value:
        return ""
    separator = "_" if "_" in value else " "
    return " ".join(word[:1].upper() + word[1:] for word in value.split(separator))


def build_summary_fields(info: ExtractedInfo, summary: str | None = None) -> list[SummaryField]:
    """Editable summary entries for every extracted field that has a value."""
    entries = [
        ("requestType", "Request Type", info.request_type),
        ("location", "Location", info.location),
        ("department", "Department", info.department),
        ("urgency", "Urgency", stringify(info.urgency) if info.urgency else None),
        ("value", "Value", info.value),
        ("summary", "Summary", summary),
    ]
    return [SummaryField(key=key, label=label, value=value) for key, label, value in entries if value]


def build_action_buttons(assign_to: str, request_type: str | None, summary: str | None = None) -> list[ActionButton]:
    """Email the assignee, or open their profile on the configure page."""
    request_label = format_for_display(request_type) or "Legal"
    return [
        ActionButton(
            type="email",
            label=f"Email {assign_to}",
            email=assign_to,
            subject=f"Legal Request: {request_label}",
            body=(
                f"Hi,\n\nI have a {request_label.lower()} request that I'd like to discuss.\n\n"
                f"{summary or ''}\n\nThank you!"
            ),
        ),
        ActionButton(
            type="navigate",
            label=f"View {assign_to.split('@')[0]}'s Profile",
            path="/configure",
            highlight={"type": "attorney", "id": assign_to},
        ),
    ]


def build_clarification_form(
    missing_fields: list[str] | None,
    context_message: str | None,
    inferred_request_type: str | None = None,
) -> ClarificationForm:
    return ClarificationForm(
        fields=missing_fields or ["requestType", "location"],
        context_message=context_message or "",
        inferred_request_type=inferred_request_type,
        options={"requestType": REQUEST_TYPE_OPTIONS, "location": LOCATION_OPTIONS},
    )


def build_success_message(decision: RoutingDecision) -> str:
    request_label = format_for_display(decision.extracted_info.request_type) or "Legal"
    message = (
        "## We've got you covered!\n\n"
        f"Your request has been assigned to **{decision.assign_to}**.\n\n"
        "**What happens next?**\n"
        f"{decision.assign_to} specializes in {request_label.lower()} matters and will review "
        "your request soon. They'll reach out if they need any additional information.\n\n"
    )
    if decision.confidence < 100:
        message += f"*This routing is based on the information provided ({decision.confidence}% match).*\n\n"
    return message


def build_clarification_message(decision: RoutingDecision) -> str:
    questions = decision.needs_clarification.questions if decision.needs_clarification else []
    return "## Just need a bit more info\n\n" + "".join(f"{q}\n" for q in questions) + "\n---"


def build_fallback_message(fallback_assignee: str) -> str:
    return (
        "## We'll take it from here\n\n"
        "I couldn't find a specific team member for this request, but don't worry! "
        f"I've forwarded it to our general legal team at **{fallback_assignee}** who will make "
        "sure it gets to the right person.\n\n"
        "Someone will be in touch shortly.\n\n---"
    )
