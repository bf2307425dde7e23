"""Tests for chat message rendering."""

from conftest import cond, info, make_rule
from services.response_builder import (
    build_action_buttons,
    build_clarification_form,
    build_clarification_message,
    build_fallback_message,
    build_success_message,
    build_summary_fields,
    format_for_display,
)


def test_format_for_display():
    assert format_for_display("employment_hr") == "Employment Hr"
    assert format_for_display("united states") == "United States"
    assert format_for_display(None) == ""


def test_summary_skips_missing_fields():
    fields = build_summary_fields(info(request_type="contracts", urgency="high", value=5000), "Vendor MSA")

    assert [(f.key, f.value) for f in fields] == [
        ("requestType", "contracts"),
        ("urgency", "high"),
        ("value", 5000),
        ("summary", "Vendor MSA"),
    ]
    assert all(f.editable for f in fields)


def test_action_buttons():
    email, profile = build_action_buttons("jane.doe@acme.corp", "contracts", "Review an NDA")

    assert email.type == "email"
    assert email.email == "jane.doe@acme.corp"
    assert email.subject == "Legal Request: Contracts"
    assert "Review an NDA" in email.body
    assert profile.type == "navigate"
    assert profile.label == "View jane.doe's Profile"
    assert profile.highlight == {"type": "attorney", "id": "jane.doe@acme.corp"}


def test_clarification_form_defaults():
    form = build_clarification_form(None, None, "contracts")

    assert form.fields == ["requestType", "location"]
    assert form.context_message == ""
    assert form.inferred_request_type == "contracts"
    assert {o["value"] for o in form.options["location"]} >= {"australia", "europe"}


def test_success_message(engine):
    rules = [make_rule("r", cond("requestType", "employment_hr"), assign_to="sarah@acme.corp")]
    decision = engine.route(info(request_type="employment_hr"), rules)

    message = build_success_message(decision)

    assert "**sarah@acme.corp**" in message
    assert "employment hr matters" in message
    assert f"({decision.confidence}% match)" in message


def test_clarification_message_lists_questions(engine):
    rules = [
        make_rule("a", cond("requestType", "contracts")),
        make_rule("b", cond("requestType", "contracts"), cond("location", "europe")),
    ]
    decision = engine.route(info(request_type="contracts"), rules)

    message = build_clarification_message(decision)

    assert message.startswith("## Just need a bit more info")
    assert "Where are you located?\n" in message


def test_fallback_message_names_team():
    assert "**legal-general@acme.corp**" in build_fallback_message("legal-general@acme.corp")
