"""Tests for LLM tool-call handling, using a fake OpenAI client."""

import asyncio
import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from config.config import Settings
from models.models import ChatMessage
from services.request_extractor import (
    CLARIFY_TOOL_NAME,
    EXTRACT_TOOL_NAME,
    FALLBACK_REPLY,
    TOOLS,
    RequestExtractor,
    generate_system_prompt,
)


class FakeCompletions:

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def completion(content=None, tool_name=None, arguments=None):
    tool_calls = None
    if tool_name:
        tool_calls = [SimpleNamespace(function=SimpleNamespace(name=tool_name, arguments=arguments))]
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="sk-test", llm_model="test-model")


def extractor_with(settings, completions) -> RequestExtractor:
    return RequestExtractor(settings=settings, client=fake_client(completions))


MESSAGES = [ChatMessage(role="user", content="I need an NDA reviewed in Sydney")]


class TestParseToolCall:

    def test_extract_tool(self, settings):
        extractor = extractor_with(settings, FakeCompletions())
        arguments = json.dumps({
            "requestType": "contracts",
            "location": "australia",
            "summary": "NDA review",
            "value": 25000,
            "urgency": "high",
        })

        result = extractor.parse_tool_call(EXTRACT_TOOL_NAME, arguments, "raw")

        assert result.kind == "extracted"
        assert result.summary == "NDA review"
        assert result.info.request_type == "contracts"
        assert result.info.location == "australia"
        assert result.info.value == 25000
        assert result.info.urgency.value == "high"
        assert result.info.department is None
        assert result.info.raw_text == "raw"

    def test_clarification_tool(self, settings):
        extractor = extractor_with(settings, FakeCompletions())
        arguments = json.dumps({
            "missingFields": ["location"],
            "contextMessage": "Where are you based?",
            "inferredRequestType": "contracts",
        })

        result = extractor.parse_tool_call(CLARIFY_TOOL_NAME, arguments, "raw")

        assert result.kind == "clarification_form"
        assert result.missing_fields == ["location"]
        assert result.context_message == "Where are you based?"
        assert result.inferred_request_type == "contracts"

    def test_clarification_defaults_missing_fields(self, settings):
        extractor = extractor_with(settings, FakeCompletions())

        result = extractor.parse_tool_call(CLARIFY_TOOL_NAME, "{}", "raw")

        assert result.missing_fields == ["requestType", "location"]

    @pytest.mark.parametrize(
        "name, arguments",
        [
            (EXTRACT_TOOL_NAME, "{not json"),
            (EXTRACT_TOOL_NAME, "[1, 2]"),
            (EXTRACT_TOOL_NAME, json.dumps({"requestType": "contracts", "urgency": "whenever"})),
            ("delete_everything", "{}"),
        ],
    )
    def test_bad_calls_fall_back_to_a_question(self, settings, name, arguments):
        extractor = extractor_with(settings, FakeCompletions())

        result = extractor.parse_tool_call(name, arguments, "raw")

        assert result.kind == "message"
        assert result.text == FALLBACK_REPLY


class TestExtract:

    def test_sends_prompt_tools_and_settings(self, settings):
        completions = FakeCompletions(
            completion(tool_name=EXTRACT_TOOL_NAME, arguments=json.dumps({
                "requestType": "contracts", "location": "australia", "summary": "NDA",
            }))
        )

        result = asyncio.run(extractor_with(settings, completions).extract(MESSAGES, "I need an NDA"))

        assert result.kind == "extracted"
        assert result.info.raw_text == "I need an NDA"

        call = completions.calls[0]
        assert call["model"] == "test-model"
        assert call["tools"] is TOOLS
        assert call["messages"][0]["role"] == "system"
        assert call["messages"][1] == {"role": "user", "content": "I need an NDA reviewed in Sydney"}

    def test_plain_text_reply(self, settings):
        completions = FakeCompletions(completion(content="  Hello! What do you need?  "))

        result = asyncio.run(extractor_with(settings, completions).extract(MESSAGES, "hi"))

        assert result.kind == "message"
        assert result.text == "Hello! What do you need?"

    def test_empty_reply(self, settings):
        completions = FakeCompletions(completion(content=None))

        result = asyncio.run(extractor_with(settings, completions).extract(MESSAGES, "hi"))

        assert result.text == FALLBACK_REPLY

    def test_api_error_is_not_raised(self, settings):
        completions = FakeCompletions(error=OpenAIError("connection reset"))

        result = asyncio.run(extractor_with(settings, completions).extract(MESSAGES, "hi"))

        assert result.kind == "message"
        assert result.text == FALLBACK_REPLY


def test_system_prompt_lists_every_option():
    prompt = generate_system_prompt()

    assert "privacy_data" in prompt
    assert "united kingdom" in prompt
    assert EXTRACT_TOOL_NAME in prompt and CLARIFY_TOOL_NAME in prompt
