"""
Request Extractor for legal request routing.

Uses an LLM with function calling to turn a conversation into structured
request fields. The LLM never decides the assignee; it only fills in
ExtractedInfo for the rule engine.
"""

import json
from typing import Any, Literal

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from config.config import Settings, get_settings
from config.legal_constants import (
    LOCATION_OPTIONS,
    LOCATIONS,
    REQUEST_TYPE_OPTIONS,
    REQUEST_TYPES,
    URGENCY_LEVELS,
)
from config.logging_config import get_logger
from models.models import ChatMessage
from models.rule_models import ExtractedInfo

logger = get_logger(__name__)

EXTRACT_TOOL_NAME = "extract_request_info"
CLARIFY_TOOL_NAME = "request_clarification_ui"

FALLBACK_REPLY = "Could you please tell me more about your request and where you're located?"


def generate_system_prompt() -> str:
    """System prompt listing the request types and locations the tools accept."""
    request_types = "\n".join(
        f"- {option['value']}: {option['description'].lower()}" for option in REQUEST_TYPE_OPTIONS
    )
    locations = ", ".join(option["value"] for option in LOCATION_OPTIONS)

    return f"""You are a legal triage assistant for Acme Corp. Your job is to quickly connect employees with the right legal team member.

CRITICAL PROCESS:
1. Read the user's first message
2. If you can confidently infer BOTH requestType AND location, immediately call {EXTRACT_TOOL_NAME}
3. If you CANNOT determine requestType OR location, immediately call {CLARIFY_TOOL_NAME} to show an interactive form
   - ALWAYS include your best guess as inferredRequestType (even if not 100% confident)
   - The form will pre-select this and allow users to change it or provide a custom description
4. DO NOT ask text-based clarifying questions about requestType or location - always use the form

REQUEST TYPES (infer from context):
{request_types}

LOCATIONS:
- {locations}

TOOL USAGE:
- Use {CLARIFY_TOOL_NAME} when requestType OR location cannot be inferred
  * Include inferredRequestType with your best guess (helps users)
  * Set contextMessage to briefly explain what you need
- Use {EXTRACT_TOOL_NAME} when you have both requestType AND location

IMPORTANT: Users are NOT lawyers. Use simple language."""


TOOLS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": CLARIFY_TOOL_NAME,
            "description": (
                "Call this immediately when you cannot determine the request type or location "
                "from the user's message. Shows an interactive form to the user."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "missingFields": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["requestType", "location"]},
                        "description": "Which fields need clarification",
                    },
                    "contextMessage": {
                        "type": "string",
                        "description": "Brief message to show before the form",
                    },
                    "inferredRequestType": {
                        "type": "string",
                        "enum": list(REQUEST_TYPES),
                        "description": "Best guess for the request type, pre-selected in the form",
                    },
                },
                "required": ["missingFields", "contextMessage"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": EXTRACT_TOOL_NAME,
            "description": (
                "Call this immediately once you can infer the request type and location from "
                "the user's message. The rule engine handles the rest."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "requestType": {
                        "type": "string",
                        "enum": list(REQUEST_TYPES),
                        "description": (
                            "The type of legal request (infer from context, do not pick "
                            "general_advice unless specified by user)"
                        ),
                    },
                    "location": {
                        "type": "string",
                        "enum": list(LOCATIONS),
                        "description": "Geographic location (clarify with user if unsure)",
                    },
                    "summary": {"type": "string", "description": "Brief summary of what the user needs"},
                    "value": {"type": "number", "description": "Contract/deal value in dollars (optional)"},
                    "department": {"type": "string", "description": "User's department (optional)"},
                    "urgency": {
                        "type": "string",
                        "enum": list(URGENCY_LEVELS),
                        "description": "How urgent (optional)",
                    },
                },
                "required": ["requestType", "location", "summary"],
            },
        },
    },
]


class ExtractionResult(BaseModel):
    """What the LLM produced for one turn."""
    kind: Literal["extracted", "clarification_form", "message"]
    info: ExtractedInfo | None = None
    summary: str | None = None
    missing_fields: list[str] = Field(default_factory=list)
    context_message: str | None = None
    inferred_request_type: str | None = None
    text: str = ""


class RequestExtractor:
    """
    Extract structured request fields from a conversation using LLM tool calls.

    Network and parsing failures degrade to a plain-text reply asking for more
    detail; they are logged, never raised.
    """

    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None):
        self.settings = settings or get_settings()
        self.client = client or AsyncOpenAI(
            api_key=self.settings.openai_api_key or None,
            base_url=self.settings.openai_base_url,
        )

    async def extract(self, messages: list[ChatMessage], raw_text: str) -> ExtractionResult:
        """
        Run one LLM turn over the conversation.

        Args:
            messages: Conversation so far.
            raw_text: User text recorded on the resulting ExtractedInfo.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.settings.llm_model,
                messages=[
                    {"role": "system", "content": generate_system_prompt()},
                    *({"role": m.role.value, "content": m.content} for m in messages),
                ],
                tools=TOOLS,
                tool_choice="auto",
                temperature=self.settings.llm_temperature,
                top_p=self.settings.llm_top_p,
            )
        except OpenAIError as e:
            logger.error("LLM extraction error", error=str(e))
            return ExtractionResult(kind="message", text=FALLBACK_REPLY)

        message = response.choices[0].message
        tool_calls = message.tool_calls or []

        if not tool_calls:
            return ExtractionResult(kind="message", text=(message.content or "").strip() or FALLBACK_REPLY)

        call = tool_calls[0]
        return self.parse_tool_call(call.function.name, call.function.arguments, raw_text)

    def parse_tool_call(self, name: str, arguments: str, raw_text: str) -> ExtractionResult:
        """Turn a tool call's JSON arguments into an ExtractionResult."""
        try:
            args = json.loads(arguments or "{}")
        except json.JSONDecodeError:
            logger.warning("Tool call arguments are not valid JSON", tool=name, arguments=arguments[:100])
            return ExtractionResult(kind="message", text=FALLBACK_REPLY)

        if not isinstance(args, dict):
            logger.warning("Tool call arguments are not an object", tool=name)
            return ExtractionResult(kind="message", text=FALLBACK_REPLY)

        if name == CLARIFY_TOOL_NAME:
            return ExtractionResult(
                kind="clarification_form",
                missing_fields=args.get("missingFields") or ["requestType", "location"],
                context_message=args.get("contextMessage"),
                inferred_request_type=args.get("inferredRequestType"),
            )

        if name == EXTRACT_TOOL_NAME:
            try:
                info = ExtractedInfo(
                    request_type=args.get("requestType"),
                    location=args.get("location"),
                    value=args.get("value"),
                    department=args.get("department"),
                    urgency=args.get("urgency"),
                    raw_text=raw_text,
                )
            except ValidationError as e:
                logger.warning("Extracted fields failed validation", errors=e.errors())
                return ExtractionResult(kind="message", text=FALLBACK_REPLY)

            logger.info(
                "Extracted request info",
                request_type=info.request_type,
                location=info.location,
                value=info.value,
                urgency=info.urgency,
            )
            return ExtractionResult(kind="extracted", info=info, summary=args.get("summary"))

        logger.warning("Unknown tool call", tool=name)
        return ExtractionResult(kind="message", text=FALLBACK_REPLY)


# Singleton instance
_extractor_instance: RequestExtractor | None = None


def get_request_extractor() -> RequestExtractor:
    """Get the singleton request extractor instance."""
    global _extractor_instance
    if _extractor_instance is None:
        _extractor_instance = RequestExtractor()
    return _extractor_instance
