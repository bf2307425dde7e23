"""
Chat service for the legal request router.

This service handles one assistant turn:
- LLM extraction of request fields from the conversation
- Deterministic routing of those fields against the current rule snapshot
- Rendering the decision into a chat response

The service is stateless; conversation history and the rule snapshot are
passed in with each call.
"""

import time
from uuid import uuid4

from config.config import Settings, get_settings
from config.logging_config import get_logger
from models.models import ChatRequest, ChatResponse, ResponseType
from models.rule_models import Rule
from services.request_extractor import RequestExtractor, get_request_extractor
from services.response_builder import (
    build_action_buttons,
    build_clarification_form,
    build_clarification_message,
    build_fallback_message,
    build_success_message,
    build_summary_fields,
)
from services.rule_engine import RuleEngine, get_rule_engine

logger = get_logger(__name__)


class ChatService:
    """
    Turn a conversation into a routed, clarifying or fallback response.

    All operations are logged for observability and auditability.
    """

    def __init__(
        self,
        extractor: RequestExtractor | None = None,
        engine: RuleEngine | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or get_request_extractor()
        self.engine = engine or get_rule_engine()

    async def process_message(self, request: ChatRequest, rules: list[Rule]) -> ChatResponse:
        """
        Process a chat request and generate a response.

        Args:
            request: The conversation so far.
            rules: Rule snapshot to route against.

        Returns:
            ChatResponse; ``routing_decision`` is set whenever the rule engine ran.
        """
        start_time = time.perf_counter()
        conversation_id = request.conversation_id or uuid4()

        result = await self.extractor.extract(request.messages, request.user_text)

        if result.kind == "clarification_form":
            response = ChatResponse(
                conversation_id=conversation_id,
                message=result.context_message or "I need a bit more information to route your request.",
                response_type=ResponseType.CLARIFICATION_FORM,
                clarification_form=build_clarification_form(
                    result.missing_fields,
                    result.context_message,
                    result.inferred_request_type,
                ),
            )
        elif result.kind == "extracted" and result.info is not None:
            decision = self.engine.route(result.info, rules)
            summary = build_summary_fields(result.info, result.summary)

            if decision.matched and decision.assign_to:
                response = ChatResponse(
                    conversation_id=conversation_id,
                    message=build_success_message(decision),
                    response_type=ResponseType.ROUTED,
                    routing_decision=decision,
                    summary=summary,
                    actions=build_action_buttons(
                        decision.assign_to, result.info.request_type, result.summary
                    ),
                )
            elif decision.needs_clarification:
                response = ChatResponse(
                    conversation_id=conversation_id,
                    message=build_clarification_message(decision),
                    response_type=ResponseType.CLARIFICATION,
                    routing_decision=decision,
                    summary=summary,
                )
            else:
                response = ChatResponse(
                    conversation_id=conversation_id,
                    message=build_fallback_message(self.settings.fallback_assignee),
                    response_type=ResponseType.FALLBACK,
                    routing_decision=decision,
                    summary=summary,
                )
        else:
            response = ChatResponse(
                conversation_id=conversation_id,
                message=result.text,
                response_type=ResponseType.MESSAGE,
            )

        response.processing_time_ms = int((time.perf_counter() - start_time) * 1000)

        logger.info(
            "Chat response generated",
            conversation_id=str(conversation_id),
            response_type=response.response_type.value,
            processing_time_ms=response.processing_time_ms,
        )
        return response


# Singleton instance
_chat_service_instance: ChatService | None = None


def get_chat_service() -> ChatService:
    """Get the singleton chat service instance."""
    global _chat_service_instance
    if _chat_service_instance is None:
        _chat_service_instance = ChatService()
    return _chat_service_instance
