"""
Legal Request Router API

Routes free-text legal requests to the right staff member using admin-defined
rules. An LLM extracts structured fields from the conversation; the routing
decision itself is deterministic.

This API provides:
- Chat interface that extracts request fields and routes them
- Rule management (create, update, delete, test)
- Coverage analysis of the current rule set
- Comprehensive logging and observability
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config import Settings, get_settings
from config.logging_config import configure_logging, get_logger, log_request_context
from models.coverage_models import CoverageReport
from models.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    RuleCreate,
    RuleTestRequest,
    RuleUpdate,
)
from models.rule_models import ExtractedInfo, Rule, RoutingDecision, RuleTestResult
from services.chat_service import ChatService, get_chat_service
from services.coverage_analyzer import RuleCoverageAnalyzer, get_coverage_analyzer
from services.rule_engine import RuleEngine, get_rule_engine
from services.rule_store import RuleNotFoundError, RuleStore, get_rule_store

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)

MISSING_API_KEY = "Server missing OpenAI credentials"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events with proper logging.
    """
    settings = get_settings()

    logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        config=settings.get_safe_config_dict(),
    )

    yield

    logger.info("Application shutting down")


def require_openai_settings(settings: Settings = Depends(get_settings)) -> Settings:
    """Chat needs an LLM key; resolved before the chat service is built."""
    if not settings.openai_api_key:
        raise HTTPException(status_code=500, detail=MISSING_API_KEY)
    return settings


def _error_response(request: Request, status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            request_id=getattr(request.state, "request_id", None),
        ).model_dump(mode="json", by_alias=True),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=__doc__,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and context."""
        request_id = str(uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        log_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        processing_time = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(processing_time)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            processing_time_ms=processing_time,
        )

        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with structured response."""
        return _error_response(request, exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))

    @app.exception_handler(RuleNotFoundError)
    async def rule_not_found_handler(request: Request, exc: RuleNotFoundError):
        return _error_response(request, 404, "RULE_NOT_FOUND", "Rule not found")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", error=str(exc))
        return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all API routes."""

    @app.get("/", tags=["Root"])
    async def root(settings: Settings = Depends(get_settings)):
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": "/docs" if settings.debug else "disabled",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(
        settings: Settings = Depends(get_settings),
        store: RuleStore = Depends(get_rule_store),
    ) -> HealthResponse:
        """
        Health check endpoint for monitoring.

        Routing and coverage work without an LLM key; only chat needs it,
        so a missing key reports degraded rather than unhealthy.
        """
        checks = {
            "api": True,
            "rules_loaded": bool(store.list_rules()),
            "openai_configured": bool(settings.openai_api_key),
        }

        if all(checks.values()):
            status = HealthStatus.HEALTHY
        elif checks["api"]:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return HealthResponse(
            status=status,
            version=settings.app_version,
            environment=settings.environment,
            checks=checks,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @app.get("/api/v1/rules", response_model=list[Rule], tags=["Rules"])
    async def list_rules(store: RuleStore = Depends(get_rule_store)) -> list[Rule]:
        return store.list_rules()

    @app.get("/api/v1/rules/by-assignee", response_model=dict[str, list[Rule]], tags=["Rules"])
    async def rules_by_assignee(store: RuleStore = Depends(get_rule_store)):
        """Rules grouped by the address they assign to."""
        return store.rules_by_assignee()

    @app.get("/api/v1/rules/attorneys", response_model=list[str], tags=["Rules"])
    async def list_attorneys(store: RuleStore = Depends(get_rule_store)) -> list[str]:
        """Unique assignees across all rules."""
        return store.assignees()

    @app.get("/api/v1/rules/{rule_id}", response_model=Rule, tags=["Rules"])
    async def get_rule(rule_id: str, store: RuleStore = Depends(get_rule_store)) -> Rule:
        return store.get_rule(rule_id)

    @app.post("/api/v1/rules", response_model=Rule, status_code=201, tags=["Rules"])
    async def create_rule(payload: RuleCreate, store: RuleStore = Depends(get_rule_store)) -> Rule:
        return store.add_rule(payload)

    @app.put("/api/v1/rules/{rule_id}", response_model=Rule, tags=["Rules"])
    async def update_rule(
        rule_id: str,
        payload: RuleUpdate,
        store: RuleStore = Depends(get_rule_store),
    ) -> Rule:
        return store.update_rule(rule_id, payload)

    @app.delete("/api/v1/rules/{rule_id}", status_code=204, tags=["Rules"])
    async def delete_rule(rule_id: str, store: RuleStore = Depends(get_rule_store)) -> Response:
        store.delete_rule(rule_id)
        return Response(status_code=204)

    @app.post("/api/v1/rules/{rule_id}/test", response_model=RuleTestResult, tags=["Rules"])
    async def test_rule(
        rule_id: str,
        payload: RuleTestRequest,
        store: RuleStore = Depends(get_rule_store),
        engine: RuleEngine = Depends(get_rule_engine),
    ) -> RuleTestResult:
        """
        Strictly test one rule against sample extracted info.

        Reports which conditions failed rather than the relaxed check used
        during routing.
        """
        return engine.test_rule(store.get_rule(rule_id), payload.extracted_info)

    # ------------------------------------------------------------------
    # Routing and coverage
    # ------------------------------------------------------------------

    @app.get("/api/v1/coverage", response_model=CoverageReport, tags=["Coverage"])
    async def coverage(
        store: RuleStore = Depends(get_rule_store),
        analyzer: RuleCoverageAnalyzer = Depends(get_coverage_analyzer),
    ) -> CoverageReport:
        """Coverage matrix, gaps, conflicts and warnings for the current rules."""
        return analyzer.analyze_coverage(store.list_rules())

    @app.post("/api/v1/route", response_model=RoutingDecision, tags=["Routing"])
    async def route(
        info: ExtractedInfo,
        store: RuleStore = Depends(get_rule_store),
        engine: RuleEngine = Depends(get_rule_engine),
    ) -> RoutingDecision:
        """Route already-extracted request fields without calling the LLM."""
        decision = engine.route(info, store.list_rules())
        if decision.matched and decision.matched_rule:
            store.increment_match_count(decision.matched_rule.id)
        return decision

    @app.post("/api/v1/chat", response_model=ChatResponse, tags=["Chat"])
    async def chat(
        request: ChatRequest,
        settings: Settings = Depends(require_openai_settings),
        chat_service: ChatService = Depends(get_chat_service),
        store: RuleStore = Depends(get_rule_store),
    ) -> ChatResponse:
        """
        Send the conversation to the routing assistant.

        The LLM extracts request type, location and optional fields; the rule
        engine decides who the request goes to.
        """
        logger.info("Chat request received", message_count=len(request.messages))

        response = await chat_service.process_message(request, store.list_rules())

        decision = response.routing_decision
        if decision and decision.matched and decision.matched_rule:
            store.increment_match_count(decision.matched_rule.id)
        return response


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
