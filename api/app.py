"""
Main FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from config import get_settings, validate_production_config
from planner import (
    CompletionError,
    InvalidPreferences,
    MealPlanError,
    NoMatchingRecipes,
    build_meal_planner,
    build_slack_notifier,
)
from .models import ErrorType
from .middleware import (
    RequestTracingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeMiddleware,
    MetricsMiddleware,
    error_json,
)
from .routes import health_router, meal_plans_router

logger = structlog.get_logger()


def configure_logging(settings) -> None:
    """Structured JSON logging filtered at the configured level"""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.value)
        ),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=not settings.is_testing,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the planner and Slack notifier once per process"""
    settings = get_settings()

    logger.info("Starting meal planner service", version=settings.app_version)

    if settings.is_production:
        for issue in validate_production_config(settings):
            logger.error("Configuration issue", issue=issue)

    app.state.meal_planner = build_meal_planner(settings)
    app.state.slack_notifier = build_slack_notifier(settings)

    logger.info(
        "Meal planner ready",
        ai_mode="openai" if app.state.meal_planner.ai_enabled else "fallback",
        slack_configured=app.state.slack_notifier.is_configured,
    )

    yield

    logger.info("Shutting down meal planner service")
    await app.state.meal_planner.close()


_STATUS_ERROR_TYPES = {
    400: ErrorType.VALIDATION_ERROR,
    404: ErrorType.VALIDATION_ERROR,
    405: ErrorType.VALIDATION_ERROR,
    413: ErrorType.VALIDATION_ERROR,
    422: ErrorType.VALIDATION_ERROR,
    429: ErrorType.RATE_LIMIT_EXCEEDED,
    503: ErrorType.SERVICE_UNAVAILABLE,
}


def _error_type_for(exc: MealPlanError) -> ErrorType:
    if isinstance(exc, InvalidPreferences):
        return ErrorType.VALIDATION_ERROR
    if isinstance(exc, NoMatchingRecipes):
        return ErrorType.NO_MATCHING_RECIPES
    if isinstance(exc, CompletionError):
        return ErrorType.SERVICE_UNAVAILABLE
    return _STATUS_ERROR_TYPES.get(exc.status_code, ErrorType.INTERNAL_ERROR)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Seven-day dinner plans from household preferences",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    # Added innermost first; request tracing ends up outermost
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestSizeMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=["*"],
    )
    app.add_middleware(RequestTracingMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_json(
            exc.status_code,
            _STATUS_ERROR_TYPES.get(exc.status_code, ErrorType.INTERNAL_ERROR),
            str(exc.detail),
            request,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            messages.append(f"{field}: {error['msg']}" if field else error["msg"])

        logger.warning("Validation errors", errors=messages, path=request.url.path)
        return error_json(400, ErrorType.VALIDATION_ERROR, "Validation failed", request, errors=messages)

    @app.exception_handler(MealPlanError)
    async def meal_plan_exception_handler(request: Request, exc: MealPlanError):
        logger.warning(
            "Meal plan request failed",
            failure_type=exc.failure_type.value,
            error=exc.message,
            status_code=exc.status_code,
        )
        return error_json(
            exc.status_code,
            _error_type_for(exc),
            exc.message,
            request,
            errors=exc.details or None,
        )

    app.include_router(health_router)
    app.include_router(meal_plans_router)

    return app
