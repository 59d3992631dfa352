"""
Health check and monitoring routes
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
import structlog

from config import get_settings
from ..models import HealthResponse
from ..middleware import get_metrics

logger = structlog.get_logger()
router = APIRouter(tags=["Health & Monitoring"])

# Track service start time for uptime calculation
SERVICE_START_TIME = time.time()


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint
    The AI provider is optional: without it the service runs on the catalog alone.
    Monitoring payloads keep snake_case keys; only the /api envelopes are camelCase.
    """
    settings = get_settings()
    planner = getattr(request.app.state, "meal_planner", None)

    catalog_size = len(planner.fallback_planner.catalog) if planner else 0
    ai_enabled = bool(planner and planner.ai_enabled)

    checks = {
        "planner": planner is not None,
        "catalog": catalog_size > 0,
        "openai_configured": ai_enabled,
        "slack_configured": settings.slack_configured,
    }
    healthy = checks["planner"] and checks["catalog"]

    response = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service="meal-planner",
        version=settings.app_version,
        environment=settings.environment.value,
        checks=checks,
        ai_mode="openai" if ai_enabled else "fallback",
        catalog_size=catalog_size,
        uptime=round(time.time() - SERVICE_START_TIME, 2),
    )

    if not healthy:
        logger.warning("Health check failed", checks=checks)

    return JSONResponse(
        status_code=200 if healthy else 503,
        content=response.model_dump(mode="json"),
    )


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe: ready once the planner has been built"""
    ready = getattr(request.app.state, "meal_planner", None) is not None

    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "service": "meal-planner",
            "timestamp": _utcnow(),
        },
    )


@router.get("/metrics")
async def get_application_metrics():
    """Request counts, error rates and response times"""
    settings = get_settings()

    if not settings.enable_metrics:
        raise HTTPException(status_code=404, detail="Metrics disabled")

    uptime = time.time() - SERVICE_START_TIME

    return {
        **get_metrics(),
        "service_info": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment.value,
            "uptime_seconds": round(uptime, 2),
            "start_time": datetime.fromtimestamp(SERVICE_START_TIME, timezone.utc).isoformat(),
        },
        "configuration": {
            "rate_limit_requests": settings.rate_limit_requests,
            "rate_limit_window": settings.rate_limit_window,
            "max_request_size": settings.max_request_size,
            "ai_max_attempts": settings.ai_max_attempts,
        },
    }


@router.get("/")
async def root():
    """Root endpoint with service information"""
    settings = get_settings()

    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment.value,
        "status": "running",
        "uptime_seconds": round(time.time() - SERVICE_START_TIME, 2),
        "endpoints": {
            "generate_meal_plan": "/api/generate-meal-plan",
            "send_to_slack": "/api/send-to-slack",
            "preference_options": "/api/preference-options",
        },
        "health_check": "/health",
        "metrics": "/metrics" if settings.enable_metrics else None,
        "timestamp": _utcnow(),
    }


@router.get("/ping")
async def ping():
    """Simple ping endpoint for basic connectivity testing"""
    return {
        "message": "pong",
        "timestamp": _utcnow(),
        "service": "meal-planner",
    }
