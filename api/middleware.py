"""
Middleware for the Weekly Meal Planner API
Request tracing, rate limiting, security headers, size limits and metrics
"""

import time
import uuid
from typing import Optional, Dict, Any, Callable
from datetime import datetime, timezone
from collections import defaultdict, deque

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from config import get_settings
from .models import ErrorResponse, ErrorType

logger = structlog.get_logger()
settings = get_settings()

UNLIMITED_PATHS = {"/health", "/ready", "/ping", "/metrics"}


def response_time(request: Request) -> str:
    """Elapsed time since the request entered the stack, as '<n>ms'"""
    start_time = getattr(request.state, "start_time", None)
    if start_time is None:
        return "0ms"
    return f"{int((time.time() - start_time) * 1000)}ms"


def error_json(
    status_code: int,
    error_type: ErrorType,
    error: str,
    request: Optional[Request] = None,
    errors: Optional[list] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render an ErrorResponse envelope"""
    body = ErrorResponse(
        error=error,
        error_type=error_type,
        errors=errors,
        request_id=getattr(request.state, "request_id", None) if request else None,
        response_time=response_time(request) if request else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True, mode="json"),
        headers=headers,
    )


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Add request tracing and timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        start_time = time.time()

        request.state.request_id = request_id
        request.state.start_time = start_time

        logger.info(
            "Request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed",
                request_id=request_id,
                error=str(exc),
                error_type=type(exc).__name__,
                process_time=round(time.time() - start_time, 4),
            )
            detail = "An unexpected error occurred. Please try again later."
            if not settings.is_production:
                detail = str(exc) or detail
            response = error_json(500, ErrorType.INTERNAL_ERROR, detail, request)

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        logger.info(
            "Request completed",
            request_id=request_id,
            status_code=response.status_code,
            process_time=round(process_time, 4),
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client rate limiting over a sliding window"""

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
        cleanup_interval: Optional[float] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window

        # Request timestamps per client IP
        self.request_history: Dict[str, deque] = defaultdict(deque)

        # Idle clients are swept at most once per interval
        self.cleanup_interval = cleanup_interval if cleanup_interval is not None else self.window
        self.last_cleanup = time.time()

    def _prune(self, history: deque, now: float) -> None:
        cutoff = now - self.window
        while history and history[0] <= cutoff:
            history.popleft()

    def _cleanup_old_requests(self, now: float) -> None:
        """Drop expired timestamps for every client and forget idle ones"""
        if now - self.last_cleanup < self.cleanup_interval:
            return

        for client_ip in list(self.request_history):
            history = self.request_history[client_ip]
            self._prune(history, now)
            if not history:
                del self.request_history[client_ip]

        self.last_cleanup = now

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        self._cleanup_old_requests(now)
        history = self.request_history[client_ip]
        self._prune(history, now)

        if len(history) >= self.max_requests:
            retry_after = int(history[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded",
                client_ip=client_ip,
                requests=len(history),
                window=self.window,
                request_id=getattr(request.state, "request_id", None),
            )
            return error_json(
                429,
                ErrorType.RATE_LIMIT_EXCEEDED,
                "Too many requests from this IP, please try again later.",
                request,
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(now + retry_after)),
                },
            )

        history.append(now)
        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - len(history)))
        response.headers["X-RateLimit-Reset"] = str(int(history[0] + self.window))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Only add HSTS in production with HTTPS
        if settings.is_production and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return response


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Limit request body size"""

    def __init__(self, app, max_size: Optional[int] = None):
        super().__init__(app)
        self.max_size = max_size or settings.max_request_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            return error_json(
                413,
                ErrorType.VALIDATION_ERROR,
                f"Request body too large. Maximum size: {self.max_size} bytes",
                request,
            )

        return await call_next(request)


class RequestMetrics:
    """In-process request counters"""

    def __init__(self, max_samples: int = 1000):
        self.max_samples = max_samples
        self.request_count: Dict[str, int] = defaultdict(int)
        self.error_count: Dict[str, int] = defaultdict(int)
        self.response_times: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.max_samples))
        self.active_requests = 0

    def record(self, endpoint: str, status_code: int, elapsed: float) -> None:
        self.request_count[endpoint] += 1
        self.response_times[endpoint].append(elapsed)
        if status_code >= 400:
            self.error_count[endpoint] += 1

    def snapshot(self) -> Dict[str, Any]:
        total_requests = sum(self.request_count.values())
        total_errors = sum(self.error_count.values())

        avg_response_times = {
            endpoint: sum(times) / len(times)
            for endpoint, times in self.response_times.items()
            if times
        }

        return {
            "total_requests": total_requests,
            "total_errors": total_errors,
            "error_rate": total_errors / total_requests if total_requests > 0 else 0,
            "active_requests": self.active_requests,
            "request_count_by_endpoint": dict(self.request_count),
            "error_count_by_endpoint": dict(self.error_count),
            "avg_response_times": avg_response_times,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


# Shared by the middleware and the /metrics route
request_metrics = RequestMetrics()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect application metrics"""

    def __init__(self, app, metrics: Optional[RequestMetrics] = None):
        super().__init__(app)
        self.metrics = metrics or request_metrics

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        endpoint = f"{request.method} {request.url.path}"

        self.metrics.active_requests += 1
        try:
            response = await call_next(request)
            self.metrics.record(endpoint, response.status_code, time.time() - start_time)
            return response
        except Exception:
            self.metrics.record(endpoint, 500, time.time() - start_time)
            raise
        finally:
            self.metrics.active_requests -= 1


def get_metrics() -> Dict[str, Any]:
    """Get current application metrics"""
    return request_metrics.snapshot()
