import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("sessionlog.latency")

# Service Level Objectives (SLOs) - Max latency definitions
SLO_THRESHOLDS = {
    "/api/v1/auth/login": 0.800,  # bcrypt verification dominates
    "/api/v1/auth/logout": 0.200,
    "/api/v1/user-logs": 0.400,  # paginated admin listing
    "/health": 0.200,
}


class LatencyMonitorMiddleware(BaseHTTPMiddleware):
    """
    Middleware to monitor request latency and check against defined SLOs.
    Logs warnings if SLO is breached.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        self._check_slo(request.url.path, process_time)

        return response

    def _check_slo(self, path: str, duration: float):
        budget = SLO_THRESHOLDS.get(path.rstrip("/") or "/")
        if budget and duration > budget:
            logger.warning(
                f"SLO_BREACH | Endpoint: {path} | Duration: {duration:.4f}s | Budget: {budget:.3f}s"
            )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add X-Request-ID header for distributed tracing.

    If the client sends X-Request-ID, it is preserved.
    Otherwise, a new UUID is generated.

    The request ID is:
    - Available in request.state.request_id
    - Bound into the structlog context for every log line of the request
    - Returned in response headers for client correlation
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            f"REQUEST | id={request_id} | method={request.method} | path={request.url.path}"
        )

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        return response
