"""
Request tracing for the dashboard API.

Every request carries a correlation id (the caller's X-Correlation-ID or a
fresh UUID4). The id and, once auth has run, the viewer's profile id live in
contextvars so log lines and error toasts can be tied back to one request.
"""
import uuid
import time
import contextvars
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from app.utils.logger import logger

# Per-request values; request_user_id is filled in by app.middleware.auth
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")
request_user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_user_id", default="")

# Requests slower than this are logged as warnings
SLOW_REQUEST_MS = 2000
QUIET_PATHS = {"/health"}


def get_correlation_id() -> str:
    """Get the current request's correlation ID"""
    return correlation_id_var.get("")


def get_request_user_id() -> str:
    """Get the current request's authenticated profile ID (set by auth)"""
    return request_user_id_var.get("")


def _elapsed_ms(started: float) -> int:
    return round((time.monotonic() - started) * 1000)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and logs how it finished"""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        correlation_id_var.set(cid)
        fields = {"correlation_id": cid, "method": request.method, "path": request.url.path}
        started = time.monotonic()

        # Health checks are logged only when they fail or run slow
        quiet = request.url.path in QUIET_PATHS
        if not quiet:
            logger.info(
                "request.started",
                extra={**fields, "client_ip": request.client.host if request.client else ""},
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request.failed",
                extra={
                    **fields,
                    "duration_ms": _elapsed_ms(started),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise

        status = response.status_code
        duration_ms = _elapsed_ms(started)
        if status >= 400:
            logger.warning("request.completed", extra={**fields, "status": status, "duration_ms": duration_ms})
        elif duration_ms >= SLOW_REQUEST_MS:
            logger.warning("request.slow", extra={**fields, "status": status, "duration_ms": duration_ms})
        elif not quiet:
            logger.info("request.completed", extra={**fields, "status": status, "duration_ms": duration_ms})

        response.headers["X-Correlation-ID"] = cid
        return response
