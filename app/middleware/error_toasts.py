"""
Turns request failures into toasts for the viewer who made the request.

Every 4xx/5xx raised after authentication pushes exactly one error toast onto
the caller's session queue, then falls through to FastAPI's default response.
"""

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.middleware.correlation import get_correlation_id, get_request_user_id
from app.services.session_state import toasts_for
from app.utils.logger import logger


def _viewer_id(request: Request):
    return getattr(request.state, "viewer_id", None)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    return f"{field}: {first.get('msg', 'invalid value')}"


def notify_failure(request: Request, message: str) -> None:
    viewer_id = _viewer_id(request)
    if viewer_id:
        toasts_for(viewer_id).error(message)


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def toast_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 400:
            logger.warning(
                f"{request.method} {request.url.path} failed: {exc.detail}",
                extra={
                    "status": exc.status_code,
                    "correlation_id": get_correlation_id(),
                    "user_id": get_request_user_id(),
                },
            )
            notify_failure(request, str(exc.detail))
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def toast_validation_error(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning(f"{request.method} {request.url.path} rejected: {message}", extra={"status": 422})
        notify_failure(request, message)
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def toast_unhandled_error(request: Request, exc: Exception):
        logger.error(
            f"{request.method} {request.url.path} crashed: {type(exc).__name__}: {exc}",
            exc_info=True,
            extra={
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
                "user_id": get_request_user_id(),
            },
        )
        notify_failure(request, "Something went wrong. Please try again.")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
