"""
Request/response logging middleware.
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import (
    generate_request_id,
    log_event,
    set_request_id,
)

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to track request IDs and log all requests/responses."""

    async def dispatch(self, request: Request, call_next):
        """Process each request and log it."""
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        request.state.request_id = request_id

        start_time = time.time()
        level = "DEBUG" if request.url.path in QUIET_PATHS else "INFO"

        log_event(
            level=level,
            logger="app.middleware.logging",
            operation="http_request",
            event="request_received",
            message=f"Request received: {request.method} {request.url.path}",
            context={
                "method": request.method,
                "path": request.url.path,
                "client_host": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            log_event(
                level="ERROR",
                logger="app.middleware.logging",
                operation="http_request",
                event="request_error",
                message=f"Request error: {request.method} {request.url.path}",
                context={
                    "duration_seconds": round(time.time() - start_time, 4),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
            )
            raise

        log_event(
            level=level,
            logger="app.middleware.logging",
            operation="http_request",
            event="response_sent",
            message=f"Response sent: {request.method} {request.url.path} -> {response.status_code}",
            context={
                "status_code": response.status_code,
                "duration_seconds": round(time.time() - start_time, 4),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response
