"""
Error handling middleware that converts exceptions to HTTP responses.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.exceptions import PostGeneratorException

logger = logging.getLogger(__name__)


def error_payload(error: str, message: str) -> dict:
    """Build the JSON error envelope."""
    return {
        "success": False,
        "error": error,
        "message": message
    }


def _request_id_header(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": request_id} if request_id else {}


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware to convert exceptions to appropriate HTTP responses."""

    async def dispatch(self, request: Request, call_next):
        """Process each request and handle exceptions."""
        try:
            return await call_next(request)

        except PostGeneratorException as e:
            log = logger.error if e.status_code >= 500 else logger.warning
            log(
                f"Application error: {e.message}",
                extra={
                    "context": {
                        "error": e.error,
                        "status_code": e.status_code,
                        "path": request.url.path,
                        "method": request.method
                    }
                }
            )
            return JSONResponse(
                status_code=e.status_code,
                content=error_payload(e.error, e.message),
                headers=_request_id_header(request)
            )

        except Exception as e:
            logger.error(
                f"Unexpected error: {e}",
                exc_info=True,
                extra={
                    "context": {
                        "path": request.url.path,
                        "method": request.method
                    }
                }
            )
            return JSONResponse(
                status_code=500,
                content=error_payload("internal_error", "Something went wrong. Please try again."),
                headers=_request_id_header(request)
            )
