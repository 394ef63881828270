from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.deps import build_generation_gateway, build_prompt_repository
from app.api.endpoints import generate, prompts
from app.core.config import Settings, load_settings
from app.core.logging import log_event, setup_logging
from app.middleware.error_handling import ErrorHandlingMiddleware, error_payload
from app.middleware.logging import RequestLoggingMiddleware
from app.models.domain import utc_now_iso


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request body"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment if omitted

    Returns:
        Configured FastAPI instance
    """
    settings = settings or load_settings()
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.logs_dir,
        console=settings.log_to_console
    )

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    app.state.settings = settings
    app.state.prompt_repository = build_prompt_repository(settings) if settings.prompts_enabled else None
    app.state.generation_gateway = build_generation_gateway(settings, app.state.prompt_repository)

    # Add middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_payload("validation_error", _describe_validation_errors(exc))
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Cannot {request.method} {request.url.path}"
            error = "not_found"
        else:
            message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
            error = f"http_{exc.status_code}"
        return JSONResponse(status_code=exc.status_code, content=error_payload(error, message))

    if settings.prompts_enabled:
        app.include_router(prompts.router, prefix="/api", tags=["prompts"])
        app.include_router(generate.named_router, prefix="/api", tags=["generation"])
    if settings.builtin_enabled:
        app.include_router(generate.builtin_router, prefix="/api", tags=["generation"])

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": utc_now_iso(),
            "environment": settings.environment,
            "apiConfigured": settings.api_configured,
            "mode": settings.generation_mode,
        }

    log_event(
        level="INFO",
        logger=__name__,
        operation="startup",
        event="app_created",
        message=f"{settings.app_name} ready",
        context={
            "environment": settings.environment,
            "mode": settings.generation_mode,
            "provider": settings.llm_provider,
            "api_configured": settings.api_configured,
            "log_generations": settings.log_generations,
            "frontend_url": settings.frontend_url,
            "prompts_file": str(settings.prompts_file) if settings.prompts_enabled else None,
        }
    )
    if not settings.api_configured:
        log_event(
            level="WARNING",
            logger=__name__,
            operation="startup",
            event="api_key_missing",
            message=f"{settings.llm_provider} API key is not set; generation requests will fail",
        )

    return app


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
