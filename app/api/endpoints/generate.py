"""
Post generation API endpoints.

``/generate-post`` uses a stored prompt; ``/generate`` uses the built-in
instruction. Both report the character count and whether the post exceeds
X's limit; oversized output is returned as-is.
"""
import time

from fastapi import APIRouter, Depends

from app.api.deps import get_generation_gateway
from app.core.exceptions import PostGeneratorException
from app.core.logging import get_request_id, log_operation_complete, log_operation_error, log_operation_start
from app.models.schemas import (
    ErrorResponse,
    GeneratePostRequest,
    GenerateRequest,
    GenerationData,
    GenerationEnvelope,
)
from app.services.ai.generation_service import GenerationGateway

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

named_router = APIRouter(responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}})
builtin_router = APIRouter(responses=ERROR_RESPONSES)


def _envelope(result) -> GenerationEnvelope:
    return GenerationEnvelope(data=GenerationData.model_validate(result.to_dict()))


@named_router.post("/generate-post", response_model=GenerationEnvelope)
def generate_post(
    request: GeneratePostRequest,
    gateway: GenerationGateway = Depends(get_generation_gateway)
):
    """Generate a post using a stored system prompt."""
    start_time = time.time()
    operation = "generate_post_named"

    log_operation_start(
        logger=__name__,
        operation=operation,
        message=f"Generating post with prompt {request.system_prompt_id}",
        context={
            "prompt_id": request.system_prompt_id,
            "user_input_length": len(request.user_input.strip()),
            "provider": request.provider,
            "request_id": get_request_id()
        }
    )

    try:
        result = gateway.generate_from_prompt(
            prompt_id=request.system_prompt_id,
            user_input=request.user_input,
            custom_config=request.custom_config.supplied() if request.custom_config else None,
            provider=request.provider
        )
    except PostGeneratorException as e:
        log_operation_error(
            logger=__name__,
            operation=operation,
            error=e,
            message="Post generation failed",
            context={"prompt_id": request.system_prompt_id, "status_code": e.status_code},
            level="WARNING"
        )
        raise

    log_operation_complete(
        logger=__name__,
        operation=operation,
        message="Post generated",
        context={"character_count": result.character_count, "exceeds_limit": result.exceeds_limit},
        duration=time.time() - start_time
    )
    return _envelope(result)


@builtin_router.post("/generate", response_model=GenerationEnvelope)
def generate(
    request: GenerateRequest,
    gateway: GenerationGateway = Depends(get_generation_gateway)
):
    """Generate a post using the built-in system prompt."""
    start_time = time.time()
    operation = "generate_post_builtin"

    log_operation_start(
        logger=__name__,
        operation=operation,
        message="Generating post with built-in prompt",
        context={
            "user_input_length": len(request.user_input.strip()),
            "provider": request.provider,
            "request_id": get_request_id()
        }
    )

    try:
        result = gateway.generate_with_builtin(request.user_input, provider=request.provider)
    except PostGeneratorException as e:
        log_operation_error(
            logger=__name__,
            operation=operation,
            error=e,
            message="Post generation failed",
            context={"status_code": e.status_code},
            level="WARNING"
        )
        raise

    log_operation_complete(
        logger=__name__,
        operation=operation,
        message="Post generated",
        context={"character_count": result.character_count, "exceeds_limit": result.exceeds_limit},
        duration=time.time() - start_time
    )
    return _envelope(result)
