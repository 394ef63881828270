"""
System prompt API endpoints.
Handles CRUD over the stored prompt templates.
"""
import logging
import time

from fastapi import APIRouter, Depends

from app.api.deps import get_prompt_repository
from app.core.logging import get_request_id, log_operation_complete, log_operation_start
from app.models.domain import PromptRecord
from app.models.schemas import (
    CreatePromptRequest,
    ErrorResponse,
    MessageResponse,
    PromptEnvelope,
    PromptListEnvelope,
    PromptResponse,
    UpdatePromptRequest,
)
from app.core.exceptions import PromptNotFoundException
from app.repositories.prompt_repository import PromptRepository

logger = logging.getLogger(__name__)

router = APIRouter(responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})


def _to_response(prompt: PromptRecord) -> PromptResponse:
    return PromptResponse.model_validate(prompt.to_dict())


@router.get("/prompts", response_model=PromptListEnvelope)
def list_prompts(repository: PromptRepository = Depends(get_prompt_repository)):
    """Get all system prompts in insertion order."""
    prompts = repository.list_all()
    return PromptListEnvelope(
        data=[_to_response(prompt) for prompt in prompts],
        count=len(prompts)
    )


@router.get("/prompts/{prompt_id}", response_model=PromptEnvelope)
def get_prompt(prompt_id: str, repository: PromptRepository = Depends(get_prompt_repository)):
    """Get a single prompt by ID."""
    prompt = repository.get_by_id(prompt_id)
    if prompt is None:
        raise PromptNotFoundException(prompt_id)
    return PromptEnvelope(data=_to_response(prompt))


@router.post("/prompts", response_model=PromptEnvelope, status_code=201)
def create_prompt(
    request: CreatePromptRequest,
    repository: PromptRepository = Depends(get_prompt_repository)
):
    """Create a new system prompt."""
    start_time = time.time()
    operation = "create_prompt"

    log_operation_start(
        logger=__name__,
        operation=operation,
        message="Creating prompt",
        context={
            "name_length": len(request.name),
            "prompt_text_length": len(request.prompt_text),
            "request_id": get_request_id()
        }
    )

    prompt = repository.create(
        name=request.name,
        prompt_text=request.prompt_text,
        model_config=request.prompt_config.supplied() if request.prompt_config else None
    )

    log_operation_complete(
        logger=__name__,
        operation=operation,
        message="Successfully created prompt",
        context={"prompt_id": prompt.id},
        duration=time.time() - start_time
    )

    return PromptEnvelope(data=_to_response(prompt), message="Prompt created successfully")


@router.put("/prompts/{prompt_id}", response_model=PromptEnvelope)
def update_prompt(
    prompt_id: str,
    request: UpdatePromptRequest,
    repository: PromptRepository = Depends(get_prompt_repository)
):
    """Update any subset of name, promptText, modelConfig and isActive."""
    start_time = time.time()
    operation = "update_prompt"

    log_operation_start(
        logger=__name__,
        operation=operation,
        message=f"Updating prompt {prompt_id}",
        context={
            "prompt_id": prompt_id,
            "fields": sorted(request.model_dump(by_alias=True, exclude_unset=True).keys()),
            "request_id": get_request_id()
        }
    )

    prompt = repository.update(
        prompt_id,
        name=request.name,
        prompt_text=request.prompt_text,
        model_config=request.prompt_config.supplied() if request.prompt_config else None,
        is_active=request.is_active
    )

    log_operation_complete(
        logger=__name__,
        operation=operation,
        message="Successfully updated prompt",
        context={"prompt_id": prompt_id},
        duration=time.time() - start_time
    )

    return PromptEnvelope(data=_to_response(prompt), message="Prompt updated successfully")


@router.delete("/prompts/{prompt_id}", response_model=MessageResponse)
def delete_prompt(prompt_id: str, repository: PromptRepository = Depends(get_prompt_repository)):
    """Delete a prompt. The last remaining prompt cannot be deleted."""
    repository.delete(prompt_id)
    logger.info(f"Deleted prompt {prompt_id}")
    return MessageResponse(message="Prompt deleted successfully")
