"""
Dependency injection for FastAPI endpoints.
Components are built once in ``create_app`` and stored on ``app.state``;
these functions hand them to the endpoints.
"""
from fastapi import Request

from app.core.config import Settings
from app.core.exceptions import StoredPromptsDisabledException
from app.repositories.base import JsonDocumentStore
from app.repositories.prompt_repository import PromptRepository
from app.services.ai.generation_service import GenerationGateway, build_provider_clients


def build_prompt_repository(settings: Settings) -> PromptRepository:
    """
    Create the prompt repository backed by the configured JSON document.

    Args:
        settings: Application settings

    Returns:
        PromptRepository instance
    """
    store = JsonDocumentStore(settings.prompts_file)
    return PromptRepository(store, default_model_config=settings.default_model_config())


def build_generation_gateway(settings: Settings, prompt_repository: PromptRepository = None) -> GenerationGateway:
    """
    Create the generation gateway with one client per provider.

    Args:
        settings: Application settings
        prompt_repository: Stored prompts (None in fixed-prompt deployments)

    Returns:
        GenerationGateway instance
    """
    return GenerationGateway(settings, build_provider_clients(settings), prompt_repository)


def get_prompt_repository(request: Request) -> PromptRepository:
    """Get the prompt repository."""
    repository = getattr(request.app.state, "prompt_repository", None)
    if repository is None:
        raise StoredPromptsDisabledException()
    return repository


def get_generation_gateway(request: Request) -> GenerationGateway:
    """Get the generation gateway."""
    return request.app.state.generation_gateway
