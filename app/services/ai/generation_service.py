"""
Generation gateway: builds provider requests from a prompt and the user's
topic, classifies failures, and records an audit entry per attempt.
"""
import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests

from app.core.config import Settings
from app.core.exceptions import (
    ContentPolicyException,
    ProviderAuthException,
    RateLimitException,
    StoredPromptsDisabledException,
    UpstreamException,
    ValidationException,
)
from app.core.logging import get_request_id, log_event
from app.models.domain import GenerationResult, ProviderErrorKind, utc_now_iso
from app.repositories.prompt_repository import PromptRepository
from app.services.ai.base_client import BaseProviderClient, ProviderResult
from app.services.ai.gemini_client import GeminiClient
from app.services.ai.openrouter_client import OpenRouterClient
from app.services.ai.prompt_defaults import BUILTIN_SYSTEM_PROMPT
from app.services.ai.request_logger import log_generation

logger = logging.getLogger(__name__)

CLIENT_CLASSES = {
    "gemini": GeminiClient,
    "openrouter": OpenRouterClient,
}


def build_provider_clients(
    settings: Settings,
    session: Optional[requests.Session] = None
) -> Dict[str, BaseProviderClient]:
    """Create one client per supported provider sharing an HTTP session."""
    session = session or requests.Session()
    return {name: cls(settings, session=session) for name, cls in CLIENT_CLASSES.items()}


def raise_for_result(result: ProviderResult) -> None:
    """Convert a failed ProviderResult into the matching application exception."""
    if result.ok:
        return
    if result.error_kind == ProviderErrorKind.AUTH:
        raise ProviderAuthException(result.provider)
    if result.error_kind == ProviderErrorKind.RATE_LIMIT:
        raise RateLimitException(result.provider)
    if result.error_kind == ProviderErrorKind.CONTENT_POLICY:
        raise ContentPolicyException(result.provider)
    raise UpstreamException(result.provider, result.error_message)


class GenerationGateway:
    """Issues generation requests in named-prompt or fixed-prompt mode."""

    def __init__(
        self,
        settings: Settings,
        clients: Mapping[str, BaseProviderClient],
        prompt_repository: Optional[PromptRepository] = None
    ):
        """
        Initialize generation gateway.

        Args:
            settings: Application settings
            clients: Provider clients keyed by provider name
            prompt_repository: Stored prompts; None in fixed-prompt deployments
        """
        self.settings = settings
        self.clients = dict(clients)
        self.prompt_repository = prompt_repository

    def get_client(self, provider: Optional[str] = None) -> BaseProviderClient:
        provider = provider or self.settings.llm_provider
        if provider not in self.clients:
            raise ValidationException(
                f"Unknown provider '{provider}'. Must be one of: {', '.join(sorted(self.clients))}",
                field="provider"
            )
        return self.clients[provider]

    def generate(
        self,
        instruction_text: str,
        user_input: str,
        model_config: Optional[Mapping[str, Any]] = None,
        provider: Optional[str] = None,
        prompt_id: Optional[str] = None
    ) -> GenerationResult:
        """
        Generate a post with one provider call.

        Args:
            instruction_text: System instruction for the model
            user_input: User's topic or idea (trimmed, must not be blank)
            model_config: Model options
            provider: Provider override; defaults to the configured provider
            prompt_id: Stored prompt ID, recorded in metadata and the audit log

        Returns:
            GenerationResult with text, character count and limit flag

        Raises:
            ValidationException: If user input is blank or the provider is unknown
            ProviderException: Classified provider failure
        """
        if not isinstance(user_input, str) or not user_input.strip():
            raise ValidationException("Please provide your topic or idea", field="userInput")
        user_input = user_input.strip()
        model_config = dict(model_config or {})
        client = self.get_client(provider)

        log_event(
            level="INFO",
            logger=__name__,
            operation="generate_post",
            event="generation_start",
            message="Starting post generation",
            context={
                "provider": client.provider,
                "model": client.model,
                "prompt_id": prompt_id,
                "user_input_length": len(user_input),
                "system_prompt_length": len(instruction_text),
            }
        )

        start_time = time.monotonic()
        result = client.generate(instruction_text, user_input, model_config)
        duration_ms = int((time.monotonic() - start_time) * 1000)

        log_generation(
            logs_dir=self.settings.logs_dir,
            enabled=self.settings.log_generations,
            provider=client.provider,
            model=result.model,
            instruction_text=instruction_text,
            user_input=user_input,
            model_config=model_config,
            duration_ms=duration_ms,
            success=result.ok,
            generated_text=result.text,
            error_kind=result.error_kind.value if result.error_kind else None,
            error_message=result.error_message,
            prompt_id=prompt_id,
            request_id=get_request_id(),
        )

        if not result.ok:
            log_event(
                level="WARNING",
                logger=__name__,
                operation="generate_post",
                event="generation_failed",
                message=f"Generation failed: {result.error_kind.value}",
                context={
                    "provider": client.provider,
                    "status_code": result.status_code,
                    "error_message": result.error_message,
                    "duration_ms": duration_ms,
                }
            )
            raise_for_result(result)

        metadata = {
            "model": result.model,
            "provider": client.provider,
            "duration": duration_ms,
            "timestamp": utc_now_iso(),
        }
        if prompt_id:
            metadata["promptId"] = prompt_id

        generation = GenerationResult.from_text(result.text, metadata)

        log_event(
            level="INFO",
            logger=__name__,
            operation="generate_post",
            event="generation_complete",
            message="Generation completed",
            context={
                "duration_ms": duration_ms,
                "character_count": generation.character_count,
                "exceeds_limit": generation.exceeds_limit,
            }
        )
        return generation

    def generate_from_prompt(
        self,
        prompt_id: str,
        user_input: str,
        custom_config: Optional[Mapping[str, Any]] = None,
        provider: Optional[str] = None
    ) -> GenerationResult:
        """
        Named-prompt mode: use a stored prompt's text and model configuration.

        ``custom_config`` is shallow-merged over the prompt's configuration.

        Raises:
            PromptNotFoundException: If the prompt does not exist
        """
        if self.prompt_repository is None:
            raise StoredPromptsDisabledException()
        if not isinstance(prompt_id, str) or not prompt_id.strip():
            raise ValidationException("systemPromptId is required", field="systemPromptId")

        prompt = self.prompt_repository.require(prompt_id)
        model_config = {**prompt.model_config, **(custom_config or {})}
        return self.generate(
            instruction_text=prompt.prompt_text,
            user_input=user_input,
            model_config=model_config,
            provider=provider,
            prompt_id=prompt.id
        )

    def generate_with_builtin(
        self,
        user_input: str,
        provider: Optional[str] = None
    ) -> GenerationResult:
        """Fixed-prompt mode: use the built-in instruction and default options."""
        return self.generate(
            instruction_text=BUILTIN_SYSTEM_PROMPT,
            user_input=user_input,
            model_config=self.settings.default_model_config(),
            provider=provider
        )
