"""
AI services for the X Post Generator.
Handles provider calls, error classification and generation auditing.
"""

# Provider clients
from app.services.ai.base_client import BaseProviderClient, ProviderResult
from app.services.ai.gemini_client import GeminiClient
from app.services.ai.openrouter_client import OpenRouterClient

# Generation gateway
from app.services.ai.generation_service import (
    GenerationGateway,
    build_provider_clients,
    raise_for_result
)

# Built-in prompt
from app.services.ai.prompt_defaults import BUILTIN_PROMPT_NAME, BUILTIN_SYSTEM_PROMPT

# Request logging
from app.services.ai.request_logger import log_generation

__all__ = [
    # Provider clients
    "BaseProviderClient",
    "ProviderResult",
    "GeminiClient",
    "OpenRouterClient",

    # Generation gateway
    "GenerationGateway",
    "build_provider_clients",
    "raise_for_result",

    # Built-in prompt
    "BUILTIN_PROMPT_NAME",
    "BUILTIN_SYSTEM_PROMPT",

    # Request logging
    "log_generation",
]
