"""
Application configuration using Pydantic Settings.
All configuration values can be overridden via environment variables or .env file.

Settings are built once at process start (see ``load_settings``) and handed to
the app factory, the generation gateway and the prompt repository explicitly.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "X Post Generator API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_to_console: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    frontend_url: str = "http://localhost:5173"

    # Paths (relative to backend root)
    prompts_file: Path = Path("data/systemPrompts.json")
    logs_dir: Path = Path("logs")

    # Deployment mode: "named" (stored prompts), "fixed" (built-in prompt) or both
    generation_mode: Literal["named", "fixed", "both"] = "both"

    # Generation audit log (one JSON file per attempt)
    log_generations: bool = False

    # Provider selection
    llm_provider: Literal["gemini", "openrouter"] = "gemini"
    request_timeout_seconds: float = 60.0

    # Provider: Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Provider: OpenRouter
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "openrouter/sherlock-dash-alpha"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_referer: str = "http://localhost:5173"
    openrouter_title: str = "X Post Generator"

    # Default model configuration for new prompts and the built-in prompt
    default_temperature: float = 0.7
    default_max_output_tokens: int = 500
    default_top_p: float = 0.95
    default_top_k: int = 40

    def default_model_config(self) -> dict:
        """Model configuration applied when a prompt omits an option."""
        return {
            "temperature": self.default_temperature,
            "maxOutputTokens": self.default_max_output_tokens,
            "topP": self.default_top_p,
            "topK": self.default_top_k,
        }

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get the configured credential for a provider, or None if unset."""
        keys = {
            "gemini": self.gemini_api_key,
            "openrouter": self.openrouter_api_key,
        }
        if provider not in keys:
            raise ValueError(f"Unknown provider: {provider}. Available providers: {list(keys.keys())}")
        return keys[provider] or None

    def get_model_name(self, provider: str) -> str:
        """Get the model identifier sent to a provider."""
        if provider == "gemini":
            return self.gemini_model
        if provider == "openrouter":
            return self.openrouter_model
        raise ValueError(f"Unknown provider: {provider}")

    @property
    def api_configured(self) -> bool:
        """Whether the default provider has a credential."""
        return self.get_api_key(self.llm_provider) is not None

    @property
    def prompts_enabled(self) -> bool:
        """Whether this deployment keeps a prompt repository."""
        return self.generation_mode in ("named", "both")

    @property
    def builtin_enabled(self) -> bool:
        """Whether this deployment serves the built-in prompt endpoint."""
        return self.generation_mode in ("fixed", "both")


def load_settings(**overrides) -> Settings:
    """
    Build a settings object from the environment.

    Args:
        **overrides: Explicit values that take precedence over the environment

    Returns:
        New Settings instance
    """
    return Settings(**overrides)
