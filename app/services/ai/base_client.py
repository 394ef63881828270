"""
Base provider client with common functionality for all text-generation providers.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from app.core.config import Settings
from app.models.domain import ProviderErrorKind

logger = logging.getLogger(__name__)


@dataclass
class ProviderResult:
    """Tagged outcome of one provider call: text on success, error kind otherwise."""
    provider: str
    model: str
    ok: bool
    text: Optional[str] = None
    error_kind: Optional[ProviderErrorKind] = None
    error_message: Optional[str] = None
    status_code: Optional[int] = None
    duration_seconds: float = 0.0
    request_payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, provider: str, model: str, text: str, **kwargs) -> 'ProviderResult':
        return cls(provider=provider, model=model, ok=True, text=text, **kwargs)

    @classmethod
    def failure(
        cls,
        provider: str,
        model: str,
        kind: ProviderErrorKind,
        message: str,
        **kwargs
    ) -> 'ProviderResult':
        return cls(
            provider=provider,
            model=model,
            ok=False,
            error_kind=kind,
            error_message=message,
            **kwargs
        )


class BaseProviderClient:
    """Base class with the HTTP plumbing shared by provider clients."""

    provider = "base"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        """
        Initialize provider client.

        Args:
            settings: Application settings
            session: HTTP session (injected in tests)
        """
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = settings.request_timeout_seconds
        self.model = settings.get_model_name(self.provider)

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.get_api_key(self.provider)

    def generate(
        self,
        instruction_text: str,
        user_input: str,
        model_config: Mapping[str, Any]
    ) -> ProviderResult:
        """
        Issue one generation call. Never raises for provider failures.

        Args:
            instruction_text: System instruction for the model
            user_input: The user's topic or idea
            model_config: temperature / maxOutputTokens / topP / topK

        Returns:
            ProviderResult with text or a classified error
        """
        if not self.api_key:
            logger.warning(f"{self.provider} API key is not configured")
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.AUTH,
                f"{self.provider} API key is not configured"
            )

        url, payload, headers = self.build_request(instruction_text, user_input, model_config)
        self._log_request(payload)

        start_time = time.time()
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            duration = time.time() - start_time
            logger.error(f"{self.provider} timeout after {self.timeout}s")
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.UPSTREAM,
                f"request timed out after {self.timeout:g}s",
                duration_seconds=duration, request_payload=payload
            )
        except requests.exceptions.RequestException as e:
            duration = time.time() - start_time
            logger.error(f"{self.provider} connection error: {e}")
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.UPSTREAM,
                f"could not reach {self.provider}",
                duration_seconds=duration, request_payload=payload
            )

        duration = time.time() - start_time
        logger.info(
            f"{self.provider} API response: "
            f"status={response.status_code}, duration={duration:.2f}s"
        )

        try:
            body = response.json()
        except ValueError:
            body = None

        result = self.parse_response(response.status_code, body)
        result.status_code = response.status_code
        result.duration_seconds = duration
        result.request_payload = payload
        if not result.ok:
            logger.error(
                f"{self.provider} API error: kind={result.error_kind.value}, "
                f"status={response.status_code}, message={result.error_message}"
            )
        return result

    def build_request(
        self,
        instruction_text: str,
        user_input: str,
        model_config: Mapping[str, Any]
    ):
        """Return ``(url, payload, headers)`` for the provider API."""
        raise NotImplementedError

    def parse_response(self, status_code: int, body: Optional[Dict[str, Any]]) -> ProviderResult:
        """Turn an HTTP status and JSON body into a ProviderResult."""
        raise NotImplementedError

    def _option(self, model_config: Mapping[str, Any], key: str, default: Any) -> Any:
        value = model_config.get(key)
        return default if value is None else value

    def _log_request(self, payload: Dict[str, Any]) -> None:
        """Log provider request for debugging."""
        logger.debug(f"{self.provider} call: model={self.model}, keys={sorted(payload.keys())}")
