"""
OpenRouter provider client (OpenAI-compatible chat completions).
"""
import logging
from typing import Any, Dict, Mapping, Optional

from app.models.domain import ProviderErrorKind
from app.services.ai.base_client import BaseProviderClient, ProviderResult

logger = logging.getLogger(__name__)

STATUS_KINDS = {
    401: ProviderErrorKind.AUTH,
    402: ProviderErrorKind.RATE_LIMIT,
    403: ProviderErrorKind.CONTENT_POLICY,
    429: ProviderErrorKind.RATE_LIMIT,
}


class OpenRouterClient(BaseProviderClient):
    """Client for OpenRouter's /chat/completions endpoint."""

    provider = "openrouter"

    def build_request(
        self,
        instruction_text: str,
        user_input: str,
        model_config: Mapping[str, Any]
    ):
        url = f"{self.settings.openrouter_base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": instruction_text},
                {"role": "user", "content": user_input},
            ],
            "temperature": self._option(model_config, "temperature", self.settings.default_temperature),
            "max_tokens": self._option(model_config, "maxOutputTokens", self.settings.default_max_output_tokens),
            "top_p": self._option(model_config, "topP", self.settings.default_top_p),
            "top_k": self._option(model_config, "topK", self.settings.default_top_k),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.settings.openrouter_referer,
            "X-Title": self.settings.openrouter_title,
            "Content-Type": "application/json",
        }
        return url, payload, headers

    def parse_response(self, status_code: int, body: Optional[Dict[str, Any]]) -> ProviderResult:
        body = body if isinstance(body, dict) else None
        error = body.get("error") if body else None

        # OpenRouter can report errors with a 200 status; the error code wins.
        if status_code != 200 or isinstance(error, dict):
            code = status_code
            message = None
            if isinstance(error, dict):
                message = error.get("message")
                if isinstance(error.get("code"), int):
                    code = error["code"]
            kind = STATUS_KINDS.get(code, ProviderErrorKind.UPSTREAM)
            return ProviderResult.failure(
                self.provider, self.model, kind,
                message or f"OpenRouter API returned HTTP {code}"
            )

        if body is None:
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.UPSTREAM,
                "invalid JSON response from OpenRouter"
            )

        choices = body.get("choices") or []
        if not choices:
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.UPSTREAM,
                "no choices in OpenRouter response"
            )

        choice = choices[0]
        content = ((choice.get("message") or {}).get("content") or "").strip()
        if choice.get("finish_reason") == "content_filter" and not content:
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.CONTENT_POLICY,
                "response blocked by content filter"
            )
        if not content:
            return ProviderResult.failure(
                self.provider, self.model, ProviderErrorKind.UPSTREAM,
                "empty response from OpenRouter"
            )

        logger.info(f"OpenRouter response length: {len(content)} characters")
        return ProviderResult.success(self.provider, body.get("model") or self.model, content)
