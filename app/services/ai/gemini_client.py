"""
Google Gemini provider client (Generative Language REST API).
"""
import logging
from typing import Any, Dict, Mapping, Optional

from app.models.domain import ProviderErrorKind
from app.services.ai.base_client import BaseProviderClient, ProviderResult

logger = logging.getLogger(__name__)

BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "RECITATION"}


class GeminiClient(BaseProviderClient):
    """Client for the Gemini generateContent endpoint."""

    provider = "gemini"

    def build_request(
        self,
        instruction_text: str,
        user_input: str,
        model_config: Mapping[str, Any]
    ):
        url = f"{self.settings.gemini_base_url.rstrip('/')}/models/{self.model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": instruction_text}]},
            "contents": [{"role": "user", "parts": [{"text": user_input}]}],
            "generationConfig": {
                "temperature": self._option(model_config, "temperature", self.settings.default_temperature),
                "maxOutputTokens": self._option(model_config, "maxOutputTokens", self.settings.default_max_output_tokens),
                "topP": self._option(model_config, "topP", self.settings.default_top_p),
                "topK": self._option(model_config, "topK", self.settings.default_top_k),
            },
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        return url, payload, headers

    def parse_response(self, status_code: int, body: Optional[Dict[str, Any]]) -> ProviderResult:
        if status_code != 200:
            return self._classify_error(status_code, body)

        if not isinstance(body, dict):
            return self._failure(ProviderErrorKind.UPSTREAM, "invalid JSON response from Gemini")

        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            return self._failure(ProviderErrorKind.CONTENT_POLICY, f"prompt blocked ({block_reason})")

        candidates = body.get("candidates") or []
        if not candidates:
            return self._failure(ProviderErrorKind.UPSTREAM, "no candidates in Gemini response")

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))

        if finish_reason in BLOCKING_FINISH_REASONS and not text:
            return self._failure(ProviderErrorKind.CONTENT_POLICY, f"response blocked ({finish_reason})")
        if not text:
            return self._failure(ProviderErrorKind.UPSTREAM, "empty response from Gemini")

        logger.info(f"Gemini response length: {len(text)} characters")
        return ProviderResult.success(self.provider, self.model, text)

    def _classify_error(self, status_code: int, body: Optional[Dict[str, Any]]) -> ProviderResult:
        error = (body or {}).get("error") if isinstance(body, dict) else None
        error = error if isinstance(error, dict) else {}
        status = error.get("status")
        reasons = {
            detail.get("reason")
            for detail in error.get("details") or []
            if isinstance(detail, dict)
        }

        if status_code in (401, 403) or "API_KEY_INVALID" in reasons or status in ("UNAUTHENTICATED", "PERMISSION_DENIED"):
            kind = ProviderErrorKind.AUTH
        elif status_code == 429 or status == "RESOURCE_EXHAUSTED":
            kind = ProviderErrorKind.RATE_LIMIT
        else:
            kind = ProviderErrorKind.UPSTREAM

        message = error.get("message") or f"Gemini API returned HTTP {status_code}"
        return self._failure(kind, message)

    def _failure(self, kind: ProviderErrorKind, message: str) -> ProviderResult:
        return ProviderResult.failure(self.provider, self.model, kind, message)
