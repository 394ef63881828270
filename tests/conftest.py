from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

from app.core.config import Settings, load_settings
from app.models.domain import ProviderErrorKind
from app.repositories.base import JsonDocumentStore
from app.repositories.prompt_repository import PromptRepository
from app.services.ai.base_client import ProviderResult


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated to a temporary prompt file and logs directory."""
    return load_settings(
        prompts_file=tmp_path / "data" / "systemPrompts.json",
        logs_dir=tmp_path / "logs",
        log_to_console=False,
        log_generations=False,
        generation_mode="both",
        llm_provider="gemini",
        gemini_api_key="test-gemini-key",
        openrouter_api_key="test-openrouter-key",
    )


@pytest.fixture()
def store(settings: Settings) -> JsonDocumentStore:
    return JsonDocumentStore(settings.prompts_file)


@pytest.fixture()
def repository(store: JsonDocumentStore, settings: Settings) -> PromptRepository:
    return PromptRepository(store, default_model_config=settings.default_model_config())


class StubResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class StubSession:
    """Records posted requests and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubClient:
    """Provider client double used by gateway and API tests."""

    def __init__(self, provider: str = "gemini", model: str = "stub-model", results=None):
        self.provider = provider
        self.model = model
        self.results = list(results or [])
        self.calls: List[Dict[str, Any]] = []

    def generate(self, instruction_text, user_input, model_config) -> ProviderResult:
        self.calls.append({
            "instruction_text": instruction_text,
            "user_input": user_input,
            "model_config": dict(model_config),
        })
        return self.results.pop(0)


def ok(text: str, provider: str = "gemini", model: str = "stub-model") -> ProviderResult:
    return ProviderResult.success(provider, model, text)


def failed(kind: ProviderErrorKind, message: str = "boom", provider: str = "gemini") -> ProviderResult:
    return ProviderResult.failure(provider, "stub-model", kind, message)


@pytest.fixture()
def stub_client() -> StubClient:
    return StubClient()


def _make_app(settings: Settings, client: Optional[StubClient] = None):
    from app.main import create_app

    app = create_app(settings)
    if client is not None:
        app.state.generation_gateway.clients = {client.provider: client}
    return app


@pytest.fixture()
def app(settings: Settings, stub_client: StubClient):
    return _make_app(settings, stub_client)


@pytest.fixture()
async def api_client(app):
    """API client running the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture()
def make_app():
    return _make_app
