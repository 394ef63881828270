import httpx
import pytest

from app.models.domain import ProviderErrorKind

from conftest import StubClient, failed, ok


async def create_prompt(api_client):
    response = await api_client.post(
        "/api/prompts",
        json={"name": "Launch", "promptText": "Announce launches.", "modelConfig": {"temperature": 0.3}},
    )
    return response.json()["data"]


@pytest.mark.anyio
async def test_generate_post_with_stored_prompt(api_client, stub_client):
    prompt = await create_prompt(api_client)
    stub_client.results.append(ok("We shipped it."))

    response = await api_client.post(
        "/api/generate-post",
        json={"systemPromptId": prompt["id"], "userInput": "new feature", "customConfig": {"topK": 10}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["text"] == "We shipped it."
    assert body["data"]["characterCount"] == 14
    assert body["data"]["exceedsLimit"] is False
    assert body["data"]["metadata"]["promptId"] == prompt["id"]
    assert stub_client.calls[0]["model_config"]["temperature"] == 0.3
    assert stub_client.calls[0]["model_config"]["topK"] == 10


@pytest.mark.anyio
async def test_generate_post_over_limit(api_client, stub_client):
    prompt = await create_prompt(api_client)
    stub_client.results.append(ok("z" * 300))

    response = await api_client.post(
        "/api/generate-post", json={"systemPromptId": prompt["id"], "userInput": "long"}
    )

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["characterCount"] == 300
    assert data["exceedsLimit"] is True
    assert data["text"] == "z" * 300


@pytest.mark.anyio
async def test_generate_post_unknown_prompt_is_404(api_client):
    response = await api_client.post(
        "/api/generate-post", json={"systemPromptId": "missing", "userInput": "topic"}
    )

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.anyio
async def test_generate_post_blank_input_is_400(api_client, stub_client):
    prompt = await create_prompt(api_client)

    response = await api_client.post(
        "/api/generate-post", json={"systemPromptId": prompt["id"], "userInput": "   "}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide your topic or idea"
    assert stub_client.calls == []


@pytest.mark.anyio
async def test_generate_builtin(api_client, stub_client):
    stub_client.results.append(ok("Built-in post"))

    response = await api_client.post("/api/generate", json={"userInput": "coffee"})

    assert response.status_code == 200
    assert response.json()["data"]["text"] == "Built-in post"
    assert "promptId" not in response.json()["data"]["metadata"]


@pytest.mark.anyio
@pytest.mark.parametrize("kind, status, error", [
    (ProviderErrorKind.RATE_LIMIT, 429, "rate_limit"),
    (ProviderErrorKind.AUTH, 500, "auth_error"),
    (ProviderErrorKind.CONTENT_POLICY, 400, "content_policy"),
    (ProviderErrorKind.UPSTREAM, 500, "upstream_error"),
])
async def test_provider_errors_map_to_status(api_client, stub_client, kind, status, error):
    stub_client.results.append(failed(kind, "You exceeded your current quota"))

    response = await api_client.post("/api/generate", json={"userInput": "coffee"})

    assert response.status_code == status
    assert response.json()["success"] is False
    assert response.json()["error"] == error


@pytest.mark.anyio
async def test_unknown_provider_value_is_400(api_client):
    response = await api_client.post("/api/generate", json={"userInput": "coffee", "provider": "other"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.anyio
async def test_unexpected_error_is_generic_500(api_client, stub_client):
    def explode(*args, **kwargs):
        raise RuntimeError("secret internals")

    stub_client.generate = explode

    response = await api_client.post("/api/generate", json={"userInput": "coffee"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    }


@pytest.mark.anyio
async def test_fixed_mode_mounts_only_builtin_endpoint(settings, make_app):
    settings.generation_mode = "fixed"
    client = StubClient(results=[ok("fixed")])
    app = make_app(settings, client)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as api:
        generated = await api.post("/api/generate", json={"userInput": "coffee"})
        prompts = await api.get("/api/prompts")
        named = await api.post("/api/generate-post", json={"systemPromptId": "x", "userInput": "y"})
        health = await api.get("/health")

    assert generated.status_code == 200
    assert prompts.status_code == 404
    assert named.status_code == 404
    assert health.json()["mode"] == "fixed"
    assert not settings.prompts_file.exists()


@pytest.mark.anyio
async def test_named_mode_does_not_mount_builtin_endpoint(settings, make_app):
    settings.generation_mode = "named"
    app = make_app(settings)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as api:
        builtin = await api.post("/api/generate", json={"userInput": "coffee"})
        prompts = await api.get("/api/prompts")

    assert builtin.status_code == 404
    assert prompts.status_code == 200


@pytest.mark.anyio
async def test_health_reports_missing_api_key(settings, make_app):
    settings.gemini_api_key = None
    app = make_app(settings)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as api:
        health = await api.get("/health")

    assert health.json()["apiConfigured"] is False
