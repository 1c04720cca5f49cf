import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from studio.ai.asset_analysis import AssetAnalyzer, get_asset_analyzer
from studio.ai.llm_client import get_groq_client
from studio.ai.media import LeonardoClient, get_elevenlabs_client, get_leonardo_client
from studio.ai.providers import (
    ClaudeProvider,
    GenerationResult,
    OllamaProvider,
    get_claude_provider,
    get_gemini_provider,
    get_ollama_provider,
)
from studio.core.config import settings
from studio.core.errors import ProviderError
from studio.main import app


def fake_provider(name: str, *, available: bool = True, **methods) -> MagicMock:
    provider = MagicMock()
    provider.name = name
    provider.display_name = name.capitalize()
    provider.model_name = f"{name}-model"
    provider.is_available.return_value = available
    for method, mock in methods.items():
        setattr(provider, method, mock)
    return provider


def result(text: str, provider: str = "groq") -> GenerationResult:
    return GenerationResult(text=text, provider=provider, model=f"{provider}-model")


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture()
def override():
    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value
        return value

    return _override


# Prompt composition

def test_compose_prompt_uses_groq(client: TestClient, override):
    groq = override(get_groq_client, fake_provider(
        "groq", generate_text=AsyncMock(return_value=result("Here is the prompt: A hooded ranger"))
    ))

    response = client.post(
        "/api/ai/compose-character-prompt",
        json={"appearance": {"gender": "man"}, "characterName": "Rook"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["prompt"] == "A hooded ranger"
    assert body["usedFallback"] is False
    assert groq.generate_text.call_args.kwargs["temperature"] == 0.7


def test_compose_prompt_falls_back_without_key(client: TestClient, override):
    override(get_groq_client, fake_provider("groq", available=False))

    response = client.post(
        "/api/ai/compose-character-prompt",
        json={"appearance": {"gender": "woman", "age": "old"}, "artStyle": "Ink"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["usedFallback"] is True
    assert body["provider"] == "fallback"
    assert body["prompt"].startswith("Ink Full-body character illustration,")


def test_compose_prompt_requires_appearance(client: TestClient):
    response = client.post("/api/ai/compose-character-prompt", json={"characterName": "Rook"})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field: appearance"


# Dataset sketches

def test_dataset_sketch_without_enhance(client: TestClient, override):
    override(get_claude_provider, fake_provider("claude", available=False))

    response = client.post(
        "/api/ai/dataset-sketch",
        json={"basePrompt": "A lighthouse", "type": "artstyle", "count": 3},
    )

    prompts = response.json()["prompts"]
    assert [p["text"] for p in prompts] == ["A lighthouse"] * 3


def test_dataset_sketch_enhance_needs_claude(client: TestClient, override):
    override(get_claude_provider, fake_provider("claude", available=False))

    response = client.post(
        "/api/ai/dataset-sketch",
        json={"basePrompt": "A lighthouse", "type": "character", "count": 2, "enhance": True},
    )

    assert response.status_code == 503
    assert response.json() == {"success": False, "error": "Claude API key not configured"}


def test_dataset_sketch_enhanced(client: TestClient, override):
    override(get_claude_provider, fake_provider(
        "claude",
        generate_text=AsyncMock(return_value=result('["Stormy lighthouse", "Sunny lighthouse", "extra"]', "claude")),
    ))

    response = client.post(
        "/api/ai/dataset-sketch",
        json={"basePrompt": "A lighthouse", "type": "artstyle", "count": 2, "enhance": True},
    )

    assert [p["text"] for p in response.json()["prompts"]] == ["Stormy lighthouse", "Sunny lighthouse"]


def test_dataset_sketch_unparseable_reply(client: TestClient, override):
    override(get_claude_provider, fake_provider(
        "claude", generate_text=AsyncMock(return_value=result("I cannot do that", "claude"))
    ))

    response = client.post(
        "/api/ai/dataset-sketch",
        json={"basePrompt": "A lighthouse", "type": "artstyle", "count": 2, "enhance": True},
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to parse AI response"
    assert response.json()["rawResponse"] == "I cannot do that"


def test_dataset_sketch_missing_base_prompt(client: TestClient):
    response = client.post("/api/ai/dataset-sketch", json={"type": "artstyle", "count": 2})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field: basePrompt"


def test_dataset_sketch_rejects_zero_count(client: TestClient):
    response = client.post(
        "/api/ai/dataset-sketch", json={"basePrompt": "A lighthouse", "type": "artstyle", "count": 0}
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid value for count")


# Names and lore

def test_name_suggestions(client: TestClient, override):
    groq = override(get_groq_client, fake_provider(
        "groq",
        generate_json=AsyncMock(return_value={"suggestions": [{"name": "Kael", "description": "Sharp."}]}),
    ))

    response = client.post(
        "/api/ai/name-suggestions",
        json={"entityType": "character", "partialName": "Ka", "context": {"genre": "fantasy"}},
    )

    assert response.json() == {
        "success": True,
        "suggestions": [{"name": "Kael", "description": "Sharp.", "reasoning": ""}],
        "entityType": "character",
    }
    assert groq.generate_json.call_args.kwargs["temperature"] == 0.8


def test_name_suggestions_without_key(client: TestClient, override):
    override(get_groq_client, fake_provider("groq", available=False))

    response = client.post("/api/ai/name-suggestions", json={"entityType": "scene"})

    assert response.status_code == 503


def test_analyze_lore_falls_back_when_claude_fails(client: TestClient, override):
    override(get_claude_provider, fake_provider(
        "claude",
        generate_text=AsyncMock(side_effect=ProviderError("boom", provider="claude")),
    ))

    response = client.post(
        "/api/ai/analyze-lore",
        json={"content": "Dragons guard the pass. Dragons sleep.", "title": "The Pass"},
    )

    body = response.json()
    assert body["summary"].startswith("• General entry: The Pass")
    assert body["tags"][0] == "dragons"
    assert "generated_at" in body


def test_analyze_lore_falls_back_when_claude_is_unreachable(client: TestClient, override):
    override(get_claude_provider, ClaudeProvider(api_key="k", transport=httpx.MockTransport(_refuse)))

    response = client.post(
        "/api/ai/analyze-lore",
        json={"content": "Dragons guard the pass. Dragons sleep.", "title": "The Pass"},
    )

    assert response.status_code == 200
    assert response.json()["summary"].startswith("• General entry: The Pass")


def test_analyze_lore_with_claude(client: TestClient, override):
    reply = json.dumps({"summary": "• Dragons guard the pass", "tags": ["Dragons", "pass"]})
    override(get_claude_provider, fake_provider(
        "claude", generate_text=AsyncMock(return_value=result(reply, "claude"))
    ))

    response = client.post(
        "/api/ai/analyze-lore",
        json={"content": "Dragons guard the pass.", "title": "The Pass", "category": "history"},
    )

    assert response.json()["summary"] == "• Dragons guard the pass"
    assert response.json()["tags"] == ["dragons", "pass"]


# Vision

def test_analyze_diversity(client: TestClient, override):
    gemini = override(get_gemini_provider, fake_provider(
        "gemini",
        analyze_image=AsyncMock(return_value=result('{"colorTone": "vibrant", "mood": "Tense"}', "gemini")),
    ))

    with patch(
        "studio.api.routes.ai_vision.fetch_image_as_data_url",
        AsyncMock(return_value="data:image/png;base64,AA"),
    ):
        response = client.post("/api/ai/analyze-diversity", json={"imageUrl": "https://img/1.png"})

    body = response.json()
    assert body["success"] is True
    assert body["fingerprint"]["mood"] == "tense"
    assert body["fingerprint"]["composition"] == "medium"
    assert gemini.analyze_image.call_args.kwargs["temperature"] == 0.2


def test_analyze_diversity_without_key(client: TestClient, override):
    override(get_gemini_provider, fake_provider("gemini", available=False))

    response = client.post("/api/ai/analyze-diversity", json={"imageUrl": "https://img/1.png"})

    assert response.status_code == 503
    assert response.json()["error"] == "Gemini Vision API not available"


def test_evaluate_poster_validation(client: TestClient, override):
    override(get_gemini_provider, fake_provider("gemini"))

    empty = client.post("/api/ai/evaluate-poster", json={"posterUrls": [], "criteria": {}})
    assert empty.json()["error"] == "No poster URLs provided"

    no_criteria = client.post("/api/ai/evaluate-poster", json={"posterUrls": ["a", "b"]})
    assert no_criteria.status_code == 400
    assert no_criteria.json()["error"] == "Missing selection criteria"

    single = client.post("/api/ai/evaluate-poster", json={"posterUrls": ["a"], "criteria": {}})
    assert single.json()["result"]["confidence"] == 100


def test_evaluate_poster_rate_limited(client: TestClient, override):
    error = ProviderError("Gemini API error (429)", provider="gemini", upstream_status=429)
    override(get_gemini_provider, fake_provider(
        "gemini", analyze_multiple_images=AsyncMock(side_effect=error)
    ))

    with patch(
        "studio.api.routes.ai_vision.fetch_image_as_data_url",
        AsyncMock(return_value="data:image/png;base64,AA"),
    ):
        response = client.post(
            "/api/ai/evaluate-poster",
            json={"posterUrls": ["a", "b"], "criteria": {"projectName": "Skyfall"}},
        )

    assert response.status_code == 429
    assert response.json()["error"] == "Rate limited - please wait and retry"


# Media

def test_generate_images_reports_failures_inline(client: TestClient, override):
    override(get_leonardo_client, fake_provider(
        "leonardo",
        start_generation=AsyncMock(side_effect=["gen-1", ProviderError("bad prompt", provider="leonardo")]),
    ))

    response = client.post(
        "/api/ai/generate-images",
        json={"prompts": [{"id": "p1", "text": "A castle"}, {"id": "p2", "text": "A moat"}]},
    )

    generations = response.json()["generations"]
    assert generations[0] == {"promptId": "p1", "generationId": "gen-1", "status": "started"}
    assert generations[1]["status"] == "failed"
    assert generations[1]["error"] == "bad prompt"


def test_generate_images_reports_unreachable_leonardo_inline(client: TestClient, override):
    override(get_leonardo_client, LeonardoClient(api_key="k", transport=httpx.MockTransport(_refuse)))

    response = client.post(
        "/api/ai/generate-images", json={"prompts": [{"id": "p1", "text": "A castle"}]}
    )

    assert response.status_code == 200
    generation = response.json()["generations"][0]
    assert generation["status"] == "failed"
    assert generation["error"].startswith("Leonardo request failed")


def test_generate_images_without_key(client: TestClient, override):
    override(get_leonardo_client, fake_provider("leonardo", available=False))

    response = client.post(
        "/api/ai/generate-images", json={"prompts": [{"id": "p1", "text": "A castle"}]}
    )

    assert response.status_code == 503
    assert response.json()["error"] == "Leonardo API key not configured"


def test_generation_status_requires_id(client: TestClient, override):
    override(get_leonardo_client, fake_provider("leonardo"))

    response = client.get("/api/ai/generate-images")

    assert response.status_code == 400
    assert response.json()["error"] == "generationId is required"


def test_speech_is_stored_under_media_dir(client: TestClient, override, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "http://studio.test/")
    override(get_elevenlabs_client, fake_provider(
        "elevenlabs", text_to_speech=AsyncMock(return_value=b"ID3audio")
    ))

    response = client.post(
        "/api/ai/elevenlabs",
        json={"text": " The night was long. ", "projectId": "p1", "sceneId": "s1"},
    )

    audio_url = response.json()["audioUrl"]
    assert audio_url.startswith("http://studio.test/media/p1/audio/s1-")
    stored = list((tmp_path / "p1" / "audio").iterdir())
    assert len(stored) == 1
    assert stored[0].read_bytes() == b"ID3audio"


def test_speech_rejects_path_segments(client: TestClient, override):
    override(get_elevenlabs_client, fake_provider("elevenlabs"))

    response = client.post(
        "/api/ai/elevenlabs", json={"text": "Hi", "projectId": "../etc", "sceneId": "s1"}
    )

    assert response.status_code == 400


def test_avatar_batch_continues_after_failure(client: TestClient, override):
    leonardo = override(get_leonardo_client, fake_provider(
        "leonardo",
        generate_and_wait=AsyncMock(
            side_effect=["https://cdn/smile.png", ProviderError("timed out", provider="leonardo")]
        ),
    ))

    response = client.post(
        "/api/avatar-batch",
        json={
            "characterId": "c1",
            "basePrompt": "Portrait of Mira",
            "items": [
                {"id": "smile", "expressionModifier": "smiling", "angleModifier": "three-quarter view"},
                {"id": "angry", "expressionModifier": "angry"},
            ],
            "referenceImage": "ref-1",
            "seed": 42,
        },
    )

    body = response.json()
    assert body["batchId"].startswith("batch-c1-")
    assert (body["successCount"], body["failureCount"]) == (1, 1)
    assert body["results"][0]["imageUrl"] == "https://cdn/smile.png"
    assert body["results"][1] == {
        "id": "angry",
        "status": "failed",
        "error": "timed out",
        "processingTime": body["results"][1]["processingTime"],
    }
    first_call = leonardo.generate_and_wait.call_args_list[0]
    assert first_call.args[0] == "Portrait of Mira, smiling, three-quarter view"
    assert first_call.kwargs["init_image_id"] == "ref-1"
    assert first_call.kwargs["seed"] == 42


def test_avatar_batch_records_unreachable_leonardo_per_item(client: TestClient, override):
    override(get_leonardo_client, LeonardoClient(api_key="k", transport=httpx.MockTransport(_refuse)))

    response = client.post(
        "/api/avatar-batch",
        json={
            "characterId": "c1",
            "basePrompt": "Portrait of Mira",
            "items": [{"id": "smile"}, {"id": "frown"}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["successCount"], body["failureCount"]) == (0, 2)
    assert [r["status"] for r in body["results"]] == ["failed", "failed"]
    assert body["results"][0]["error"].startswith("Leonardo request failed")


def test_avatar_batch_limits(client: TestClient, override):
    override(get_leonardo_client, fake_provider("leonardo"))
    items = [{"id": str(i), "expressionModifier": "calm"} for i in range(17)]

    too_many = client.post(
        "/api/avatar-batch", json={"characterId": "c1", "basePrompt": "Mira", "items": items}
    )
    assert too_many.json()["error"] == "Maximum batch size is 16"

    empty = client.post(
        "/api/avatar-batch", json={"characterId": "c1", "basePrompt": "Mira", "items": []}
    )
    assert empty.json()["error"] == "items array is required and must not be empty"

    assert client.get("/api/avatar-batch").json()["maxBatchSize"] == 16


# Local LLM proxy

def _ollama(handler) -> OllamaProvider:
    return OllamaProvider(base_url="http://ollama.test", transport=httpx.MockTransport(handler))


def test_llm_generate(client: TestClient, override):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["options"] == {"temperature": 0.7, "num_predict": 2000}
        return httpx.Response(
            200,
            json={"model": "llama3.2", "response": "Once upon a time", "done": True, "eval_count": 4},
        )

    override(get_ollama_provider, _ollama(handler))

    response = client.post("/api/llm", json={"prompt": "Tell a story"})

    assert response.json()["content"] == "Once upon a time"
    assert response.json()["evalCount"] == 4


def test_llm_relays_upstream_status(client: TestClient, override):
    override(get_ollama_provider, _ollama(lambda request: httpx.Response(404, text="model not found")))

    response = client.post("/api/llm", json={"prompt": "Tell a story", "stream": True})

    assert response.status_code == 404
    assert response.json()["error"] == "LLM service error"
    assert response.json()["statusCode"] == 404


def test_llm_streams_chunks_as_events(client: TestClient, override):
    chunks = [{"response": "Once", "done": False}, {"response": " upon", "done": True}]

    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["stream"] is True
        return httpx.Response(200, text="\n".join(json.dumps(c) for c in chunks) + "\n")

    override(get_ollama_provider, _ollama(handler))

    response = client.post("/api/llm", json={"prompt": "Tell a story", "stream": True})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    for chunk in chunks:
        assert f"data: {json.dumps(chunk)}" in response.text


def test_llm_generate_when_ollama_is_unreachable(client: TestClient, override):
    override(get_ollama_provider, _ollama(_refuse))

    response = client.post("/api/llm", json={"prompt": "Tell a story"})

    assert response.status_code == 500
    assert response.json()["error"] == "LLM service error"
    assert "Ollama request failed" in response.json()["detail"]


def test_llm_health_when_ollama_is_down(client: TestClient, override):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    override(get_ollama_provider, _ollama(handler))

    response = client.get("/api/llm")

    assert response.status_code == 503
    assert response.json()["status"] == "error"


# Asset analysis

def test_asset_analysis_validates_config(client: TestClient):
    files = {"file": ("hero.png", b"PNG", "image/png")}

    bad_json = client.post("/api/asset-analysis", files=files, data={"config": "{not json"})
    assert bad_json.json()["error"] == "Invalid config JSON"

    nothing_enabled = client.post(
        "/api/asset-analysis", files=files, data={"config": json.dumps({"openai": {"enabled": False}})}
    )
    assert nothing_enabled.status_code == 400
    assert nothing_enabled.json()["error"] == "At least one AI model must be enabled"


def test_asset_analysis_runs_enabled_models(client: TestClient, override):
    gemini = fake_provider(
        "gemini",
        analyze_image=AsyncMock(
            return_value=result('{"assets": [{"name": "Sword", "type": "equipment"}]}', "gemini")
        ),
    )
    openai = fake_provider("openai", available=False)
    groq = fake_provider("groq")
    override(get_asset_analyzer, AssetAnalyzer(openai_client=openai, gemini=gemini, groq_client=groq))

    response = client.post(
        "/api/asset-analysis",
        files={"file": ("hero.png", b"PNG", "image/png")},
        data={"config": json.dumps({"gemini": {"enabled": True}, "openai": {"enabled": True}})},
    )

    body = response.json()
    assert body["gemini"][0]["name"] == "Sword"
    assert body["openai"] == []
    assert "openai" in body["errors"]
    assert body["groq"] is None
    groq.analyze_images.assert_not_called()
