import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from studio.ai.asset_analysis import AssetAnalyzer, get_asset_analyzer, normalize_assets
from studio.ai.providers import GenerationResult
from studio.core.config import settings
from studio.main import app


def _client(available: bool = True, text: str = '{"assets": []}') -> MagicMock:
    client = MagicMock()
    client.display_name = "Fake"
    client.is_available.return_value = available
    reply = GenerationResult(text=text, provider="fake", model="fake-model")
    client.analyze_images = AsyncMock(return_value=reply)
    client.analyze_image = AsyncMock(return_value=reply)
    return client


def test_normalize_assets():
    assets = normalize_assets({
        "assets": [
            {"name": "Helmet", "type": "equipment", "subcategory": "helmet"},
            {"name": "Crate", "type": "junk"},
            {"type": "props"},
            "not an asset",
        ]
    })
    assert [a["name"] for a in assets] == ["Helmet", "Crate"]
    assert assets[1]["type"] == "props"
    assert assets[0]["description"] == ""

    with pytest.raises(ValueError):
        normalize_assets("nope")


@pytest.mark.asyncio
async def test_models_run_concurrently_and_fail_independently():
    openai = _client(text='```json\n{"assets": [{"name": "Torch", "type": "props"}]}\n```')
    gemini = _client(text="no json at all")
    groq = _client(available=False)

    analyzer = AssetAnalyzer(openai_client=openai, gemini=gemini, groq_client=groq)
    results = await analyzer.analyze("data:image/png;base64,AA", ["openai", "gemini", "groq"])

    assert results["openai"][0]["name"] == "Torch"
    assert results["gemini"] == []
    assert results["groq"] == []
    assert set(results["errors"]) == {"gemini", "groq"}


@pytest.mark.asyncio
async def test_groq_uses_vision_model():
    groq = _client()
    analyzer = AssetAnalyzer(openai_client=_client(), gemini=_client(), groq_client=groq)

    results = await analyzer.analyze("data:image/png;base64,AA", ["groq"])

    assert results["openai"] is None
    assert groq.analyze_images.call_args.kwargs["model"] is not None


def test_route_times_out(client, monkeypatch):

    async def slow_analyze(image, enabled):
        await asyncio.sleep(1)
        return {}

    analyzer = MagicMock()
    analyzer.analyze = slow_analyze
    app.dependency_overrides[get_asset_analyzer] = lambda: analyzer
    monkeypatch.setattr(settings, "ASSET_ANALYSIS_TIMEOUT_SECONDS", 0.01)

    response = client.post(
        "/api/asset-analysis",
        files={"file": ("hero.png", b"PNG", "image/png")},
        data={"config": '{"gemini": {"enabled": true}}'},
    )

    assert response.status_code == 504
    assert response.json()["error"].startswith("Analysis timeout")
