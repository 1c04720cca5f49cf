"""
Multi-model asset extraction from a single uploaded image.

Every enabled vision model analyzes the same image concurrently. A failing model
does not sink the others: its slot comes back empty and the failure is reported
under `errors`. The caller bounds the whole run with a timeout.
"""
import asyncio
import logging
from typing import Any

from studio.ai.llm_client import LLMClient, get_groq_client, get_openai_client
from studio.ai.parsing import parse_json_response
from studio.ai.providers import GeminiProvider, get_gemini_provider
from studio.core.config import settings
from studio.models import CHARACTER_ASSET_TYPES, STORY_ASSET_TYPES

logger = logging.getLogger(__name__)

ANALYSIS_MODELS = ("openai", "gemini", "groq")
ASSET_TYPES = CHARACTER_ASSET_TYPES + STORY_ASSET_TYPES

ASSET_ANALYSIS_PROMPT = f"""You are a game asset extraction specialist.
Identify every distinct reusable asset visible in this image.

For each asset return an object with:
- "name": short asset name
- "type": one of {", ".join(ASSET_TYPES)}
- "subcategory": finer grouping (e.g. "helmet", "tavern", "sword")
- "description": one or two sentences describing its look
- "gen": an image generation prompt that would recreate the asset alone

Respond with a JSON object {{"assets": [...]}} and nothing else."""


def normalize_assets(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("assets", [])
    if not isinstance(payload, list):
        raise ValueError("asset analysis reply is not a list of assets")
    assets = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        asset_type = item.get("type") if item.get("type") in ASSET_TYPES else "props"
        assets.append({
            "name": str(item["name"]),
            "type": asset_type,
            "subcategory": str(item.get("subcategory") or ""),
            "description": str(item.get("description") or ""),
            "gen": str(item.get("gen") or ""),
        })
    return assets


class AssetAnalyzer:
    def __init__(
        self,
        openai_client: LLMClient | None = None,
        gemini: GeminiProvider | None = None,
        groq_client: LLMClient | None = None,
    ):
        self.openai_client = openai_client or get_openai_client()
        self.gemini = gemini or get_gemini_provider()
        self.groq_client = groq_client or get_groq_client()

    async def _run_model(self, model: str, image_data_url: str) -> list[dict[str, Any]]:
        if model == "gemini":
            if not self.gemini.is_available():
                raise RuntimeError("Gemini API not configured")
            result = await self.gemini.analyze_image(
                image_data_url,
                ASSET_ANALYSIS_PROMPT,
                temperature=0.2,
                max_tokens=2048,
                feature="asset-analysis",
            )
        else:
            client = self.openai_client if model == "openai" else self.groq_client
            if not client.is_available():
                raise RuntimeError(f"{client.display_name} API not configured")
            vision_model = settings.GROQ_VISION_MODEL if model == "groq" else None
            result = await client.analyze_images(
                [image_data_url],
                ASSET_ANALYSIS_PROMPT,
                model=vision_model,
                temperature=0.2,
                max_tokens=2048,
                feature="asset-analysis",
            )
        return normalize_assets(parse_json_response(result.text))

    async def analyze(self, image_data_url: str, enabled: list[str]) -> dict[str, Any]:
        outcomes = await asyncio.gather(
            *(self._run_model(model, image_data_url) for model in enabled),
            return_exceptions=True,
        )
        results: dict[str, Any] = {model: None for model in ANALYSIS_MODELS}
        errors: dict[str, str] = {}
        for model, outcome in zip(enabled, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Asset analysis with %s failed: %s", model, outcome)
                results[model] = []
                errors[model] = str(outcome)
            else:
                results[model] = outcome
        results["errors"] = errors
        return results


def get_asset_analyzer() -> AssetAnalyzer:
    return AssetAnalyzer()
