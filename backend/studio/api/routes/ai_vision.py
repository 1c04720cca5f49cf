import asyncio
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field

from studio.ai.images import fetch_image_as_data_url
from studio.ai.parsing import parse_json_response
from studio.ai.prompts.diversity import (
    DIVERSITY_ANALYSIS_PROMPT,
    DIVERSITY_SYSTEM_INSTRUCTION,
    validate_fingerprint,
)
from studio.ai.prompts.poster import (
    POSTER_SYSTEM_INSTRUCTION,
    SINGLE_POSTER_REASONING,
    build_poster_selection_prompt,
    parse_selection_response,
)
from studio.ai.providers import GeminiProvider, get_gemini_provider, require_available
from studio.core.errors import BadRequestError, ProviderError, RateLimitedError
from studio.models import CamelModel

router = APIRouter()
logger = logging.getLogger(__name__)

GeminiDep = Annotated[GeminiProvider, Depends(get_gemini_provider)]


class AnalyzeDiversityRequest(CamelModel):
    image_url: str = Field(min_length=1)


class PosterCriteria(CamelModel):
    project_name: str = ""
    project_vision: str = ""
    themes: list[str] = Field(default_factory=list)


class EvaluatePosterRequest(CamelModel):
    poster_urls: list[str] = Field(default_factory=list)
    criteria: PosterCriteria | None = None


@router.post("/analyze-diversity")
async def analyze_diversity(body: AnalyzeDiversityRequest, gemini: GeminiDep) -> Any:
    """Classify an image into a visual fingerprint used to keep generated sets varied."""
    require_available(gemini, "Gemini Vision API not available")
    image = await fetch_image_as_data_url(body.image_url)
    result = await gemini.analyze_image(
        image,
        DIVERSITY_ANALYSIS_PROMPT,
        system_instruction=DIVERSITY_SYSTEM_INSTRUCTION,
        temperature=0.2,
        max_tokens=512,
        feature="diversity-analysis",
    )

    try:
        parsed = parse_json_response(result.text)
    except ValueError:
        parsed = None
    fingerprint = validate_fingerprint(parsed)
    if fingerprint is None:
        logger.error("Failed to parse fingerprint: %s", result.text)
        return {"success": False, "error": "Failed to parse visual features"}

    return {"success": True, "fingerprint": fingerprint}


@router.post("/evaluate-poster")
async def evaluate_poster(body: EvaluatePosterRequest, gemini: GeminiDep) -> Any:
    if not body.poster_urls:
        raise BadRequestError("No poster URLs provided")
    if body.criteria is None:
        raise BadRequestError("Missing selection criteria")

    if len(body.poster_urls) == 1:
        return {
            "success": True,
            "result": {"selectedIndex": 0, "reasoning": SINGLE_POSTER_REASONING, "confidence": 100},
        }

    require_available(gemini)
    logger.info("Fetching %s poster images...", len(body.poster_urls))
    image_data_urls = await asyncio.gather(
        *(fetch_image_as_data_url(url) for url in body.poster_urls)
    )

    prompt = build_poster_selection_prompt(
        body.criteria.project_name, body.criteria.project_vision, body.criteria.themes
    )
    try:
        response = await gemini.analyze_multiple_images(
            list(image_data_urls),
            prompt,
            system_instruction=POSTER_SYSTEM_INSTRUCTION,
            temperature=0.4,
            max_tokens=1500,
            feature="poster-selection",
        )
    except ProviderError as e:
        if e.is_rate_limited:
            raise RateLimitedError("Rate limited - please wait and retry") from e
        raise

    result = parse_selection_response(response.text, len(body.poster_urls))
    logger.info(
        "Selected poster %s with confidence %s", result["selectedIndex"], result["confidence"]
    )
    return {"success": True, "result": result}
