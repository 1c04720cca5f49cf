import asyncio
import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, UploadFile

from studio.ai.asset_analysis import ANALYSIS_MODELS, AssetAnalyzer, get_asset_analyzer
from studio.ai.images import to_data_url
from studio.core.config import settings
from studio.core.errors import BadRequestError, ProviderTimeoutError

router = APIRouter()
logger = logging.getLogger(__name__)

AnalyzerDep = Annotated[AssetAnalyzer, Depends(get_asset_analyzer)]


def parse_analysis_config(config: str) -> list[str]:
    """Names of the enabled models, in a fixed order."""
    try:
        parsed = json.loads(config)
    except ValueError as e:
        raise BadRequestError("Invalid config JSON") from e
    if not isinstance(parsed, dict):
        raise BadRequestError("Invalid config JSON")

    enabled = [
        model
        for model in ANALYSIS_MODELS
        if isinstance(parsed.get(model), dict) and parsed[model].get("enabled")
    ]
    if not enabled:
        raise BadRequestError("At least one AI model must be enabled")
    return enabled


@router.get("")
async def describe_asset_analysis() -> Any:
    timeout = int(settings.ASSET_ANALYSIS_TIMEOUT_SECONDS)
    return {
        "endpoint": f"{settings.API_V1_STR}/asset-analysis",
        "method": "POST",
        "description": "Multi-model AI image analysis for game asset extraction",
        "supported_models": list(ANALYSIS_MODELS),
        "request_format": {
            "file": "Image file (multipart/form-data)",
            "config": "JSON string with model configuration",
        },
        "config_example": {
            "openai": {"enabled": True},
            "gemini": {"enabled": True},
            "groq": {"enabled": False},
        },
        "timeout": f"{timeout} seconds",
    }


@router.post("")
async def analyze_asset_image(
    analyzer: AnalyzerDep,
    file: UploadFile = File(...),
    config: str = Form(...),
) -> Any:
    enabled = parse_analysis_config(config)
    content = await file.read()
    if not content:
        raise BadRequestError("No file uploaded")
    image = to_data_url(content, file.content_type or "image/jpeg")

    timeout = settings.ASSET_ANALYSIS_TIMEOUT_SECONDS
    logger.info("Analyzing %s (%s bytes) with %s", file.filename, len(content), ", ".join(enabled))
    try:
        return await asyncio.wait_for(analyzer.analyze(image, enabled), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ProviderTimeoutError(
            f"Analysis timeout - operation took longer than {int(timeout)} seconds"
        ) from e
