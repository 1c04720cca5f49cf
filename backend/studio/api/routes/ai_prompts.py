import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends
from pydantic import Field

from studio.ai.llm_client import LLMClient, get_groq_client
from studio.ai.parsing import clean_generated_text, parse_json_response
from studio.ai.prompts.character import (
    ARCHETYPE_DESCRIPTIONS,
    CHARACTER_PROMPT_SYSTEM,
    EXPRESSION_DESCRIPTIONS,
    POSE_DESCRIPTIONS,
    build_character_user_prompt,
    build_fallback_prompt,
    truncate_prompt,
)
from studio.ai.prompts.dataset import (
    build_sketch_system_prompt,
    build_sketch_user_prompt,
    clamp_count,
    copy_variations,
    variation_ids,
)
from studio.ai.prompts.lore import (
    LORE_ANALYSIS_SYSTEM,
    build_lore_analysis_prompt,
    coerce_lore_analysis,
    extract_lore_tags,
    summarize_lore,
)
from studio.ai.prompts.names import NAME_PROMPTS, build_name_user_prompt, extract_suggestions
from studio.ai.providers import ClaudeProvider, get_claude_provider, require_available
from studio.core.errors import ProviderError, StudioError
from studio.models import CamelModel

router = APIRouter()
logger = logging.getLogger(__name__)

GroqDep = Annotated[LLMClient, Depends(get_groq_client)]
ClaudeDep = Annotated[ClaudeProvider, Depends(get_claude_provider)]


class ComposeCharacterPromptRequest(CamelModel):
    appearance: dict[str, Any]
    character_name: str | None = None
    selections: dict[str, Any] = Field(default_factory=dict)
    art_style: str | None = None


class DatasetSketchRequest(CamelModel):
    base_prompt: str = Field(min_length=1)
    type: Literal["artstyle", "character"]
    count: int = Field(ge=1)
    enhance: bool = False


class NameSuggestionsRequest(CamelModel):
    entity_type: Literal["character", "scene", "beat", "faction", "location"]
    partial_name: str = ""
    context: dict[str, Any] = Field(default_factory=dict)


class AnalyzeLoreRequest(CamelModel):
    content: str = Field(min_length=1)
    title: str = Field(min_length=1)
    category: str = "general"


# Character prompt composition

@router.get("/compose-character-prompt")
async def compose_character_prompt_info(groq: GroqDep) -> Any:
    return {
        "available": groq.is_available(),
        "service": "groq",
        "model": groq.model_name,
        "poses": list(POSE_DESCRIPTIONS),
        "expressions": list(EXPRESSION_DESCRIPTIONS),
        "archetypes": list(ARCHETYPE_DESCRIPTIONS),
    }


@router.post("/compose-character-prompt")
async def compose_character_prompt(body: ComposeCharacterPromptRequest, groq: GroqDep) -> Any:
    """Compose an image prompt with Groq, falling back to the template builder on any failure."""
    model: str | None = None
    used_fallback = False
    try:
        require_available(groq)
        result = await groq.generate_text(
            CHARACTER_PROMPT_SYSTEM,
            build_character_user_prompt(
                body.appearance, body.selections, body.character_name, body.art_style
            ),
            temperature=0.7,
            max_tokens=1024,
            feature="compose-character-prompt",
        )
        prompt = clean_generated_text(result.text)
        model = result.model
        if not prompt:
            raise ProviderError("Groq returned an empty prompt", provider="groq")
    except StudioError as e:
        logger.warning("Groq unavailable, using fallback prompt composition: %s", e.message)
        prompt = build_fallback_prompt(body.appearance, body.selections, body.art_style)
        used_fallback = True

    return {
        "success": True,
        "prompt": truncate_prompt(prompt),
        "usedFallback": used_fallback,
        "provider": "fallback" if used_fallback else "groq",
        "model": model,
    }


# Dataset sketch variations

@router.post("/dataset-sketch")
async def dataset_sketch(body: DatasetSketchRequest, claude: ClaudeDep) -> Any:
    count = clamp_count(body.count)
    if not body.enhance:
        return {"success": True, "prompts": copy_variations(body.base_prompt, count)}

    require_available(claude, "Claude API key not configured")
    result = await claude.generate_text(
        build_sketch_user_prompt(body.base_prompt, count),
        system_prompt=build_sketch_system_prompt(body.type, count),
        temperature=0.9,
        max_tokens=4000,
        feature="dataset-sketch",
    )
    try:
        variations = parse_json_response(result.text)
        if not isinstance(variations, list):
            raise ValueError("expected a JSON array of prompts")
    except ValueError as e:
        raise ProviderError(
            "Failed to parse AI response", provider="claude", raw_response=result.text
        ) from e

    texts = [str(text) for text in variations[:count]]
    return {
        "success": True,
        "prompts": [
            {"id": var_id, "text": text}
            for var_id, text in zip(variation_ids(len(texts)), texts)
        ],
    }


# Name suggestions

@router.post("/name-suggestions")
async def name_suggestions(body: NameSuggestionsRequest, groq: GroqDep) -> Any:
    require_available(groq)
    payload = await groq.generate_json(
        NAME_PROMPTS[body.entity_type],
        build_name_user_prompt(body.entity_type, body.partial_name, body.context),
        temperature=0.8,
        max_tokens=1500,
        feature="name-suggestions",
    )
    try:
        suggestions = extract_suggestions(payload)
    except ValueError as e:
        raise ProviderError(str(e), provider="groq") from e

    return {"success": True, "suggestions": suggestions, "entityType": body.entity_type}


# Lore analysis

@router.post("/analyze-lore")
async def analyze_lore(body: AnalyzeLoreRequest, claude: ClaudeDep) -> Any:
    summary: str | None = None
    tags: list[str] = []
    if claude.is_available():
        try:
            result = await claude.generate_text(
                build_lore_analysis_prompt(body.content, body.title, body.category),
                system_prompt=LORE_ANALYSIS_SYSTEM,
                temperature=0.3,
                max_tokens=1024,
                feature="analyze-lore",
            )
            summary, tags = coerce_lore_analysis(parse_json_response(result.text))
        except (StudioError, ValueError) as e:
            logger.warning("Claude lore analysis failed, using keyword extraction: %s", e)
            summary = None

    if summary is None:
        summary = summarize_lore(body.content, body.title, body.category)
        tags = extract_lore_tags(body.content, body.title, body.category)

    return {
        "summary": summary,
        "tags": tags,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
