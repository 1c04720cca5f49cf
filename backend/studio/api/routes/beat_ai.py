import asyncio
import logging
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends
from pydantic import Field

from studio.ai.llm_client import LLMClient, get_groq_client, get_openai_client
from studio.ai.parsing import clean_generated_text, parse_json_response
from studio.ai.prompts.beats import (
    BEAT_SUGGESTIONS_SYSTEM,
    BEAT_SUMMARY_SYSTEM,
    DEFAULT_SCENE_SUGGESTIONS,
    SCENE_MAPPING_SYSTEM,
    build_beat_suggestions_prompt,
    build_beat_summary_prompt,
    build_scene_mapping_prompt,
    extract_beat_suggestions,
    extract_scene_suggestions,
)
from studio.ai.providers import OllamaProvider, get_ollama_provider, require_available
from studio.core.errors import ProviderError, StudioError
from studio.models import CamelModel

logger = logging.getLogger(__name__)

scene_mapping_router = APIRouter()
suggestions_router = APIRouter()
summary_router = APIRouter()

OpenAIDep = Annotated[LLMClient, Depends(get_openai_client)]
GroqDep = Annotated[LLMClient, Depends(get_groq_client)]
OllamaDep = Annotated[OllamaProvider, Depends(get_ollama_provider)]

SUMMARY_OPTIONS = {"temperature": 0.7, "num_predict": 100}


class SceneMappingRequest(CamelModel):
    beat_name: str = Field(min_length=1)
    beat_description: str | None = None
    beat_type: str | None = None
    existing_scenes: list[dict[str, Any]] = Field(default_factory=list)
    project_context: dict[str, Any] | None = None
    max_suggestions: int = Field(default=DEFAULT_SCENE_SUGGESTIONS, ge=1, le=10)
    include_new_scenes: bool = True


class BeatRef(CamelModel):
    name: str
    description: str | None = None


class BeatSuggestionsRequest(CamelModel):
    partial_name: str = ""
    project_title: str = ""
    project_description: str = ""
    act_name: str = ""
    act_description: str = ""
    beat_type: Literal["story", "act"] = "story"
    existing_beats: list[BeatRef] = Field(default_factory=list)
    characters: list[str] = Field(default_factory=list)
    preceding_beats: list[BeatRef] = Field(default_factory=list)


class BeatSummaryRequest(CamelModel):
    beat_name: str = Field(min_length=1)
    beat_description: str | None = None
    beat_type: str | None = None
    act_context: str | None = None
    order: int | None = None
    preceding_beat_summary: str | None = None


class BatchBeat(CamelModel):
    id: str
    name: str
    description: str | None = None
    type: str | None = None
    act_context: str | None = None
    summary: str | None = None


class BatchSummaryRequest(CamelModel):
    beats: list[BatchBeat]


# Beat to scene mapping

@scene_mapping_router.post("")
async def suggest_scene_mapping(body: SceneMappingRequest, openai: OpenAIDep) -> Any:
    """Suggest existing or new scenes that dramatize a beat. An unparseable reply yields no suggestions."""
    require_available(openai, "OpenAI API key not configured")
    try:
        result = await openai.complete(
            [
                {"role": "system", "content": SCENE_MAPPING_SYSTEM},
                {
                    "role": "user",
                    "content": build_scene_mapping_prompt(
                        beat_name=body.beat_name,
                        beat_description=body.beat_description,
                        beat_type=body.beat_type,
                        existing_scenes=body.existing_scenes,
                        project_context=body.project_context,
                        max_suggestions=body.max_suggestions,
                        include_new_scenes=body.include_new_scenes,
                    ),
                },
            ],
            temperature=0.7,
            max_tokens=2000,
            json_mode=True,
            feature="beat-scene-mapping",
        )
    except ProviderError as e:
        raise ProviderError(
            "Failed to generate scene suggestions", provider=e.provider, upstream_status=e.upstream_status
        ) from e

    try:
        suggestions = extract_scene_suggestions(parse_json_response(result.text))
    except ValueError as e:
        logger.error("Failed to parse scene mapping reply: %s", e)
        suggestions = []
    return {"suggestions": suggestions, "model": result.model}


# Beat name suggestions

@suggestions_router.post("")
async def suggest_beats(body: BeatSuggestionsRequest, groq: GroqDep) -> Any:
    require_available(groq)
    user_prompt = build_beat_suggestions_prompt(
        partial_name=body.partial_name,
        project_title=body.project_title,
        project_description=body.project_description,
        act_name=body.act_name,
        act_description=body.act_description,
        beat_type=body.beat_type,
        existing_beats=[beat.model_dump() for beat in body.existing_beats],
        characters=body.characters,
        preceding_beats=[beat.model_dump() for beat in body.preceding_beats],
    )
    try:
        payload = await groq.generate_json(
            BEAT_SUGGESTIONS_SYSTEM,
            user_prompt,
            temperature=0.8,
            max_tokens=1500,
            feature="beat-suggestions",
        )
        suggestions = extract_beat_suggestions(payload)
    except (ProviderError, ValueError) as e:
        details = e.message if isinstance(e, StudioError) else str(e)
        logger.error("Beat suggestions failed: %s", details)
        raise StudioError("Failed to generate beat suggestions", status_code=500, details=details) from e

    return {"suggestions": suggestions, "success": True}


# Beat card summaries

async def _summarize(ollama: OllamaProvider, prompt: str) -> str:
    result = await ollama.generate(prompt, system=BEAT_SUMMARY_SYSTEM, options=SUMMARY_OPTIONS)
    return clean_generated_text(result.text)


@summary_router.post("")
async def summarize_beat(body: BeatSummaryRequest, ollama: OllamaDep) -> Any:
    prompt = build_beat_summary_prompt(
        beat_name=body.beat_name,
        beat_description=body.beat_description,
        beat_type=body.beat_type,
        act_context=body.act_context,
        order=body.order,
        preceding_summary=body.preceding_beat_summary,
    )
    try:
        summary = await _summarize(ollama, prompt)
    except ProviderError as e:
        raise StudioError(
            "LLM generation failed", status_code=e.upstream_status or 500, message=e.message
        ) from e
    return {"summary": summary, "beatId": body.beat_name}


@summary_router.put("")
async def summarize_beats(body: BatchSummaryRequest, ollama: OllamaDep) -> Any:
    """Summarize every beat concurrently. A beat whose summary fails keeps its description."""

    async def summarize_one(index: int, beat: BatchBeat) -> dict[str, Any]:
        previous = body.beats[index - 1].summary if index > 0 else None
        prompt = build_beat_summary_prompt(
            beat_name=beat.name,
            beat_description=beat.description,
            beat_type=beat.type,
            act_context=beat.act_context,
            order=index,
            preceding_summary=previous,
        )
        try:
            summary = await _summarize(ollama, prompt)
        except ProviderError as e:
            logger.warning("Summary for beat %s failed: %s", beat.name, e.message)
            return {
                "beatId": beat.id,
                "beatName": beat.name,
                "summary": beat.description or "Summary generation failed",
                "error": True,
            }
        return {"beatId": beat.id, "beatName": beat.name, "summary": summary}

    summaries = await asyncio.gather(*(summarize_one(i, beat) for i, beat in enumerate(body.beats)))
    return {"summaries": summaries}
