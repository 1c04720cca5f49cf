import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from pydantic import Field

from studio.ai.media import (
    ElevenLabsClient,
    LeonardoClient,
    get_elevenlabs_client,
    get_leonardo_client,
)
from studio.ai.providers import require_available
from studio.core.config import settings
from studio.core.errors import BadRequestError, StudioError
from studio.models import CamelModel

router = APIRouter()
logger = logging.getLogger(__name__)

LeonardoDep = Annotated[LeonardoClient, Depends(get_leonardo_client)]
ElevenLabsDep = Annotated[ElevenLabsClient, Depends(get_elevenlabs_client)]

_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")


class PromptItem(CamelModel):
    id: str
    text: str = Field(min_length=1)


class GenerateImagesRequest(CamelModel):
    prompts: list[PromptItem] = Field(min_length=1)
    width: int = 768
    height: int = 768


class DeleteGenerationsRequest(CamelModel):
    generation_ids: list[str] = Field(min_length=1)


class SpeechRequest(CamelModel):
    text: str
    project_id: str
    scene_id: str


# Leonardo image generation

@router.post("/generate-images")
async def generate_images(body: GenerateImagesRequest, leonardo: LeonardoDep) -> Any:
    """Start one generation per prompt. A failing prompt is reported inline and does not fail the rest."""
    require_available(leonardo, "Leonardo API key not configured")

    async def start(prompt: PromptItem) -> dict[str, Any]:
        try:
            generation_id = await leonardo.start_generation(
                prompt.text, width=body.width, height=body.height, num_images=1
            )
        except StudioError as e:
            logger.warning("Generation for prompt %s failed to start: %s", prompt.id, e.message)
            return {"promptId": prompt.id, "generationId": "", "status": "failed", "error": e.message}
        return {"promptId": prompt.id, "generationId": generation_id, "status": "started"}

    generations = await asyncio.gather(*(start(prompt) for prompt in body.prompts))
    return {"success": True, "generations": generations}


@router.get("/generate-images")
async def read_generation(
    leonardo: LeonardoDep,
    generation_id: str | None = Query(default=None, alias="generationId"),
) -> Any:
    if not generation_id:
        raise BadRequestError("generationId is required")
    require_available(leonardo, "Leonardo API key not configured")
    state = await leonardo.get_generation(generation_id)
    return {"success": True, "generationId": generation_id, **state}


@router.delete("/generate-images")
async def delete_generations(body: DeleteGenerationsRequest, leonardo: LeonardoDep) -> Any:
    require_available(leonardo, "Leonardo API is not configured")

    async def delete(generation_id: str) -> bool:
        try:
            await leonardo.delete_generation(generation_id)
        except StudioError as e:
            logger.warning("Failed to delete generation %s: %s", generation_id, e.message)
            return False
        return True

    outcomes = await asyncio.gather(*(delete(gid) for gid in body.generation_ids))
    deleted = [gid for gid, ok in zip(body.generation_ids, outcomes) if ok]
    failed = [gid for gid, ok in zip(body.generation_ids, outcomes) if not ok]
    return {"success": not failed, "deleted": deleted, "failed": failed}


# ElevenLabs audio

@router.get("/elevenlabs")
async def elevenlabs_status(elevenlabs: ElevenLabsDep) -> Any:
    return {"available": elevenlabs.is_available(), "service": "elevenlabs-tts"}


@router.post("/elevenlabs")
async def generate_speech(body: SpeechRequest, elevenlabs: ElevenLabsDep) -> Any:
    """Narrate text and store the mp3 under MEDIA_DIR/<projectId>/audio/."""
    require_available(elevenlabs, "ElevenLabs API key not configured")
    if not body.text.strip():
        raise BadRequestError("Text is required")
    if not _SAFE_SEGMENT.match(body.project_id) or not _SAFE_SEGMENT.match(body.scene_id):
        raise BadRequestError("projectId and sceneId must be plain identifiers")

    audio = await elevenlabs.text_to_speech(body.text.strip())

    file_name = f"{body.scene_id}-{int(time.time() * 1000)}.mp3"
    relative_path = f"{body.project_id}/audio/{file_name}"
    target = Path(settings.MEDIA_DIR) / relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_bytes, audio)
    logger.info("Stored %s bytes of narration at %s", len(audio), target)

    return {
        "success": True,
        "audioUrl": f"{settings.PUBLIC_BASE_URL.rstrip('/')}/media/{relative_path}",
    }


@router.post("/audio/isolation")
async def isolate_audio(elevenlabs: ElevenLabsDep, audio: UploadFile = File(...)) -> Response:
    require_available(elevenlabs, "ElevenLabs API key not configured")
    content = await audio.read()
    if not content:
        raise BadRequestError("Audio file is empty")
    isolated = await elevenlabs.isolate_audio(
        audio.filename or "audio.mp3", content, audio.content_type or "audio/mpeg"
    )
    return Response(content=isolated, media_type="audio/mpeg")
