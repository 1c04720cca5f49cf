import json
import logging
from collections.abc import AsyncIterator
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field
from sse_starlette.sse import EventSourceResponse

from studio.ai.providers import OllamaProvider, get_ollama_provider
from studio.core.errors import ProviderError, StudioError
from studio.models import CamelModel

router = APIRouter()
logger = logging.getLogger(__name__)

OllamaDep = Annotated[OllamaProvider, Depends(get_ollama_provider)]


class LLMRequest(CamelModel):
    prompt: str = Field(min_length=1)
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    stream: bool = False
    system_prompt: str | None = None


def _relay_upstream_error(e: ProviderError) -> StudioError:
    status = e.upstream_status or 500
    return StudioError(
        "LLM service error",
        status_code=status,
        detail=f"Ollama returned {status}: {e.raw_response or e.message}",
        statusCode=status,
    )


@router.get("")
async def llm_health(ollama: OllamaDep) -> Any:
    try:
        models = await ollama.list_models()
    except ProviderError as e:
        logger.warning("Ollama health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "error",
                "message": "Cannot connect to Ollama. Make sure Ollama is running.",
                "ollamaUrl": ollama.base_url,
                "error": str(e),
            },
        )
    return {
        "status": "ok",
        "message": "Ollama is accessible",
        "ollamaUrl": ollama.base_url,
        "defaultModel": ollama.model,
        "availableModels": models,
    }


@router.post("")
async def llm_generate(body: LLMRequest, ollama: OllamaDep) -> Any:
    """Proxy a prompt to the local Ollama instance, optionally as server-sent events."""
    options = {"temperature": body.temperature, "num_predict": body.max_tokens}

    if body.stream:
        chunks = ollama.stream(
            body.prompt, model=body.model, system=body.system_prompt, options=options
        )
        # Pull the first chunk here so an upstream error still maps to a status code.
        try:
            first = await anext(chunks)
        except ProviderError as e:
            raise _relay_upstream_error(e) from e
        except StopAsyncIteration:
            first = None

        async def events() -> AsyncIterator[str]:
            if first is not None:
                yield json.dumps(first)
            async for chunk in chunks:
                yield json.dumps(chunk)

        return EventSourceResponse(events())

    try:
        result = await ollama.generate(
            body.prompt, model=body.model, system=body.system_prompt, options=options
        )
    except ProviderError as e:
        raise _relay_upstream_error(e) from e

    raw = result.raw or {}
    return {
        "content": result.text,
        "model": result.model,
        "done": raw.get("done", True),
        "totalDuration": raw.get("total_duration"),
        "promptEvalCount": raw.get("prompt_eval_count"),
        "evalCount": raw.get("eval_count"),
    }
