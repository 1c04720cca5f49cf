import asyncio
import logging
from typing import Any

from studio.ai.providers import HTTPProvider
from studio.core.config import settings
from studio.core.errors import ProviderError

logger = logging.getLogger(__name__)


class LeonardoClient(HTTPProvider):
    """Leonardo image generation: start a job, poll its status, delete it."""

    name = "leonardo"
    display_name = "Leonardo"

    def __init__(self, api_key: str | None = None, *, model_id: str | None = None, **kwargs: Any):
        super().__init__(
            api_key=api_key if api_key is not None else settings.LEONARDO_API_KEY,
            base_url=kwargs.pop("base_url", settings.LEONARDO_BASE_URL),
            **kwargs,
        )
        self.model_id = model_id or settings.LEONARDO_MODEL_ID

    def _headers(self) -> dict[str, str]:
        return {"authorization": f"Bearer {self.api_key}", "accept": "application/json"}

    async def start_generation(
        self,
        prompt: str,
        *,
        width: int = 768,
        height: int = 768,
        num_images: int = 1,
        init_image_id: str | None = None,
        init_strength: float | None = None,
        seed: int | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "prompt": prompt,
            "modelId": self.model_id,
            "width": width,
            "height": height,
            "num_images": num_images,
        }
        if init_image_id:
            payload["init_image_id"] = init_image_id
            payload["init_strength"] = init_strength if init_strength is not None else 0.5
        if seed is not None:
            payload["seed"] = seed

        logger.info("Starting Leonardo generation (%sx%s)...", width, height)
        response = await self._request("POST", "/generations", headers=self._headers(), json=payload)
        data = self._json(response)
        generation_id = (data.get("sdGenerationJob") or {}).get("generationId")
        if not generation_id:
            raise ProviderError(
                "Leonardo response did not include a generation id",
                provider=self.name,
                raw_response=response.text,
            )
        return generation_id

    async def get_generation(self, generation_id: str) -> dict[str, Any]:
        """Return `{status, images}` with status lowered to pending/complete/failed."""
        response = await self._request("GET", f"/generations/{generation_id}", headers=self._headers())
        data = self._json(response)
        generation = data.get("generations_by_pk") or {}
        status = str(generation.get("status") or "PENDING").lower()
        images = [
            {"id": image.get("id"), "url": image.get("url")}
            for image in generation.get("generated_images") or []
        ]
        return {"status": status, "images": images}

    async def delete_generation(self, generation_id: str) -> None:
        response = await self._request("DELETE", f"/generations/{generation_id}", headers=self._headers())
        self._raise_for_status(response)

    async def generate_and_wait(
        self,
        prompt: str,
        *,
        poll_interval: float = 2.0,
        max_polls: int = 60,
        **generation_kwargs: Any,
    ) -> str:
        """Start one generation and poll until it finishes. Returns the first image URL."""
        generation_id = await self.start_generation(prompt, **generation_kwargs)
        for _ in range(max_polls):
            state = await self.get_generation(generation_id)
            if state["status"] == "complete":
                if not state["images"]:
                    raise ProviderError("Leonardo returned no images", provider=self.name)
                return state["images"][0]["url"]
            if state["status"] == "failed":
                raise ProviderError(f"Leonardo generation {generation_id} failed", provider=self.name)
            await asyncio.sleep(poll_interval)
        raise ProviderError(
            f"Leonardo generation {generation_id} did not finish", provider=self.name
        )


class ElevenLabsClient(HTTPProvider):
    name = "elevenlabs"
    display_name = "ElevenLabs"

    VOICE_SETTINGS = {
        "stability": 0.5,
        "similarity_boost": 0.75,
        "style": 0.5,
        "use_speaker_boost": True,
    }

    def __init__(self, api_key: str | None = None, **kwargs: Any):
        super().__init__(
            api_key=api_key if api_key is not None else settings.ELEVENLABS_API_KEY,
            base_url=kwargs.pop("base_url", settings.ELEVENLABS_BASE_URL),
            **kwargs,
        )

    async def text_to_speech(
        self,
        text: str,
        *,
        voice_id: str | None = None,
        model_id: str | None = None,
        language_code: str = "en",
    ) -> bytes:
        voice = voice_id or settings.ELEVENLABS_VOICE_ID
        payload = {
            "text": text,
            "model_id": model_id or settings.ELEVENLABS_MODEL_ID,
            "voice_settings": self.VOICE_SETTINGS,
            "language_code": language_code,
        }
        logger.info("Requesting ElevenLabs speech for %s characters with voice %s", len(text), voice)
        response = await self._request(
            "POST",
            f"/text-to-speech/{voice}",
            headers={"xi-api-key": self.api_key or "", "accept": "audio/mpeg"},
            json=payload,
        )
        self._raise_for_status(response)
        return response.content

    async def isolate_audio(self, filename: str, content: bytes, content_type: str) -> bytes:
        logger.info("Requesting ElevenLabs audio isolation for %s (%s bytes)", filename, len(content))
        response = await self._request(
            "POST",
            "/audio-isolation",
            headers={"xi-api-key": self.api_key or ""},
            files={"audio": (filename, content, content_type)},
        )
        self._raise_for_status(response)
        return response.content


def get_leonardo_client() -> LeonardoClient:
    return LeonardoClient()


def get_elevenlabs_client() -> ElevenLabsClient:
    return ElevenLabsClient()
