"""
HTTP adapters for the non-OpenAI-compatible providers.

Each adapter issues exactly one request per call and maps the provider's envelope onto
`GenerationResult`. A non-2xx status becomes `ProviderError` carrying the upstream
status and body, and a transport failure becomes `ProviderError` too; nothing is retried.
"""
import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from studio.core.config import settings
from studio.core.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    text: str
    provider: str
    model: str
    raw: Any = field(default=None, repr=False)


class HTTPProvider:
    """Shared plumbing for adapters that talk to a provider over httpx."""

    name = "provider"
    display_name = "Provider"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.PROVIDER_HTTP_TIMEOUT_SECONDS

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self._timeout,
        )

    def _transport_error(self, e: httpx.HTTPError) -> ProviderError:
        logger.error("%s request failed: %s", self.display_name, e)
        return ProviderError(f"{self.display_name} request failed: {e}", provider=self.name)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request. Connection errors and timeouts become `ProviderError`."""
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        body = response.text
        logger.error(
            "%s API error (%s): %s", self.display_name, response.status_code, body[:500]
        )
        raise ProviderError(
            f"{self.display_name} API error ({response.status_code}): {body}",
            provider=self.name,
            upstream_status=response.status_code,
            raw_response=body,
        )

    def _json(self, response: httpx.Response) -> Any:
        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.display_name} returned a non-JSON response",
                provider=self.name,
                upstream_status=response.status_code,
                raw_response=response.text,
            ) from e


def require_available(provider: HTTPProvider | Any, message: str | None = None) -> None:
    if not provider.is_available():
        raise ConfigurationError(message or f"{provider.display_name} API not configured")


def split_data_url(data_url: str) -> tuple[str, str]:
    """Return (mime_type, base64 payload) for a `data:` URL."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or not payload:
        raise ValueError("Expected a base64 data URL")
    mime_type = header[len("data:"):].split(";")[0] or "image/png"
    return mime_type, payload


class GeminiProvider(HTTPProvider):
    name = "gemini"
    display_name = "Gemini"

    def __init__(self, api_key: str | None = None, *, model: str | None = None, vision_model: str | None = None, **kwargs: Any):
        super().__init__(
            api_key=api_key if api_key is not None else settings.GEMINI_API_KEY,
            base_url=kwargs.pop("base_url", settings.GEMINI_BASE_URL),
            **kwargs,
        )
        self.model = model or settings.GEMINI_MODEL
        self.vision_model = vision_model or settings.GEMINI_VISION_MODEL

    async def _generate(
        self,
        *,
        model: str,
        parts: list[dict[str, Any]],
        system_instruction: str | None,
        temperature: float,
        max_tokens: int,
        feature: str,
    ) -> GenerationResult:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        logger.info("Issuing %s request to Gemini model %s...", feature, model)
        response = await self._request(
            "POST",
            f"/models/{model}:generateContent",
            params={"key": self.api_key},
            json=payload,
        )
        data = self._json(response)

        candidates = data.get("candidates") or []
        if not candidates:
            raise ProviderError(
                "Gemini returned no candidates",
                provider=self.name,
                upstream_status=response.status_code,
                raw_response=json.dumps(data),
            )
        content_parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in content_parts)
        return GenerationResult(text=text, provider=self.name, model=model, raw=data)

    async def generate_text(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        feature: str = "text",
    ) -> GenerationResult:
        return await self._generate(
            model=self.model,
            parts=[{"text": prompt}],
            system_instruction=system_instruction,
            temperature=temperature,
            max_tokens=max_tokens,
            feature=feature,
        )

    async def analyze_image(
        self,
        image_data_url: str,
        prompt: str,
        **kwargs: Any,
    ) -> GenerationResult:
        return await self.analyze_multiple_images([image_data_url], prompt, **kwargs)

    async def analyze_multiple_images(
        self,
        image_data_urls: list[str],
        prompt: str,
        *,
        system_instruction: str | None = None,
        temperature: float = 0.4,
        max_tokens: int = 1024,
        feature: str = "vision",
    ) -> GenerationResult:
        parts: list[dict[str, Any]] = []
        for data_url in image_data_urls:
            mime_type, payload = split_data_url(data_url)
            parts.append({"inline_data": {"mime_type": mime_type, "data": payload}})
        parts.append({"text": prompt})
        return await self._generate(
            model=self.vision_model,
            parts=parts,
            system_instruction=system_instruction,
            temperature=temperature,
            max_tokens=max_tokens,
            feature=feature,
        )


class ClaudeProvider(HTTPProvider):
    name = "claude"
    display_name = "Claude"

    def __init__(self, api_key: str | None = None, *, model: str | None = None, **kwargs: Any):
        super().__init__(
            api_key=api_key if api_key is not None else settings.ANTHROPIC_API_KEY,
            base_url=kwargs.pop("base_url", settings.CLAUDE_BASE_URL),
            **kwargs,
        )
        self.model = model or settings.CLAUDE_MODEL

    async def generate_text(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        feature: str = "text",
    ) -> GenerationResult:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        logger.info("Issuing %s request to Claude model %s...", feature, self.model)
        response = await self._request(
            "POST",
            "/messages",
            headers={"x-api-key": self.api_key or "", "anthropic-version": "2023-06-01"},
            json=payload,
        )
        data = self._json(response)
        text = "".join(
            block.get("text", "") for block in data.get("content") or [] if block.get("type", "text") == "text"
        )
        return GenerationResult(text=text, provider=self.name, model=self.model, raw=data)


class OllamaProvider(HTTPProvider):
    """Local models served by Ollama. Available whenever a base URL is configured."""

    name = "ollama"
    display_name = "Ollama"

    def __init__(self, base_url: str | None = None, *, model: str | None = None, **kwargs: Any):
        super().__init__(base_url=base_url or settings.OLLAMA_BASE_URL, **kwargs)
        self.model = model or settings.OLLAMA_MODEL

    def is_available(self) -> bool:
        return bool(self.base_url)

    async def list_models(self) -> list[str]:
        response = await self._request("GET", "/api/tags")
        data = self._json(response)
        return [m.get("name", "") for m in data.get("models") or []]

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> GenerationResult:
        payload: dict[str, Any] = {"model": model or self.model, "prompt": prompt, "stream": False}
        if system:
            payload["system"] = system
        if options:
            payload["options"] = options

        logger.info("Issuing generate request to Ollama model %s...", payload["model"])
        response = await self._request("POST", "/api/generate", json=payload)
        data = self._json(response)
        return GenerationResult(
            text=data.get("response", ""),
            provider=self.name,
            model=data.get("model", payload["model"]),
            raw=data,
        )

    async def stream(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield each JSON line Ollama streams back."""
        payload: dict[str, Any] = {"model": model or self.model, "prompt": prompt, "stream": True}
        if system:
            payload["system"] = system
        if options:
            payload["options"] = options

        try:
            async with self._client() as client:
                async with client.stream("POST", "/api/generate", json=payload) as response:
                    if not response.is_success:
                        await response.aread()
                        self._raise_for_status(response)
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        yield json.loads(line)
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e


def get_gemini_provider() -> GeminiProvider:
    return GeminiProvider()


def get_claude_provider() -> ClaudeProvider:
    return ClaudeProvider()


def get_ollama_provider() -> OllamaProvider:
    return OllamaProvider()
