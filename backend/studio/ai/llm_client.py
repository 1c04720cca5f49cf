import logging
from typing import Any

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from studio.ai.parsing import parse_json_response, strip_code_fences
from studio.ai.providers import GenerationResult
from studio.core.config import settings
from studio.core.errors import ProviderError

logger = logging.getLogger(__name__)


class LLMClient:
    """Chat-completions client for OpenAI-compatible providers (Groq, OpenAI)."""

    def __init__(
        self,
        provider: str,
        model_name: str,
        api_key: str | None,
        base_url: str | None = None,
        display_name: str | None = None,
    ):
        self.provider = provider
        self.display_name = display_name or provider.capitalize()
        self.model_name = model_name
        self.api_key = api_key
        # One attempt per call: the SDK's own retry loop is switched off.
        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key or "missing",
            max_retries=0,
            timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS,
        )

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
        model: str | None = None,
        feature: str = "text",
    ) -> GenerationResult:
        model_name = model or self.model_name
        kwargs: dict[str, Any] = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.info("Issuing %s request to %s model %s...", feature, self.display_name, model_name)
        try:
            response = await self.client.chat.completions.create(
                model=model_name,
                messages=messages,
                **kwargs,
            )
        except APIStatusError as e:
            body = e.response.text if e.response is not None else str(e)
            raise ProviderError(
                f"{self.display_name} API error ({e.status_code}): {body}",
                provider=self.provider,
                upstream_status=e.status_code,
                raw_response=body,
            ) from e
        except OpenAIError as e:
            raise ProviderError(
                f"{self.display_name} request failed: {e}", provider=self.provider
            ) from e

        if not getattr(response, "choices", None):
            logger.error("Received 0 choices from %s: %s", model_name, response)
            raise ProviderError(
                f"{self.display_name} returned no output", provider=self.provider
            )

        text = response.choices[0].message.content or ""
        logger.info("Received %s response from %s.", feature, model_name)
        return GenerationResult(text=text, provider=self.provider, model=model_name, raw=response)

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        feature: str = "text",
    ) -> GenerationResult:
        """Plain text completion with markdown fences removed."""
        result = await self.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            feature=feature,
        )
        result.text = strip_code_fences(result.text)
        if not result.text:
            raise ProviderError(f"{self.display_name} returned empty content", provider=self.provider)
        return result

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        feature: str = "json",
    ) -> Any:
        """JSON-mode completion; returns the parsed payload."""
        result = await self.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
            feature=feature,
        )
        try:
            return parse_json_response(result.text)
        except ValueError as e:
            logger.error("Error parsing JSON response from %s: %s", result.model, e)
            raise ProviderError(
                f"Failed to parse {self.display_name} response",
                provider=self.provider,
                raw_response=result.text,
            ) from e

    async def analyze_images(
        self,
        image_data_urls: list[str],
        prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int | None = None,
        feature: str = "vision",
    ) -> GenerationResult:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(
            {"type": "image_url", "image_url": {"url": url}} for url in image_data_urls
        )
        return await self.complete(
            [{"role": "user", "content": content}],
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
            feature=feature,
        )


def get_groq_client() -> LLMClient:
    return LLMClient(
        provider="groq",
        model_name=settings.GROQ_MODEL,
        api_key=settings.GROQ_API_KEY,
        base_url=settings.GROQ_BASE_URL,
        display_name="Groq",
    )


def get_openai_client() -> LLMClient:
    return LLMClient(
        provider="openai",
        model_name=settings.OPENAI_MODEL,
        api_key=settings.OPENAI_API_KEY,
        display_name="OpenAI",
    )
