import base64
import logging

import httpx

from studio.core.config import settings
from studio.core.errors import ProviderError

logger = logging.getLogger(__name__)


def to_data_url(content: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


async def fetch_image_as_data_url(
    url: str, *, transport: httpx.AsyncBaseTransport | None = None
) -> str:
    """Download an image and inline it as a base64 data URL. Data URLs pass through."""
    if url.startswith("data:"):
        return url
    try:
        async with httpx.AsyncClient(
            transport=transport,
            timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ProviderError(
            f"Failed to fetch image ({exc.response.status_code}): {url}",
            provider="image-fetch",
            upstream_status=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderError(f"Failed to fetch image: {url}", provider="image-fetch") from exc

    mime_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
    logger.debug("Fetched %s bytes of %s from %s", len(response.content), mime_type, url)
    return to_data_url(response.content, mime_type or "image/png")
