import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field

from studio.ai.media import LeonardoClient, get_leonardo_client
from studio.ai.providers import require_available
from studio.core.errors import BadRequestError, StudioError
from studio.models import CamelModel

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 16
DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_REFERENCE_STRENGTH = 0.5

LeonardoDep = Annotated[LeonardoClient, Depends(get_leonardo_client)]


class BatchItem(CamelModel):
    id: str
    expression_modifier: str = ""
    pose_modifier: str | None = None
    angle_modifier: str | None = None
    intensity_modifier: str | None = None
    label: str | None = None


class BatchRequest(CamelModel):
    character_id: str = Field(min_length=1)
    base_prompt: str = Field(min_length=1)
    items: list[BatchItem]
    reference_image: str | None = None
    reference_strength: float = DEFAULT_REFERENCE_STRENGTH
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    seed: int | None = None


def build_batch_item_prompt(base_prompt: str, item: BatchItem) -> str:
    modifiers = [
        item.expression_modifier,
        item.pose_modifier,
        item.angle_modifier,
        item.intensity_modifier,
    ]
    return ", ".join([base_prompt, *(m for m in modifiers if m)])


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


@router.get("")
async def batch_limits() -> Any:
    return {
        "maxBatchSize": MAX_BATCH_SIZE,
        "defaultDimensions": {"width": DEFAULT_WIDTH, "height": DEFAULT_HEIGHT},
        "supportedFeatures": [
            "expression_modifiers",
            "pose_modifiers",
            "angle_modifiers",
            "intensity_modifiers",
            "reference_image",
            "shared_seed",
        ],
        "status": "available",
    }


@router.post("")
async def generate_avatar_batch(body: BatchRequest, leonardo: LeonardoDep) -> Any:
    """
    Generate one avatar variant per item, one after another.

    Items run sequentially with a shared seed and reference image so the variants stay
    consistent. A failed item is recorded and the batch moves on.
    """
    if not body.items:
        raise BadRequestError("items array is required and must not be empty")
    if len(body.items) > MAX_BATCH_SIZE:
        raise BadRequestError(f"Maximum batch size is {MAX_BATCH_SIZE}")
    require_available(leonardo, "Leonardo API key not configured")

    batch_id = f"batch-{body.character_id}-{int(time.time() * 1000)}"
    batch_start = time.monotonic()
    results: list[dict[str, Any]] = []

    for item in body.items:
        item_start = time.monotonic()
        try:
            image_url = await leonardo.generate_and_wait(
                build_batch_item_prompt(body.base_prompt, item),
                width=body.width,
                height=body.height,
                num_images=1,
                init_image_id=body.reference_image,
                init_strength=body.reference_strength,
                seed=body.seed,
            )
        except StudioError as e:
            logger.warning("Batch %s item %s failed: %s", batch_id, item.id, e.message)
            results.append({
                "id": item.id,
                "status": "failed",
                "error": e.message,
                "processingTime": _elapsed_ms(item_start),
            })
            continue
        results.append({
            "id": item.id,
            "status": "completed",
            "imageUrl": image_url,
            "processingTime": _elapsed_ms(item_start),
        })

    success_count = sum(1 for r in results if r["status"] == "completed")
    return {
        "batchId": batch_id,
        "results": results,
        "totalTime": _elapsed_ms(batch_start),
        "successCount": success_count,
        "failureCount": len(results) - success_count,
    }
