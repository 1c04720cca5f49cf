import time
from typing import Any

MAX_VARIATIONS = 20


def clamp_count(count: int) -> int:
    return min(max(count, 1), MAX_VARIATIONS)


def variation_ids(count: int, now_ms: int | None = None) -> list[str]:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return [f"var-{stamp}-{i}" for i in range(count)]


def copy_variations(base_prompt: str, count: int) -> list[dict[str, Any]]:
    """`count` untouched copies of the base prompt, used when no enhancement is requested."""
    return [{"id": var_id, "text": base_prompt} for var_id in variation_ids(count)]


def build_sketch_system_prompt(sketch_type: str, count: int) -> str:
    if sketch_type == "artstyle":
        focus = "art style exploration"
        vary = "Vary the artistic style, lighting, color palette, or composition"
    else:
        focus = "character design"
        vary = "Vary the pose, expression, outfit, setting, or angle"
    return f"""You are an expert AI art director specializing in {focus}.

Given a base prompt, generate exactly {count} distinct prompt variations. Each variation should:
- Explore a different angle, mood, or interpretation while keeping the core concept
- Be a complete, self-contained image generation prompt
- Be under 1500 characters
- {vary}

Return ONLY a JSON array of strings, no other text. Example:
["variation 1 text", "variation 2 text"]"""


def build_sketch_user_prompt(base_prompt: str, count: int) -> str:
    return f'Base prompt: "{base_prompt}"\n\nGenerate {count} distinct variations.'
