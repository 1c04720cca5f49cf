from typing import Any

from studio.ai.parsing import coerce_enum

DIVERSITY_SYSTEM_INSTRUCTION = (
    "You are a precise image classifier. Respond ONLY with valid JSON, no markdown or extra text."
)

DIVERSITY_ANALYSIS_PROMPT = """Analyze this image and classify its visual characteristics.

You MUST respond with valid JSON only (no markdown, no explanation).
Choose EXACTLY ONE option from each category.

{
  "colorTone": "warm golden" | "cool blue" | "dark moody" | "vibrant" | "muted" | "monochromatic",
  "composition": "wide" | "medium" | "close-up" | "portrait" | "action" | "environmental",
  "subjectFocus": "character" | "environment" | "action" | "object" | "group",
  "mood": "dramatic" | "peaceful" | "tense" | "mysterious" | "energetic" | "melancholic",
  "lighting": "day" | "night" | "golden-hour" | "dawn" | "artificial" | "dramatic",
  "cameraAngle": "eye-level" | "low-angle" | "high-angle" | "aerial" | "dutch" | "over-shoulder",
  "activity": "static" | "subtle" | "dynamic" | "intense"
}

DEFINITIONS:
- colorTone: Dominant color temperature/feeling
- composition: Shot framing and scope
- subjectFocus: What the image primarily shows
- mood: Emotional atmosphere conveyed
- lighting: Light source and time of day
- cameraAngle: Virtual camera position
- activity: Level of motion/action in the scene"""

# field -> (allowed values, default, spelling variants)
FINGERPRINT_FIELDS: dict[str, tuple[tuple[str, ...], str, dict[str, str]]] = {
    "composition": (
        ("wide", "medium", "close-up", "portrait", "action", "environmental"),
        "medium",
        {"close up": "close-up", "closeup": "close-up"},
    ),
    "subjectFocus": (
        ("character", "environment", "action", "object", "group"),
        "environment",
        {},
    ),
    "mood": (
        ("dramatic", "peaceful", "tense", "mysterious", "energetic", "melancholic"),
        "dramatic",
        {},
    ),
    "lighting": (
        ("day", "night", "golden-hour", "dawn", "artificial", "dramatic"),
        "day",
        {"golden hour": "golden-hour", "sunset": "golden-hour"},
    ),
    "cameraAngle": (
        ("eye-level", "low-angle", "high-angle", "aerial", "dutch", "over-shoulder"),
        "eye-level",
        {
            "eye level": "eye-level",
            "low angle": "low-angle",
            "high angle": "high-angle",
            "over shoulder": "over-shoulder",
        },
    ),
    "activity": (
        ("static", "subtle", "dynamic", "intense"),
        "subtle",
        {},
    ),
}


def validate_fingerprint(data: Any) -> dict[str, str] | None:
    """Normalize a classifier reply into a fingerprint; None unless it is a JSON object."""
    if not isinstance(data, dict):
        return None
    fingerprint = {
        "colorTone": data["colorTone"] if isinstance(data.get("colorTone"), str) else "neutral",
    }
    for field_name, (allowed, default, aliases) in FINGERPRINT_FIELDS.items():
        fingerprint[field_name] = coerce_enum(data.get(field_name), allowed, default, aliases)
    return fingerprint
