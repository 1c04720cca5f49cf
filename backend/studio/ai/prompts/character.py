import re
from typing import Any

MAX_PROMPT_LENGTH = 1500

CHARACTER_PROMPT_SYSTEM = """You are an expert at creating detailed character image generation prompts for high-end text-to-image models.

Your task is to take character appearance data and convert it into a cohesive, highly descriptive prompt for generating a full-body character illustration.

RULES:
1. The prompt MUST NOT exceed 1500 characters
2. If an art style is provided, establish it immediately at the beginning
3. Always describe a full-body character illustration, not a portrait or close-up
4. Include the pose and expression naturally in the description
5. Use rich descriptive adjectives for clothing textures, colors, and details
6. Describe the character's presence and atmosphere
7. Do not use the word "portrait" - use "illustration" or "full-body illustration"
8. Output ONLY the image generation prompt text, nothing else

OUTPUT FORMAT:
A single paragraph prompt starting with the art style, then the character description, pose, expression, and atmosphere."""

POSE_DESCRIPTIONS = {
    "heroic": "standing in a heroic pose with confident stance, feet shoulder-width apart",
    "battle": "in a battle-ready stance, weapon drawn and alert",
    "casual": "standing relaxed with a casual, approachable posture",
    "sitting": "seated comfortably with a relaxed demeanor",
    "walking": "mid-stride in a dynamic walking pose",
    "action": "in dynamic action pose with dramatic movement",
    "mysterious": "partially shrouded in shadow with an enigmatic presence",
    "regal": "standing with noble, commanding presence",
}

EXPRESSION_DESCRIPTIONS = {
    "determined": "with a determined, focused expression",
    "serene": "with a calm, serene expression",
    "fierce": "with a fierce, intense gaze",
    "cunning": "with a cunning, knowing smirk",
    "noble": "with a noble, dignified expression",
    "haunted": "with haunted, distant eyes",
    "joyful": "with a warm, joyful smile",
    "mysterious": "with an inscrutable, mysterious expression",
}

ARCHETYPE_DESCRIPTIONS = {
    "knight": "armored warrior, honorable protector",
    "wizard": "mystical spellcaster with arcane power",
    "assassin": "stealthy shadow operative",
    "ranger": "wilderness expert and skilled tracker",
    "cleric": "divine healer with holy power",
    "barbarian": "fierce tribal warrior",
    "bard": "charismatic performer and storyteller",
    "rogue": "cunning trickster and thief",
}


def truncate_prompt(prompt: str, limit: int = MAX_PROMPT_LENGTH) -> str:
    if len(prompt) > limit:
        return prompt[: limit - 3] + "..."
    return prompt


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def build_character_user_prompt(
    appearance: dict[str, Any],
    selections: dict[str, Any],
    character_name: str | None = None,
    art_style: str | None = None,
) -> str:
    lines = ["Create a full-body character illustration prompt for the following character:", ""]
    if character_name:
        lines.append(f"Character Name: {character_name}")
    if art_style:
        lines.extend([f"Art Style: {art_style}", ""])

    lines.append("Character Appearance:")
    for label, key in (
        ("Gender", "gender"),
        ("Age", "age"),
        ("Skin", "skinColor"),
        ("Body Type", "bodyType"),
        ("Height", "height"),
    ):
        lines.append(f"- {label}: {appearance.get(key) or 'unspecified'}")

    face = appearance.get("face")
    if isinstance(face, dict):
        lines.append(f"- Hair: {_text(face.get('hairColor'))} {_text(face.get('hairStyle'))}")
        lines.append(f"- Eyes: {_text(face.get('eyeColor'))}")
        lines.append(f"- Face Shape: {_text(face.get('shape'))}")
        if face.get("features"):
            lines.append(f"- Distinctive Features: {face['features']}")
        if face.get("facialHair"):
            lines.append(f"- Facial Hair: {face['facialHair']}")

    clothing = appearance.get("clothing")
    if isinstance(clothing, dict):
        lines.append(f"- Clothing Style: {_text(clothing.get('style'))}")
        lines.append(f"- Clothing Colors: {_text(clothing.get('color'))}")
        if clothing.get("accessories"):
            lines.append(f"- Accessories: {clothing['accessories']}")

    if appearance.get("customFeatures"):
        lines.append(f"- Additional Features: {appearance['customFeatures']}")

    archetype = selections.get("archetype")
    if archetype:
        line = f"Archetype: {archetype}"
        if archetype in ARCHETYPE_DESCRIPTIONS:
            line += f" ({ARCHETYPE_DESCRIPTIONS[archetype]})"
        lines.extend(["", line])

    pose = selections.get("pose")
    if pose:
        line = f"Pose: {pose}"
        if pose in POSE_DESCRIPTIONS:
            line += f" - {POSE_DESCRIPTIONS[pose]}"
        lines.append(line)

    expression = selections.get("expression")
    if expression:
        line = f"Expression: {expression}"
        if expression in EXPRESSION_DESCRIPTIONS:
            line += f" - {EXPRESSION_DESCRIPTIONS[expression]}"
        lines.append(line)

    lines.extend([
        "",
        "Generate a cohesive full-body character illustration prompt (max 1500 characters). "
        "Output ONLY the prompt text.",
    ])
    return "\n".join(lines)


def build_fallback_prompt(
    appearance: dict[str, Any],
    selections: dict[str, Any] | None = None,
    art_style: str | None = None,
) -> str:
    """Compose the illustration prompt from templates when no model is reachable."""
    selections = selections or {}
    parts: list[str] = []

    if art_style:
        parts.append(art_style)
    parts.append("Full-body character illustration,")

    archetype = selections.get("archetype")
    if archetype in ARCHETYPE_DESCRIPTIONS:
        parts.append(ARCHETYPE_DESCRIPTIONS[archetype] + ",")

    gender = _text(appearance.get("gender")) or "character"
    age = _text(appearance.get("age"))
    skin = _text(appearance.get("skinColor"))
    body_type = _text(appearance.get("bodyType"))
    height = _text(appearance.get("height"))
    if age or skin or body_type or height:
        parts.append(f"{age} {gender} with {skin} skin, {body_type} {height} build,")

    face = appearance.get("face")
    if isinstance(face, dict):
        hair = ""
        if face.get("hairColor") and face.get("hairStyle"):
            hair = f"{face['hairColor']} {face['hairStyle']} hair"
        eyes = f"{face['eyeColor']} eyes" if face.get("eyeColor") else ""
        face_details = ", ".join(d for d in (hair, eyes, _text(face.get("features"))) if d)
        if face_details:
            parts.append(face_details + ",")

    clothing = appearance.get("clothing")
    if isinstance(clothing, dict):
        color = f"in {clothing['color']}" if clothing.get("color") else ""
        clothing_details = " ".join(
            d for d in (_text(clothing.get("style")), color, _text(clothing.get("accessories"))) if d
        )
        if clothing_details:
            parts.append(f"wearing {clothing_details},")

    pose = selections.get("pose")
    if pose in POSE_DESCRIPTIONS:
        parts.append(POSE_DESCRIPTIONS[pose] + ",")

    expression = selections.get("expression")
    if expression in EXPRESSION_DESCRIPTIONS:
        parts.append(EXPRESSION_DESCRIPTIONS[expression] + ",")

    if appearance.get("customFeatures"):
        parts.append(f"{appearance['customFeatures']},")

    parts.append("highly detailed, professional illustration quality")

    prompt = re.sub(r",\s*,", ",", " ".join(parts))
    prompt = re.sub(r"\s+", " ", prompt).strip()
    return truncate_prompt(prompt)
