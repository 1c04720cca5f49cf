from typing import Any

CHARACTER_NAMES_SYSTEM = """You are a creative naming expert specializing in character names across all genres and cultures.

Character names should be:
- MEMORABLE: Easy to pronounce and recall
- GENRE-APPROPRIATE: Match the world and tone (fantasy, sci-fi, historical, contemporary)
- CULTURALLY RELEVANT: Reflect the character's background and setting
- MEANINGFUL: Often hint at personality, role, or destiny
- DISTINCTIVE: Stand out from other characters in the story

NAMING PATTERNS:
- Protagonists: Strong, relatable names
- Antagonists: Sharp, memorable names (often with harder consonants)
- Supporting: Names that complement but don't overshadow

Consider character traits, role, relationships, and story world when suggesting names."""

SCENE_NAMES_SYSTEM = """You are a screenplay and narrative expert specializing in scene titling.

Scene names should be:
- DESCRIPTIVE: Convey location, action, or emotional content
- CLEAR: Easy to identify at a glance
- EVOCATIVE: Create a mood or sense of the scene
- CONSISTENT: Match the project's naming style

SCENE NAMING CONVENTIONS:
1. Location-Based: "The Throne Room", "Midnight at the Docks"
2. Action-Based: "The Chase", "Breaking and Entering"
3. Emotional: "Moment of Truth", "Bittersweet Reunion"
4. Hybrid: "Betrayal at the Castle", "Dawn Meeting in the Garden"

Consider the scene's purpose, location, participants, emotional tone, and story context when suggesting names."""

BEAT_NAMES_SYSTEM = """You are a story structure expert who names narrative beats.

Beat names should be:
- CONCISE: Two to five words
- STRUCTURAL: Signal the beat's role in the arc (setup, catalyst, midpoint, climax, resolution)
- SPECIFIC: Tied to what actually happens in this story, not generic labels

Consider the act, neighbouring beats, and the characters involved when suggesting names."""

NAME_PROMPTS = {
    "character": CHARACTER_NAMES_SYSTEM,
    "scene": SCENE_NAMES_SYSTEM,
    "beat": BEAT_NAMES_SYSTEM,
    "faction": CHARACTER_NAMES_SYSTEM,
    "location": SCENE_NAMES_SYSTEM,
}

MAX_SUGGESTIONS = 5


def _format_context_value(value: Any) -> str:
    if isinstance(value, list):
        items = []
        for item in value[:15]:
            if isinstance(item, dict):
                items.append(str(item.get("name") or item.get("title") or item))
            else:
                items.append(str(item))
        return ", ".join(items)
    return str(value)


def build_name_user_prompt(entity_type: str, partial_name: str, context: dict[str, Any]) -> str:
    lines = [f"Generate {MAX_SUGGESTIONS} contextually relevant {entity_type} name suggestions.", ""]

    if partial_name.strip():
        lines.extend([
            f'User is typing: "{partial_name}"',
            "Build on this input with relevant completions.",
            "",
        ])

    context_lines = [
        f"- {key}: {_format_context_value(value)}"
        for key, value in context.items()
        if value not in (None, "", [], {})
    ]
    if context_lines:
        lines.append("=== CONTEXT ===")
        lines.extend(context_lines)
        lines.append("")

    lines.extend([
        "=== OUTPUT FORMAT ===",
        'Return a JSON object {"suggestions": [...]} with 5 suggestions. Each suggestion must have:',
        '  "name": the suggested name',
        '  "description": one sentence on why this name fits (15-30 words)',
        '  "reasoning": origin or meaning if applicable (10-20 words)',
        "",
        "Names must be unique, pronounceable and fit the story's naming conventions.",
        "Return ONLY valid JSON. No additional text.",
    ])
    return "\n".join(lines)


def extract_suggestions(payload: Any) -> list[dict[str, str]]:
    """Accept a bare array or `{suggestions: [...]}`; keep entries with a name and description."""
    if isinstance(payload, list):
        suggestions = payload
    elif isinstance(payload, dict) and isinstance(payload.get("suggestions"), list):
        suggestions = payload["suggestions"]
    else:
        raise ValueError("Invalid response format from AI model")

    valid = [
        {
            "name": s["name"],
            "description": s["description"],
            "reasoning": s.get("reasoning") or "",
        }
        for s in suggestions
        if isinstance(s, dict) and s.get("name") and s.get("description")
    ]
    return valid[:MAX_SUGGESTIONS]
