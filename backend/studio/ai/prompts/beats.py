from typing import Any

MAX_BEAT_SUGGESTIONS = 5
DEFAULT_SCENE_SUGGESTIONS = 3
SCRIPT_PREVIEW_LENGTH = 300

SCENE_MAPPING_SYSTEM = """You are an expert screenplay and narrative consultant specializing in scene structure and beat-to-scene mapping.

TASK: Analyze a story beat and either:
1. Map it to existing scenes that best represent this beat
2. Suggest new scene outlines to dramatize this beat

ANALYSIS APPROACH:
- Semantic Understanding: Identify the core dramatic purpose of the beat
- Scene Matching: Compare beat intent with existing scene content
- Narrative Flow: Consider how scenes can effectively dramatize the beat's action

SCORING CRITERIA:
- Semantic Similarity (0.0-1.0): How well scene content matches beat intent
- Confidence Score (0.0-1.0): Overall confidence in the suggestion

For an existing scene match, explain how the scene fulfills the beat.
For a new scene, give a name, description, location and short outline, and say why a new scene is needed.
Be specific, practical and concise."""

BEAT_SUGGESTIONS_SYSTEM = """You are a narrative structure expert specializing in story beat titling.

Beat names should be:
- EVOCATIVE: Capture the essence of the moment
- CONCISE: 2-5 words typically
- SPECIFIC: Unique to this story, not generic
- PURPOSEFUL: Reflect the function (setup, conflict, twist, resolution)

BEAT NAMING CONVENTIONS:
1. Action-Driven: "The Chase Begins", "Final Confrontation"
2. Character-Focused: "Sarah's Betrayal", "Emma's Revelation"
3. Structural: "Inciting Incident", "Midpoint Twist"
4. Thematic: "Truth vs. Loyalty", "The Cost of Ambition"
5. Question-Based: "Will She Stay?", "Who Can Be Trusted?"

Consider the story's tone, genre, and narrative framework when suggesting names."""

BEAT_SUMMARY_SYSTEM = """You write one-line summaries for story beat cards.

Rules:
- One sentence, at most 25 words
- Present tense, active voice
- Say what happens and why it matters to the plot
- No preamble, no quotes, no markdown"""


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def build_scene_mapping_prompt(
    *,
    beat_name: str,
    beat_description: str | None = None,
    beat_type: str | None = None,
    existing_scenes: list[dict[str, Any]] | None = None,
    project_context: dict[str, Any] | None = None,
    max_suggestions: int = DEFAULT_SCENE_SUGGESTIONS,
    include_new_scenes: bool = True,
) -> str:
    lines = ["Analyze this story beat and provide scene mapping suggestions:", "", "=== BEAT TO MAP ===", f'Name: "{beat_name}"']
    if beat_description:
        lines.append(f"Description: {beat_description}")
    if beat_type:
        lines.append(f"Type: {beat_type}")

    if project_context:
        lines += ["", "=== PROJECT CONTEXT ==="]
        for key in ("genre", "theme", "setting"):
            if project_context.get(key):
                lines.append(f"{key.capitalize()}: {project_context[key]}")

    scenes = existing_scenes or []
    if scenes:
        lines += ["", f"=== EXISTING SCENES ({len(scenes)}) ==="]
        for index, scene in enumerate(scenes, 1):
            lines += ["", f"[Scene {index}]", f"ID: {scene.get('id')}", f'Name: "{scene.get("name")}"']
            if scene.get("description"):
                lines.append(f"Description: {scene['description']}")
            if scene.get("location"):
                lines.append(f"Location: {scene['location']}")
            if scene.get("script"):
                lines.append(f"Script Preview: {_clip(scene['script'], SCRIPT_PREVIEW_LENGTH)}")
    else:
        lines += [
            "",
            "=== EXISTING SCENES ===",
            "No existing scenes available. All suggestions will be for new scenes.",
        ]

    lines += ["", "=== OUTPUT INSTRUCTIONS ===", f"Provide {max_suggestions} scene mapping suggestions."]
    if include_new_scenes:
        lines.append("Include both existing scene matches AND new scene suggestions if appropriate.")
    else:
        lines.append("Focus only on mapping to existing scenes.")
    lines += [
        "",
        'Return a JSON object {"suggestions": [...]} where each suggestion has:',
        '"scene_id" (uuid, or null for a new scene), "scene_name", "scene_description",',
        '"scene_script" (optional outline for new scenes), "location", "similarity_score" (0-1),',
        '"confidence_score" (0-1), "reasoning", "is_new_scene" (boolean).',
        "Return ONLY the JSON, no additional text or markdown formatting.",
    ]
    return "\n".join(lines)


def extract_scene_suggestions(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare array or an object with a `suggestions` array."""
    if isinstance(payload, list):
        suggestions = payload
    elif isinstance(payload, dict):
        suggestions = payload.get("suggestions") or []
    else:
        suggestions = []
    return [s for s in suggestions if isinstance(s, dict)]


def _beat_line(beat: dict[str, Any], limit: int, sep: str) -> str:
    line = f"- {beat.get('name', '')}"
    if beat.get("description"):
        line += f"{sep}{_clip(beat['description'], limit)}"
    return line


def build_beat_suggestions_prompt(
    *,
    partial_name: str = "",
    project_title: str = "",
    project_description: str = "",
    act_name: str = "",
    act_description: str = "",
    beat_type: str = "story",
    existing_beats: list[dict[str, Any]] | None = None,
    characters: list[str] | None = None,
    preceding_beats: list[dict[str, Any]] | None = None,
) -> str:
    partial = partial_name.strip()
    lines = [f"Generate {MAX_BEAT_SUGGESTIONS} contextually relevant beat name suggestions.", ""]
    if partial:
        lines += [f'User is typing: "{partial}"', "Build on this input with relevant completions.", ""]

    if project_title:
        lines += ["=== PROJECT CONTEXT ===", f"Project: {project_title}"]
        if project_description:
            lines.append(f"Description: {project_description}")
        lines.append("")
    if act_name:
        lines += ["=== ACT CONTEXT ===", f"Act: {act_name}"]
        if act_description:
            lines.append(f"Description: {act_description}")
        lines.append("")

    lines.append(f"Beat Type: {beat_type}")
    if beat_type == "story":
        lines.append("This is a STORY-LEVEL beat (major structural turning point).")
    else:
        lines.append("This is an ACT-LEVEL beat (scene-specific moment).")
    lines.append("")

    if existing_beats:
        scope = "STORY" if beat_type == "story" else "ACT"
        lines.append(f"=== EXISTING BEATS IN THIS {scope} ===")
        lines += [_beat_line(beat, 80, " - ") for beat in existing_beats[:10]]
        lines += ["", "Avoid duplicating these beat names. Ensure suggestions fill narrative gaps.", ""]
    if preceding_beats:
        lines.append("=== PRECEDING BEATS (Immediate Context) ===")
        lines += [_beat_line(beat, 100, ": ") for beat in preceding_beats[-3:]]
        lines += ["", "Suggestions should follow naturally from these events.", ""]
    if characters:
        lines += ["=== KEY CHARACTERS ===", ", ".join(characters[:8]), "Consider beats involving these characters.", ""]

    lines += [
        "=== OUTPUT FORMAT ===",
        f'Return a JSON object {{"suggestions": [...]}} with {MAX_BEAT_SUGGESTIONS} entries, each with',
        '"name" (2-5 words), "description" (one sentence, 20-40 words) and "reasoning" (10-20 words).',
        "Names must not duplicate existing beats, and suggestions should vary in approach.",
    ]
    if partial:
        lines.append(f'At least 2-3 suggestions should complete or build on "{partial}".')
    lines.append("Return ONLY valid JSON. No additional text.")
    return "\n".join(lines)


def extract_beat_suggestions(payload: Any) -> list[dict[str, str]]:
    """Keep entries that have a name and description, capped at MAX_BEAT_SUGGESTIONS."""
    if isinstance(payload, list):
        suggestions = payload
    elif isinstance(payload, dict) and isinstance(payload.get("suggestions"), list):
        suggestions = payload["suggestions"]
    else:
        raise ValueError("Invalid response format from AI model")
    if not suggestions:
        raise ValueError("No suggestions generated")

    cleaned = [
        {
            "name": str(s["name"]),
            "description": str(s["description"]),
            "reasoning": str(s.get("reasoning") or ""),
        }
        for s in suggestions
        if isinstance(s, dict) and s.get("name") and s.get("description")
    ]
    return cleaned[:MAX_BEAT_SUGGESTIONS]


def build_beat_summary_prompt(
    *,
    beat_name: str,
    beat_description: str | None = None,
    beat_type: str | None = None,
    act_context: str | None = None,
    order: int | None = None,
    preceding_summary: str | None = None,
) -> str:
    lines = [f"Beat: {beat_name}"]
    if beat_type:
        lines.append(f"Type: {beat_type}")
    if order is not None:
        lines.append(f"Position: beat {order + 1}")
    if beat_description:
        lines.append(f"Description: {beat_description}")
    if act_context:
        lines.append(f"Act context: {act_context}")
    if preceding_summary:
        lines.append(f"Previous beat: {preceding_summary}")
    lines += ["", "Write the one-line summary for this beat card."]
    return "\n".join(lines)
