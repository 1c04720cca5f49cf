import logging
from typing import Any

from studio.ai.parsing import parse_json_response

logger = logging.getLogger(__name__)

POSTER_SYSTEM_INSTRUCTION = (
    "You are an expert art director evaluating poster concepts. "
    "Always respond with valid JSON only, no markdown or extra text."
)

DEFAULT_REASONING = "Selected based on overall quality assessment."
SINGLE_POSTER_REASONING = "Only one poster available - selected by default."
PARSE_FAILURE_REASONING = "Selection parsing failed - defaulting to first option."


def build_poster_selection_prompt(project_name: str, project_vision: str, themes: list[str]) -> str:
    themes_section = ""
    if themes:
        numbered = "\n".join(f"{i}. {theme}" for i, theme in enumerate(themes, start=1))
        themes_section = f"KEY THEMES TO CONSIDER:\n{numbered}"

    return f"""You are an expert art director evaluating poster concepts for a creative project.

PROJECT CONTEXT:
- Project: "{project_name}"
- Vision: "{project_vision}"
{themes_section}

You are shown {'multiple' if themes else 'several'} poster variations (labeled 1, 2, 3, 4 from left to right or top to bottom).

EVALUATION CRITERIA:
1. VISUAL IMPACT (0-100): Does the poster immediately grab attention? Strong composition?
2. THEME ADHERENCE (0-100): How well does it capture the project's vision and themes?
3. TECHNICAL QUALITY (0-100): Rendering quality, no artifacts, proper composition
4. MARKETABILITY (0-100): Would this work as a key art piece? Does it sell the concept?

For each poster, score it on these criteria then calculate an overall score.

RESPOND IN THIS EXACT JSON FORMAT (no markdown, no code blocks):
{{
  "selectedIndex": <0-3>,
  "reasoning": "<2-3 sentences explaining why this poster is the best choice>",
  "confidence": <0-100>,
  "posterScores": [
    {{"index": 0, "visual": <score>, "theme": <score>, "technical": <score>, "market": <score>, "overall": <score>}},
    {{"index": 1, "visual": <score>, "theme": <score>, "technical": <score>, "market": <score>, "overall": <score>}},
    {{"index": 2, "visual": <score>, "theme": <score>, "technical": <score>, "market": <score>, "overall": <score>}},
    {{"index": 3, "visual": <score>, "theme": <score>, "technical": <score>, "market": <score>, "overall": <score>}}
  ]
}}

SELECTION LOGIC:
- Select the poster with the highest overall score
- If scores are close (within 5 points), prefer the one with higher theme adherence
- Confidence reflects how clear the winner is (close scores = lower confidence)

Be decisive - there can only be one winner."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_selection_response(text: str, poster_count: int) -> dict[str, Any]:
    try:
        parsed = parse_json_response(text)
        if not isinstance(parsed, dict):
            raise ValueError("selection reply is not a JSON object")
    except ValueError as e:
        logger.error("Failed to parse poster selection response: %s", e)
        return {"selectedIndex": 0, "reasoning": PARSE_FAILURE_REASONING, "confidence": 50}

    selected = parsed.get("selectedIndex")
    if _is_number(selected):
        selected_index = min(max(0, int(selected)), poster_count - 1)
    else:
        selected_index = 0

    confidence = parsed.get("confidence")
    return {
        "selectedIndex": selected_index,
        "reasoning": parsed.get("reasoning") or DEFAULT_REASONING,
        "confidence": confidence if _is_number(confidence) else 70,
    }
