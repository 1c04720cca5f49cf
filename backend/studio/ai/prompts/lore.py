import re
from typing import Any

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "were", "been", "be",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "can", "that", "this", "these", "those",
    "it", "its", "their", "them", "they", "he", "she", "his", "her",
})

MAX_TAGS = 10
BULLET = "•"

LORE_ANALYSIS_SYSTEM = (
    "You are a story archivist. You summarize world-building lore and tag its key themes. "
    "Respond with valid JSON only."
)


def build_lore_analysis_prompt(content: str, title: str, category: str) -> str:
    return (
        f'Analyze this {category} lore entry titled "{title}".\n\n'
        f"{content}\n\n"
        "Return a JSON object with:\n"
        '  "summary": 3-5 bullet points, one per line, each starting with "• "\n'
        f'  "tags": up to {MAX_TAGS} lowercase single-word tags for the key themes, names and places\n'
        "No markdown, no extra text."
    )


def summarize_lore(content: str, title: str, category: str) -> str:
    """Bullet summary built from the first, middle and last sentences."""
    sentences = re.findall(r"[^.!?]+[.!?]+", content) or [content]
    if len(sentences) >= 3:
        picks = [sentences[0], sentences[len(sentences) // 2], sentences[-1]]
    else:
        picks = sentences
    key_points = [s.strip()[:100] for s in picks]
    key_points.insert(0, f"{category[:1].upper()}{category[1:]} entry: {title}")
    return "\n".join(f"{BULLET} {point}" for point in key_points)


def _clean_word(word: str) -> str:
    return re.sub(r"[^a-z0-9]", "", word)


def extract_lore_tags(content: str, title: str, category: str) -> list[str]:
    """Most frequent content words, then the category, then title words; at most 10."""
    frequency: dict[str, int] = {}
    for word in content.lower().split():
        cleaned = _clean_word(word)
        if len(cleaned) > 3 and cleaned not in STOP_WORDS:
            frequency[cleaned] = frequency.get(cleaned, 0) + 1

    # sorted() is stable, so ties keep first-seen order.
    tags = [word for word, _ in sorted(frequency.items(), key=lambda item: -item[1])[:8]]

    if category not in tags:
        tags.append(category)

    for word in title.lower().split():
        cleaned = _clean_word(word)
        if len(cleaned) > 3 and cleaned not in STOP_WORDS and cleaned not in tags:
            tags.append(cleaned)

    return tags[:MAX_TAGS]


def coerce_lore_analysis(payload: Any) -> tuple[str, list[str]]:
    """Validate a model reply of the form {summary, tags}."""
    if not isinstance(payload, dict):
        raise ValueError("lore analysis reply is not a JSON object")
    summary = payload.get("summary")
    if isinstance(summary, list):
        summary = "\n".join(
            item if str(item).startswith(BULLET) else f"{BULLET} {item}" for item in summary
        )
    if not isinstance(summary, str) or not summary.strip():
        raise ValueError("lore analysis reply has no summary")
    tags = payload.get("tags") or []
    if not isinstance(tags, list):
        raise ValueError("lore analysis tags must be a list")
    clean_tags = [str(tag).strip().lower() for tag in tags if str(tag).strip()]
    return summary.strip(), clean_tags[:MAX_TAGS]
