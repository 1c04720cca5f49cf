"""
Normalization of provider output.

Models wrap answers in markdown fences, lead with "Here is the prompt:" chatter or
emit JSON with prose around it. Every adapter funnels its text through these helpers
so the routes only ever see cleaned text or parsed JSON.
"""
import json
import re
from collections.abc import Iterable, Mapping
from typing import Any


_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_WHOLE_FENCE = re.compile(r"^\s*```[\w-]*\s*(.*?)\s*```\s*$", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    if not text:
        return ""
    match = _WHOLE_FENCE.match(text)
    return (match.group(1) if match else text).strip()


_LEAD_IN = re.compile(r"^Here is (?:the|an?|your) (?:image )?prompt[^:]*:\s*", re.IGNORECASE)
_WRAPPING_QUOTES = re.compile(r'^["\'](.*)["\']$', re.DOTALL)


def clean_generated_text(text: str) -> str:
    """Strip fences, surrounding quotes and "Here is the prompt:" lead-ins."""
    cleaned = strip_code_fences(text or "")
    cleaned = _LEAD_IN.sub("", cleaned).strip()
    quoted = _WRAPPING_QUOTES.match(cleaned)
    if quoted:
        cleaned = quoted.group(1).strip()
    return cleaned


def extract_balanced_json_span(text: str) -> str | None:
    """Return the first balanced `{...}` or `[...]` span in `text`, ignoring brackets inside strings."""
    opening = re.search(r"[\[{]", text or "")
    if opening is None:
        return None

    start = opening.start()
    expected: list[str] = []
    in_string = escaped = False
    for pos, ch in enumerate(text[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            expected.append(_CLOSERS[ch])
        elif expected and ch == expected[-1]:
            expected.pop()
            if not expected:
                return text[start:pos + 1]
    return None


def structured_text_candidates(raw_text: str) -> list[str]:
    """Strings worth handing to json.loads, most specific first, without duplicates."""
    text = (raw_text or "").strip()
    if not text:
        return []

    fenced = _FENCED_BLOCK.search(text)
    found = [fenced.group(1) if fenced else None, text, extract_balanced_json_span(text)]

    # Some models emit a bare "json" token before the payload.
    if text[:4].lower() == "json":
        rest = text[4:].lstrip(": \n\r\t")
        found += [rest, extract_balanced_json_span(rest)]

    ordered: dict[str, None] = {}
    for candidate in found:
        if candidate and candidate.strip():
            ordered.setdefault(candidate.strip(), None)
    return list(ordered)


class ResponseParseError(ValueError):
    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def parse_json_response(raw_text: str) -> Any:
    """
    Parse the first JSON value found in a model reply.
    Raises ResponseParseError carrying the raw text when nothing parses.
    """
    errors: list[str] = []
    for candidate in structured_text_candidates(raw_text):
        try:
            return json.loads(candidate, strict=False)
        except json.JSONDecodeError as e:
            errors.append(str(e))
    if not errors:
        raise ResponseParseError("Model returned empty content", raw_text or "")
    raise ResponseParseError(
        "Unable to parse JSON from model response: " + " | ".join(errors[:3]),
        raw_text,
    )


def coerce_enum(
    value: Any,
    allowed: Iterable[str],
    default: str,
    aliases: Mapping[str, str] | None = None,
) -> str:
    """
    Map `value` onto one of `allowed`. Matching is case-insensitive and alias-aware;
    anything unrecognized (including non-strings) becomes `default`.
    """
    if not isinstance(value, str):
        return default
    normalized = value.strip().lower()
    if aliases and normalized in aliases:
        normalized = aliases[normalized]
    return normalized if normalized in set(allowed) else default
