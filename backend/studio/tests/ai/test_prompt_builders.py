from studio.ai.prompts.character import (
    MAX_PROMPT_LENGTH,
    build_character_user_prompt,
    build_fallback_prompt,
    truncate_prompt,
)
from studio.ai.prompts.dataset import clamp_count, copy_variations, variation_ids
from studio.ai.prompts.diversity import validate_fingerprint
from studio.ai.prompts.lore import coerce_lore_analysis, extract_lore_tags, summarize_lore
from studio.ai.prompts.names import build_name_user_prompt, extract_suggestions
from studio.ai.prompts.poster import (
    PARSE_FAILURE_REASONING,
    parse_selection_response,
)

APPEARANCE = {
    "gender": "woman",
    "age": "young",
    "skinColor": "olive",
    "bodyType": "athletic",
    "height": "tall",
    "face": {"hairColor": "black", "hairStyle": "braided", "eyeColor": "amber"},
    "clothing": {"style": "leather armor", "color": "deep green"},
}


def test_truncate_prompt():
    assert truncate_prompt("short") == "short"
    long_prompt = "x" * (MAX_PROMPT_LENGTH + 50)
    truncated = truncate_prompt(long_prompt)
    assert len(truncated) == MAX_PROMPT_LENGTH
    assert truncated.endswith("...")


def test_character_user_prompt_includes_selections():
    prompt = build_character_user_prompt(
        APPEARANCE, {"pose": "heroic", "archetype": "warrior"}, character_name="Nyra"
    )
    assert "Character Name: Nyra" in prompt
    assert "- Hair: black braided" in prompt
    assert "Pose: heroic" in prompt
    assert "Archetype: warrior" in prompt


def test_fallback_prompt_is_deterministic():
    prompt = build_fallback_prompt(APPEARANCE, {}, art_style="Watercolor")
    assert prompt.startswith("Watercolor Full-body character illustration,")
    assert "young woman with olive skin, athletic tall build," in prompt
    assert "black braided hair, amber eyes," in prompt
    assert "wearing leather armor in deep green," in prompt
    assert prompt.endswith("highly detailed, professional illustration quality")
    assert build_fallback_prompt(APPEARANCE, {}, art_style="Watercolor") == prompt


def test_dataset_variations():
    assert clamp_count(0) == 1
    assert clamp_count(99) == 20
    assert variation_ids(2, now_ms=5) == ["var-5-0", "var-5-1"]
    copies = copy_variations("A castle", 3)
    assert [v["text"] for v in copies] == ["A castle"] * 3
    assert len({v["id"] for v in copies}) == 3


def test_fingerprint_normalization():
    fingerprint = validate_fingerprint({
        "colorTone": "cool blue",
        "composition": "Close Up",
        "mood": "joyful",
        "lighting": "Sunset",
        "cameraAngle": "LOW ANGLE",
    })
    assert fingerprint == {
        "colorTone": "cool blue",
        "composition": "close-up",
        "subjectFocus": "environment",
        "mood": "dramatic",
        "lighting": "golden-hour",
        "cameraAngle": "low-angle",
        "activity": "subtle",
    }
    assert validate_fingerprint(["not", "an", "object"]) is None


def test_poster_selection_parsing():
    reply = 'Choice: {"selectedIndex": 7, "reasoning": "Bold", "confidence": 88}'
    assert parse_selection_response(reply, 3) == {
        "selectedIndex": 2,
        "reasoning": "Bold",
        "confidence": 88,
    }
    assert parse_selection_response("garbage", 3) == {
        "selectedIndex": 0,
        "reasoning": PARSE_FAILURE_REASONING,
        "confidence": 50,
    }
    assert parse_selection_response('{"selectedIndex": "two"}', 3)["selectedIndex"] == 0


def test_name_suggestions():
    prompt = build_name_user_prompt(
        "character", "Ka", {"genre": "fantasy", "existingNames": [{"name": "Orin"}], "tone": ""}
    )
    assert 'User is typing: "Ka"' in prompt
    assert "- existingNames: Orin" in prompt
    assert "- tone" not in prompt

    suggestions = extract_suggestions([
        {"name": "Kael", "description": "Short and sharp."},
        {"name": "No description"},
        *({"name": f"N{i}", "description": "d"} for i in range(10)),
    ])
    assert len(suggestions) == 5
    assert suggestions[0] == {"name": "Kael", "description": "Short and sharp.", "reasoning": ""}


def test_lore_fallback():
    content = "The guild rose from ruin. Thieves guarded the sewers. Thieves ruled the night."
    summary = summarize_lore(content, "Origins", "history")
    lines = summary.splitlines()
    assert lines[0] == "• History entry: Origins"
    assert lines[1] == "• The guild rose from ruin."
    assert len(lines) == 4

    tags = extract_lore_tags(content, "Origins", "history")
    assert tags[0] == "thieves"
    assert "history" in tags
    assert "origins" in tags
    assert len(tags) <= 10


def test_coerce_lore_analysis():
    summary, tags = coerce_lore_analysis({"summary": ["First", "• Second"], "tags": ["Guild", " "]})
    assert summary == "• First\n• Second"
    assert tags == ["guild"]
