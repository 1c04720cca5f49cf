import unittest

from studio.ai.parsing import (
    ResponseParseError,
    clean_generated_text,
    coerce_enum,
    extract_balanced_json_span,
    parse_json_response,
    strip_code_fences,
)


class CleanTextTests(unittest.TestCase):
    def test_strip_code_fences(self):
        self.assertEqual(strip_code_fences("```text\nA knight at dusk\n```"), "A knight at dusk")
        self.assertEqual(strip_code_fences("  plain  "), "plain")
        self.assertEqual(strip_code_fences(""), "")

    def test_clean_generated_text_drops_lead_in_and_quotes(self):
        raw = 'Here is the prompt for your character:\n"A weathered ranger, oil painting"'
        self.assertEqual(clean_generated_text(raw), "A weathered ranger, oil painting")


class ParseJsonResponseTests(unittest.TestCase):
    def test_fenced_block(self):
        raw = 'Sure!\n```json\n{"mood": "tense"}\n```\nHope that helps.'
        self.assertEqual(parse_json_response(raw), {"mood": "tense"})

    def test_surrounding_prose(self):
        raw = 'The answer is ["Aria", "Bram"] as requested.'
        self.assertEqual(parse_json_response(raw), ["Aria", "Bram"])

    def test_json_prefix(self):
        self.assertEqual(parse_json_response('json: {"ok": true}'), {"ok": True})

    def test_balanced_span_ignores_braces_in_strings(self):
        text = 'x {"a": "}{", "b": [1, 2]} y'
        self.assertEqual(extract_balanced_json_span(text), '{"a": "}{", "b": [1, 2]}')

    def test_failure_keeps_raw_text(self):
        with self.assertRaises(ResponseParseError) as ctx:
            parse_json_response("no json here")
        self.assertEqual(ctx.exception.raw_text, "no json here")

        with self.assertRaisesRegex(ResponseParseError, "empty"):
            parse_json_response("   ")


class CoerceEnumTests(unittest.TestCase):
    def test_case_and_aliases(self):
        allowed = ("eye-level", "low-angle")
        self.assertEqual(coerce_enum("Low-Angle", allowed, "eye-level"), "low-angle")
        self.assertEqual(
            coerce_enum("low angle", allowed, "eye-level", {"low angle": "low-angle"}),
            "low-angle",
        )

    def test_unknown_values_use_default(self):
        allowed = ("eye-level", "low-angle")
        self.assertEqual(coerce_enum("sideways", allowed, "eye-level"), "eye-level")
        self.assertEqual(coerce_enum(42, allowed, "eye-level"), "eye-level")
