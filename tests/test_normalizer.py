"""Tests for the Response Normalizer."""

import json

import pytest

from redline.core.normalizer import ResponseNormalizer


class TestResponseNormalizer:
    """Test cleaning and canonicalization of raw output."""

    @pytest.fixture
    def normalizer(self) -> ResponseNormalizer:
        return ResponseNormalizer()

    def test_valid_json_passes_through(self, normalizer: ResponseNormalizer) -> None:
        """Well-formed segment arrays should pass through unchanged."""
        raw = '["Hello ", {"original": "teh", "replacement": "the", "reason": "typo"}, " world."]'

        result = normalizer.run(raw)

        assert result.text == raw
        assert result.steps_applied == []

    def test_strips_markdown_fence(self, normalizer: ResponseNormalizer) -> None:
        """Should strip a language-tagged code fence."""
        raw = '```json\n["a", "b"]\n```'

        result = normalizer.run(raw)

        assert result.text == '["a", "b"]'
        assert "stripped_code_fence" in result.steps_applied

    def test_strips_untagged_fence_with_whitespace(self, normalizer: ResponseNormalizer) -> None:
        """Should tolerate whitespace around a plain fence."""
        raw = '\n  ```\n["a"]\n```  \n'

        assert normalizer.normalize(raw) == '["a"]'

    def test_extracts_fenced_block_from_prose(self, normalizer: ResponseNormalizer) -> None:
        """Should pull a fenced answer out of surrounding commentary."""
        raw = 'Here you go:\n```json\n["a"]\n```\nThanks!'

        assert normalizer.normalize(raw) == '["a"]'

    def test_replaces_smart_quotes(self, normalizer: ResponseNormalizer) -> None:
        """Smart quotes become ASCII and nested ones get escaped."""
        raw = '["He said \u201chi\u201d today"]'

        result = normalizer.normalize(raw)

        assert json.loads(result) == ['He said "hi" today']

    def test_replaces_dashes_ellipsis_and_zero_width(self, normalizer: ResponseNormalizer) -> None:
        """Should map typographic punctuation to ASCII."""
        raw = '["a\u2014b\u2013c\u2026d\u200be", "it\u2019s"]'

        assert normalizer.normalize(raw) == '["a--b-c...de", "it\'s"]'

    def test_escapes_nested_quotes_without_double_escaping(self, normalizer: ResponseNormalizer) -> None:
        """Unescaped interior quotes get escaped, escaped ones are kept."""
        raw = '["She called it "great" and \\"fine\\"", "ok"]'

        result = normalizer.normalize(raw)

        assert json.loads(result) == ['She called it "great" and "fine"', "ok"]

    def test_newline_inside_string_becomes_escape(self, normalizer: ResponseNormalizer) -> None:
        """Literal newlines in strings survive as \\n escapes."""
        raw = '["line one\nline two"]'

        result = normalizer.normalize(raw)

        assert result == '["line one\\nline two"]'
        assert json.loads(result) == ["line one\nline two"]

    def test_tab_inside_string_becomes_escape(self, normalizer: ResponseNormalizer) -> None:
        """Literal tabs are invalid in JSON strings and get escaped."""
        assert normalizer.normalize('["a\tb"]') == '["a\\tb"]'

    def test_collapses_pretty_printed_output(self, normalizer: ResponseNormalizer) -> None:
        """Newlines and indentation between tokens are removed."""
        raw = '[\n  "a",\n  {\n    "original": "x",\n    "replacement": "y",\n    "reason": "z"\n  }\n]'

        result = normalizer.normalize(raw)

        assert "\n" not in result
        assert json.loads(result) == ["a", {"original": "x", "replacement": "y", "reason": "z"}]

    def test_adds_missing_brackets(self, normalizer: ResponseNormalizer) -> None:
        """Should wrap a bare list of values in brackets."""
        result = normalizer.run('"a", "b"')

        assert result.text == '["a", "b"]'
        assert "added_array_brackets" in result.steps_applied

    def test_wraps_plain_text(self, normalizer: ResponseNormalizer) -> None:
        """Plain prose becomes a single string segment."""
        result = normalizer.run("just plain text with no brackets")

        assert result.text == '["just plain text with no brackets"]'
        assert "wrapped_raw_text" in result.steps_applied

    def test_wraps_prose_with_quotes(self, normalizer: ResponseNormalizer) -> None:
        """Quotes inside plain prose are escaped by the wrapping."""
        result = normalizer.normalize('She said "hello" to me')

        assert json.loads(result) == ['She said "hello" to me']

    def test_does_not_wrap_prose_with_change_objects(self, normalizer: ResponseNormalizer) -> None:
        """Prose carrying a change object keeps its structure for recovery."""
        raw = 'Sorry:\n{"original": "a", "replacement": "b", "reason": "c"}'

        result = normalizer.normalize(raw)

        assert result == '[Sorry:{"original": "a", "replacement": "b", "reason": "c"}]'

    def test_empty_input(self, normalizer: ResponseNormalizer) -> None:
        """Empty input normalizes to an empty array without raising."""
        assert normalizer.normalize("") == "[]"
        assert normalizer.normalize("```json\n```") == "[]"

    def test_keeps_adjacent_strings_separate(self, normalizer: ResponseNormalizer) -> None:
        """Strings on separate lines stay separate strings."""
        assert normalizer.normalize('"a"\n"b"') == '["a" "b"]'

    def test_adjacent_strings_without_space_stay_separate(self, normalizer: ResponseNormalizer) -> None:
        """A quote pair between two values is a boundary, not interior quotes."""
        assert normalizer.normalize('["Hello ""world"]') == '["Hello ""world"]'

    def test_cleaned_text_keeps_quotes_unescaped(self, normalizer: ResponseNormalizer) -> None:
        """The pre-escaping text is kept alongside the normalized text."""
        raw = 'Note "x" here {"original": "a", "replacement": "b", "reason": "c"}'

        result = normalizer.run(raw)

        assert result.cleaned == raw
        assert "escaped_interior_quotes" in result.steps_applied


IDEMPOTENCE_INPUTS = [
    '["Hello ", {"original":"teh","replacement":"the","reason":"typo"}, " world."]',
    '[ "a", {original:"x",replacement:"y",reason:"z"} ]',
    "just plain text with no brackets",
    '"just plain text with no brackets"',
    '[{"original":"a","replacement":"b","reason":"c"} "orphan text" ]',
    'Intro text\n{"original": "teh", "replacement": "the", "reason": "typo"}\nOutro',
    '```json\n[\n  "He said "hi" to me",\n  {"original": "x", "replacement": "y", "reason": "z"}\n]\n```',
    '["He said \u201chi\u201d \u2014 twice\u2026"]',
    '["abc',
    '"a"\n"b"',
    '["Hello ""world"]',
    '["a\tb", "c\r\nd"]',
    "",
    "She said \"hello\" and left.\nThen she came back.",
]


@pytest.mark.parametrize("raw", IDEMPOTENCE_INPUTS)
def test_normalize_is_idempotent(raw: str) -> None:
    """Normalization reaches a fixed point after one pass."""
    normalizer = ResponseNormalizer()

    once = normalizer.normalize(raw)

    assert normalizer.normalize(once) == once
