"""
Response Normalizer - Clean raw model output before structural checks.

The normalizer is the first line of defense in the parsing pipeline.
It handles the cosmetic failure modes of LLMs: wrapping the answer in
markdown, typographic punctuation from word processors, unescaped nested
quotes, and pretty-printed multi-line output.

Flow:
1. Strip markdown code fences
2. Normalize typographic punctuation to ASCII
3. Escape interior quotes inside string values
4. Collapse to a single line (newlines inside strings become \\n)
5. Ensure outer array brackets

Normalization never fails and reaches a fixed point after one pass.
"""

import json
import re
from dataclasses import dataclass, field

from redline.core.scanner import WHITESPACE, CharClass, Scanner, next_significant


@dataclass
class NormalizerResult:
    """Result of a normalization pass."""

    text: str
    steps_applied: list[str] = field(default_factory=list)
    # Fences stripped and punctuation translated, quotes untouched
    cleaned: str = ""


class ResponseNormalizer:
    """Clean and canonicalize raw model output."""

    # Fence patterns
    OPENING_FENCE_PATTERN = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
    CLOSING_FENCE_PATTERN = re.compile(r"\s*```\s*$")
    FENCED_BLOCK_PATTERN = re.compile(r"```[\w+-]*\s*([\s\S]*?)```")

    # Field name followed by a colon, quoted or bare
    CHANGE_MARKER_PATTERN = re.compile(r'\b(?:original|replacement|reason)"?\s*:')

    PUNCTUATION_TABLE = str.maketrans(
        {
            "\u2018": "'",  # Left single quote
            "\u2019": "'",  # Right single quote
            "\u201c": '"',  # Left double quote
            "\u201d": '"',  # Right double quote
            "\u2014": "--",  # Em dash
            "\u2013": "-",  # En dash
            "\u2026": "...",  # Ellipsis
            "\u200b": None,  # Zero-width space
            "\u200c": None,  # Zero-width non-joiner
            "\u200d": None,  # Zero-width joiner
            "\ufeff": None,  # Byte order mark
        }
    )

    # A quote followed by one of these closes the string it is in
    STRING_TERMINATORS = ",:]}{"

    def normalize(self, raw: str) -> str:
        """Return the normalized form of raw model output."""
        return self.run(raw).text

    def run(self, raw: str) -> NormalizerResult:
        """
        Normalize raw model output.

        Args:
            raw: Raw string output from model

        Returns:
            NormalizerResult with the cleaned text and the steps that changed it
        """
        steps: list[str] = []
        text = (raw or "").lstrip("\ufeff").strip()

        stripped = self._strip_fences(text)
        if stripped != text:
            steps.append("stripped_code_fence")
        text = stripped

        translated = text.translate(self.PUNCTUATION_TABLE).strip()
        if translated != text:
            steps.append("normalized_punctuation")
        text = translated

        if text and self._is_raw_text(text):
            steps.append("wrapped_raw_text")
            return NormalizerResult(
                text="[" + json.dumps(text, ensure_ascii=False) + "]",
                steps_applied=steps,
                cleaned=text,
            )

        cleaned = text
        rebalanced = self._rebalance_quotes(text)
        if rebalanced != text:
            steps.append("escaped_interior_quotes")
        text = rebalanced

        collapsed = self._collapse_lines(text).strip()
        if collapsed != text:
            steps.append("collapsed_lines")
        text = collapsed

        bracketed = self._ensure_brackets(text)
        if bracketed != text:
            steps.append("added_array_brackets")

        return NormalizerResult(text=bracketed, steps_applied=steps, cleaned=cleaned)

    def _strip_fences(self, text: str) -> str:
        """Remove markdown code fences around the answer."""
        if text.startswith("```"):
            text = self.OPENING_FENCE_PATTERN.sub("", text, count=1)
        elif not text.startswith(("[", "{")):
            # Prose wrapped around a fenced answer
            for match in self.FENCED_BLOCK_PATTERN.finditer(text):
                body = match.group(1).strip()
                if body.startswith(("[", "{")):
                    return body

        return self.CLOSING_FENCE_PATTERN.sub("", text).strip()

    def _is_raw_text(self, text: str) -> bool:
        """Plain prose with no structure worth parsing."""
        if text.startswith(("[", "{", '"')):
            return False
        return not ("{" in text and self.CHANGE_MARKER_PATTERN.search(text))

    def _rebalance_quotes(self, text: str) -> str:
        """Escape unescaped quotes that sit inside a string value."""
        out: list[str] = []
        scanner = Scanner()

        for i, char in enumerate(text):
            char_class = scanner.feed(char)

            if char_class == CharClass.STRING_CLOSE and not self._closes_string(text, i):
                scanner.reopen_string()
                out.append('\\"')
                continue

            out.append(char)

        return "".join(out)

    def _closes_string(self, text: str, index: int) -> bool:
        """Decide whether the quote at index terminates its string."""
        j, nxt = next_significant(text, index + 1)
        if nxt is None or nxt in self.STRING_TERMINATORS:
            return True
        if nxt != '"':
            return False
        # Two adjacent strings missing a separator
        return j > index + 1 or self._string_ends_value(text, j)

    def _string_ends_value(self, text: str, start: int) -> bool:
        """Whether the string opened at start closes in front of a terminator."""
        i = start + 1
        while i < len(text):
            if text[i] == "\\":
                i += 2
                continue
            if text[i] == '"':
                _, nxt = next_significant(text, i + 1)
                return nxt is None or nxt in self.STRING_TERMINATORS
            i += 1
        return False

    def _collapse_lines(self, text: str) -> str:
        """Join lines outside strings; escape control characters inside them."""
        out: list[str] = []
        scanner = Scanner()
        i = 0

        while i < len(text):
            char = text[i]

            if char in "\r\n" and not scanner.in_string:
                while out and out[-1] in " \t":
                    out.pop()
                j, nxt = next_significant(text, i)
                # Adjacent strings keep one separating space
                if out and out[-1] == '"' and nxt == '"':
                    out.append(" ")
                i = j
                continue

            char_class = scanner.feed(char)

            if char_class == CharClass.STRING_BODY and char == "\r":
                if text[i + 1 : i + 2] != "\n":
                    out.append("\\n")
            elif char_class in (CharClass.STRING_BODY, CharClass.ESCAPED) and ord(char) < 0x20:
                out.append(self._escape_control(char, escaped=char_class == CharClass.ESCAPED))
            else:
                out.append(char)
            i += 1

        return "".join(out)

    @staticmethod
    def _escape_control(char: str, escaped: bool) -> str:
        """JSON escape for a control character found inside a string."""
        names = {"\n": "n", "\r": "n", "\t": "t", "\b": "b", "\f": "f"}
        if char in names:
            return names[char] if escaped else "\\" + names[char]
        code = f"u{ord(char):04x}"
        return code if escaped else "\\" + code

    def _ensure_brackets(self, text: str) -> str:
        """Wrap the document in array brackets where missing."""
        if not text.startswith("["):
            text = "[" + text
        if not text.endswith("]"):
            text = text + "]"
        return text
