"""
Repair Engine - Coerce near-valid text into parseable JSON.

Repairs are deliberately narrow. They only touch structure outside string
literals and only know about the three change-object field names, so
legitimate content inside string values is never rewritten.

Rewrites, in order:
1. Ensure outer array brackets
2. Quote bare original/replacement/reason keys
3. Insert missing commas between adjacent values
4. Drop trailing commas before a closing bracket

The output is best-effort and must be re-validated by the caller.
"""

import re
from dataclasses import dataclass, field

from redline.core.models import CHANGE_FIELDS
from redline.core.scanner import WHITESPACE, CharClass, Scanner, next_significant


@dataclass
class RepairResult:
    """Result of a repair pass."""

    text: str
    repairs_applied: list[str] = field(default_factory=list)


class JSONRepairer:
    """Apply targeted structural repairs to a segment document."""

    BARE_KEY_PATTERN = re.compile(r"(" + "|".join(CHANGE_FIELDS) + r")(\s*:)")

    # Outside a string, a bare key can only follow one of these
    KEY_PREDECESSORS = '{,"'

    def repair(self, text: str) -> str:
        """Return the repaired text."""
        return self.run(text).text

    def run(self, text: str) -> RepairResult:
        """
        Apply every repair in sequence.

        Args:
            text: Normalized text that failed validation

        Returns:
            RepairResult with the rewritten text and the repairs that changed it
        """
        repairs: list[str] = []
        result = text

        for name, rewrite in (
            ("added_array_brackets", self._ensure_brackets),
            ("quoted_keys", self.quote_known_keys),
            ("inserted_missing_commas", self._insert_missing_commas),
            ("removed_trailing_commas", self._remove_trailing_commas),
        ):
            rewritten = rewrite(result)
            if rewritten != result:
                repairs.append(name)
                result = rewritten

        return RepairResult(text=result, repairs_applied=repairs)

    def _ensure_brackets(self, text: str) -> str:
        """Wrap in array brackets where missing."""
        repaired = text.strip()
        if not repaired.startswith("["):
            repaired = "[" + repaired
        if not repaired.endswith("]"):
            repaired = repaired + "]"
        return repaired

    def quote_known_keys(self, text: str) -> str:
        """Quote the known field names when they appear as bare identifiers."""
        out: list[str] = []
        scanner = Scanner()
        last_significant = ""
        i = 0

        while i < len(text):
            char = text[i]

            at_key_position = (
                not scanner.in_string
                and last_significant != ""
                and last_significant in self.KEY_PREDECESSORS
            )
            if at_key_position:
                match = self.BARE_KEY_PATTERN.match(text, i)
                if match:
                    out.append(f'"{match.group(1)}"{match.group(2)}')
                    last_significant = ":"
                    i = match.end()
                    continue

            scanner.feed(char)
            out.append(char)
            if char not in WHITESPACE:
                last_significant = char
            i += 1

        return "".join(out)

    def _insert_missing_commas(self, text: str) -> str:
        """Separate a closed value from a following object or string."""
        out: list[str] = []
        scanner = Scanner()

        for i, char in enumerate(text):
            char_class = scanner.feed(char)
            out.append(char)

            closes_value = char_class == CharClass.STRING_CLOSE or (
                char_class == CharClass.CLOSE and char == "}"
            )
            if closes_value:
                _, nxt = next_significant(text, i + 1)
                if nxt in ("{", '"'):
                    out.append(",")

        return "".join(out)

    def _remove_trailing_commas(self, text: str) -> str:
        """Drop a comma that directly precedes a closing bracket."""
        out: list[str] = []
        scanner = Scanner()

        for i, char in enumerate(text):
            char_class = scanner.feed(char)
            if char_class == CharClass.OTHER and char == ",":
                _, nxt = next_significant(text, i + 1)
                if nxt is not None and nxt in "]}":
                    continue
            out.append(char)

        return "".join(out)
