"""
Character scanner shared by every pipeline stage.

The validator, normalizer, repair engine and fragment extractor all need the
same answer to "is this character inside a string literal?". Keeping that
logic in one place means the stages cannot disagree about where a string
starts or ends.
"""

from enum import Enum

WHITESPACE = " \t\r\n"
OPENERS = "[{"
CLOSERS = "]}"


class CharClass(str, Enum):
    """Classification of a single scanned character."""

    STRING_OPEN = "STRING_OPEN"
    STRING_CLOSE = "STRING_CLOSE"
    STRING_BODY = "STRING_BODY"
    ESCAPE = "ESCAPE"  # The backslash itself
    ESCAPED = "ESCAPED"  # The character following a backslash
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    OTHER = "OTHER"


class Scanner:
    """
    Incremental string-aware, escape-aware character classifier.

    Feed characters one at a time. Bracket depth counts both `[` and `{`
    and is only updated outside string literals.
    """

    def __init__(self) -> None:
        self.in_string = False
        self.depth = 0
        self._escape_next = False

    def feed(self, char: str) -> CharClass:
        """Classify one character and advance the scanner state."""
        if self._escape_next:
            self._escape_next = False
            return CharClass.ESCAPED

        if char == "\\":
            self._escape_next = True
            return CharClass.ESCAPE

        if char == '"':
            self.in_string = not self.in_string
            return CharClass.STRING_OPEN if self.in_string else CharClass.STRING_CLOSE

        if self.in_string:
            return CharClass.STRING_BODY

        if char in OPENERS:
            self.depth += 1
            return CharClass.OPEN

        if char in CLOSERS:
            self.depth -= 1
            return CharClass.CLOSE

        return CharClass.OTHER

    def reopen_string(self) -> None:
        """Treat the quote just fed as string content rather than a close."""
        self.in_string = True


def next_significant(text: str, start: int) -> tuple[int, str | None]:
    """Return index and character of the next non-whitespace char at or after start."""
    i = start
    while i < len(text) and text[i] in WHITESPACE:
        i += 1
    if i >= len(text):
        return i, None
    return i, text[i]


def context_window(text: str, position: int, radius: int) -> str:
    """Slice of text around a position, clamped to the text bounds."""
    start = max(0, position - radius)
    end = min(len(text), position + radius)
    return text[start:end]
