"""
Fragment Recovery Engine - Salvage valid pieces of an unparseable response.

Last-resort recovery. The extractor does not need the document to parse as
a whole: it walks the text once and pulls out every standalone string
literal and every complete change object it can decode on its own. One
stray character in a long response therefore costs only the fragment it
sits in, not every other segment.
"""

import json
import logging

from redline.core.models import CHANGE_FIELDS, ChangeSegment, Segment
from redline.core.repair import JSONRepairer
from redline.core.scanner import CharClass, Scanner

logger = logging.getLogger(__name__)


class FragmentExtractor:
    """Extract independently valid segments from malformed text."""

    def __init__(self, repairer: JSONRepairer | None = None):
        self.repairer = repairer or JSONRepairer()

    def extract(self, text: str) -> list[Segment]:
        """
        Scan text for recoverable segments.

        Args:
            text: Response text that failed parsing and repair

        Returns:
            Recovered segments in order of appearance, possibly empty
        """
        fragments: list[Segment] = []
        skipped = 0
        scanner = Scanner()
        object_depth = 0
        start = 0

        for i, char in enumerate(text or ""):
            char_class = scanner.feed(char)

            if object_depth == 0:
                if char_class == CharClass.STRING_OPEN:
                    start = i
                elif char_class == CharClass.STRING_CLOSE:
                    segment = self._parse_string(text[start : i + 1])
                    if segment is None:
                        skipped += 1
                    else:
                        fragments.append(segment)

            if char_class == CharClass.OPEN and char == "{":
                if object_depth == 0:
                    start = i
                object_depth += 1
            elif char_class == CharClass.CLOSE and char == "}" and object_depth > 0:
                object_depth -= 1
                if object_depth == 0:
                    change = self._parse_change(text[start : i + 1])
                    if change is None:
                        skipped += 1
                    else:
                        fragments.append(change)

        if object_depth > 0:
            # Truncated response: close the last object and try once more
            tail = text[start:].rstrip().rstrip("],").rstrip()
            if scanner.in_string:
                tail += '"'
            change = self._parse_change(tail + "}")
            if change is None:
                skipped += 1
            else:
                fragments.append(change)

        logger.debug(f"Fragment extraction recovered {len(fragments)} segments, skipped {skipped}")
        return fragments

    def _parse_string(self, candidate: str) -> str | None:
        """Decode a string literal; None when invalid or blank."""
        try:
            value = json.loads(candidate, strict=False)
        except (ValueError, RecursionError):
            return None
        if isinstance(value, str) and value.strip():
            return value
        return None

    def _parse_change(self, candidate: str) -> ChangeSegment | None:
        """Decode a change object; None unless all fields are non-blank strings."""
        fixed = self.repairer.quote_known_keys(candidate.strip())
        try:
            value = json.loads(fixed, strict=False)
        except (ValueError, RecursionError):
            return None

        if not isinstance(value, dict):
            return None

        fields = {name: value.get(name) for name in CHANGE_FIELDS}
        if not all(isinstance(v, str) and v.strip() for v in fields.values()):
            return None

        return ChangeSegment(**fields)
