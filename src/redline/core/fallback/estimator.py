"""
Recovery Estimator - Score how salvageable a malformed response is.

Scoring is additive heuristic points, not a probability:
- +20 opening bracket, +20 closing bracket
- +30 recognizable change-object markers
- -15 odd number of unescaped double quotes
- -5 adjacent objects with no comma between them
- +5 bare field names (trivially repairable)
"""

import re
from dataclasses import dataclass, field

from redline.core.models import RecoveryApproach
from redline.core.scanner import CharClass, Scanner


@dataclass
class RecoveryPrognosis:
    """Recoverability estimate for a response."""

    recoverability_score: int = 0
    identified_issues: list[str] = field(default_factory=list)
    recommended_approach: RecoveryApproach = RecoveryApproach.RAW_TEXT_FALLBACK


class RecoveryEstimator:
    """Estimate the best recovery strategy for malformed text."""

    REPAIR_THRESHOLD = 50
    FRAGMENT_THRESHOLD = 20

    QUOTED_ORIGINAL = '"original"'
    BARE_FIELD_PATTERN = re.compile(r'(?<!")\b(original|replacement|reason)\s*:')
    ADJACENT_OBJECTS_PATTERN = re.compile(r"\}\s*\{")

    def estimate(self, text: str) -> RecoveryPrognosis:
        """
        Score a response and recommend a recovery approach.

        Args:
            text: Raw or normalized response text

        Returns:
            RecoveryPrognosis with score, issues and recommendation
        """
        prognosis = RecoveryPrognosis()
        stripped = (text or "").strip()

        has_opening_bracket = stripped.startswith("[")
        has_closing_bracket = stripped.endswith("]")
        bare_fields = set(self.BARE_FIELD_PATTERN.findall(stripped))
        has_change_objects = (
            self.QUOTED_ORIGINAL in stripped
            or "original" in bare_fields
            or (
                self._has_field(stripped, "replacement", bare_fields)
                and self._has_field(stripped, "reason", bare_fields)
            )
        )

        if has_opening_bracket:
            prognosis.recoverability_score += 20
        else:
            prognosis.identified_issues.append("missing_opening_bracket")

        if has_closing_bracket:
            prognosis.recoverability_score += 20
        else:
            prognosis.identified_issues.append("missing_closing_bracket")

        if has_change_objects:
            prognosis.recoverability_score += 30
        else:
            prognosis.identified_issues.append("no_change_objects_detected")

        if self._count_quotes(stripped) % 2 != 0:
            prognosis.identified_issues.append("unbalanced_quotes")
            prognosis.recoverability_score -= 15

        if self.ADJACENT_OBJECTS_PATTERN.search(stripped):
            prognosis.identified_issues.append("missing_comma_between_objects")
            prognosis.recoverability_score -= 5

        if bare_fields:
            # Trivially repairable
            prognosis.identified_issues.append("unquoted_property_names")
            prognosis.recoverability_score += 5

        prognosis.recommended_approach = self._recommend(prognosis.recoverability_score)
        return prognosis

    def _count_quotes(self, text: str) -> int:
        """Count string delimiters, skipping escaped quotes."""
        scanner = Scanner()
        delimiters = (CharClass.STRING_OPEN, CharClass.STRING_CLOSE)
        return sum(1 for char in text if scanner.feed(char) in delimiters)

    def _has_field(self, text: str, name: str, bare_fields: set[str]) -> bool:
        """Field key present either quoted or bare."""
        return f'"{name}"' in text or name in bare_fields

    def _recommend(self, score: int) -> RecoveryApproach:
        """Map a score to an approach."""
        if score >= self.REPAIR_THRESHOLD:
            return RecoveryApproach.JSON_REPAIR
        if score >= self.FRAGMENT_THRESHOLD:
            return RecoveryApproach.FRAGMENT_EXTRACTION
        return RecoveryApproach.RAW_TEXT_FALLBACK
