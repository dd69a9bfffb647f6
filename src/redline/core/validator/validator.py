"""
Structural Validator - Bracket balance + segment schema enforcement.

The validator decides whether normalized text is already a usable
segment sequence:
1. Structure - outer brackets, balanced brackets, closed strings
2. Syntax - the text parses as JSON
3. Schema - every element is a string or a complete change object

Validation is fail-fast: the first defect found is reported.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from redline.core.models import CHANGE_FIELDS, ChangeSegment, ErrorType, Segment
from redline.core.scanner import CharClass, Scanner, context_window


@dataclass
class ValidationResult:
    """Result of validation."""

    is_valid: bool
    error_type: ErrorType | None = None
    error_detail: str | None = None
    position: int | None = None
    context: str | None = None
    suggestion: str | None = None
    segments: list[Segment] = field(default_factory=list)


class StructuralValidator:
    """
    Validate normalized text against the segment contract.

    Enforces:
    - Array wrapped in [ and ]
    - Balanced brackets outside string literals
    - Closed string literals
    - Strings or exactly-three-field change objects as elements
    """

    REQUIRED_CHANGE_FIELDS = CHANGE_FIELDS

    def __init__(self, context_chars: int = 20):
        self.context_chars = context_chars

    def validate(self, text: str) -> ValidationResult:
        """
        Validate a candidate segment document.

        Args:
            text: Normalized (or repaired) response text

        Returns:
            ValidationResult with parsed segments if valid
        """
        trimmed = (text or "").strip()

        if not trimmed:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.EMPTY_RESPONSE,
                error_detail="Response is empty after trimming whitespace",
            )

        structure = self.validate_structure(trimmed)
        if not structure.is_valid:
            return structure

        try:
            parsed = json.loads(trimmed)
        except json.JSONDecodeError as e:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.JSON_SYNTAX_ERROR,
                error_detail=f"JSON parse error: {e.msg} at position {e.pos}",
                position=e.pos,
                context=context_window(trimmed, e.pos, self.context_chars),
                suggestion="Check for syntax errors like missing quotes, commas, or brackets",
            )

        return self.validate_segments(parsed)

    def validate_structure(self, text: str) -> ValidationResult:
        """Check brackets and string closure without a full parse."""
        if not text.startswith("["):
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.MISSING_OPENING_BRACKET,
                error_detail="Response does not start with an opening bracket [",
                position=0,
                context=text[: self.context_chars],
                suggestion="Ensure the response starts with an opening bracket [",
            )

        if not text.endswith("]"):
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.MISSING_CLOSING_BRACKET,
                error_detail="Response does not end with a closing bracket ]",
                position=len(text),
                context=text[-self.context_chars :],
                suggestion="Ensure the response ends with a closing bracket ]",
            )

        scanner = Scanner()
        string_start = 0

        for i, char in enumerate(text):
            char_class = scanner.feed(char)

            if char_class == CharClass.STRING_OPEN:
                string_start = i
            elif char_class == CharClass.CLOSE and scanner.depth < 0:
                return ValidationResult(
                    is_valid=False,
                    error_type=ErrorType.UNBALANCED_BRACKETS,
                    error_detail=f"Found closing bracket {char} without matching opening bracket",
                    position=i,
                    context=context_window(text, i, self.context_chars // 2),
                    suggestion="Check for balanced brackets in the response",
                )

        if scanner.in_string:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.UNCLOSED_STRING,
                error_detail="String starting here is never closed",
                position=string_start,
                context=context_window(text, string_start, self.context_chars),
                suggestion="Ensure every string value ends with a closing quote",
            )

        if scanner.depth > 0:
            # Non-local defect, no single position to report
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.UNBALANCED_BRACKETS,
                error_detail="Found opening bracket without matching closing bracket",
                suggestion="Ensure all opening brackets have matching closing brackets",
            )

        return ValidationResult(is_valid=True)

    def validate_segments(self, parsed: Any) -> ValidationResult:
        """Check that parsed JSON is a non-empty array of valid segments."""
        if not isinstance(parsed, list):
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.NOT_ARRAY,
                error_detail=f"Response parsed successfully but is a {type(parsed).__name__}, not an array",
            )

        if not parsed:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.EMPTY_ARRAY,
                error_detail="Response is an empty array",
            )

        segments: list[Segment] = []
        for index, item in enumerate(parsed):
            if isinstance(item, str):
                segments.append(item)
                continue

            if isinstance(item, dict):
                error = self._validate_change(item, index)
                if error:
                    return error
                segments.append(ChangeSegment(**item))
                continue

            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.INVALID_SEGMENT_TYPE,
                error_detail=f"Array element at index {index} is not a string or change object, got: {type(item).__name__}",
            )

        return ValidationResult(is_valid=True, segments=segments)

    def _validate_change(self, item: dict[str, Any], index: int) -> ValidationResult | None:
        """Validate one change object; None when it is valid."""
        context = json.dumps(item)[: self.context_chars * 5]

        missing = [f for f in self.REQUIRED_CHANGE_FIELDS if item.get(f) is None]
        if missing:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.INVALID_CHANGE_OBJECT,
                error_detail=f"Change object at index {index} is missing required fields: {', '.join(missing)}",
                context=context,
                suggestion="Ensure change objects include all required fields: original, replacement, and reason",
            )

        extra = sorted(set(item) - set(self.REQUIRED_CHANGE_FIELDS))
        if extra:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.INVALID_CHANGE_OBJECT,
                error_detail=f"Change object at index {index} has unexpected fields: {', '.join(extra)}",
                context=context,
                suggestion="Change objects must contain only original, replacement, and reason",
            )

        for name in self.REQUIRED_CHANGE_FIELDS:
            if not isinstance(item[name], str):
                return ValidationResult(
                    is_valid=False,
                    error_type=ErrorType.INVALID_FIELD_TYPE,
                    error_detail=f"The '{name}' field at index {index} must be a string, got: {type(item[name]).__name__}",
                    context=context,
                )

        blank = [f for f in self.REQUIRED_CHANGE_FIELDS if not item[f].strip()]
        if blank:
            return ValidationResult(
                is_valid=False,
                error_type=ErrorType.INVALID_CHANGE_OBJECT,
                error_detail=f"Change object at index {index} has blank required fields: {', '.join(blank)}",
                context=context,
                suggestion="Ensure change objects include all required fields: original, replacement, and reason",
            )

        return None
