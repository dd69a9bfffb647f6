"""Core domain models and contracts for redline.

These models define the contracts shared by every pipeline stage:
- Segments (unchanged text and change proposals)
- Error taxonomy used by diagnostics
- Telemetry snapshots
"""

import json
from enum import Enum
from typing import Union

from pydantic import BaseModel, field_validator


# =============================================================================
# Enums
# =============================================================================


class ErrorType(str, Enum):
    """Coarse classification of an unrecoverable parse."""

    EMPTY_RESPONSE = "empty_response"
    MISSING_OPENING_BRACKET = "missing_opening_bracket"
    MISSING_CLOSING_BRACKET = "missing_closing_bracket"
    UNBALANCED_BRACKETS = "unbalanced_brackets"
    UNCLOSED_STRING = "unclosed_string"
    INVALID_CHANGE_OBJECT = "invalid_change_object"
    INVALID_FIELD_TYPE = "invalid_field_type"
    NOT_ARRAY = "not_array"
    EMPTY_ARRAY = "empty_array"
    INVALID_SEGMENT_TYPE = "invalid_segment_type"
    JSON_SYNTAX_ERROR = "json_syntax_error"
    VALIDATION_FAILED = "validation_failed"
    UNEXPECTED_ERROR = "unexpected_error"


class ParseOutcome(str, Enum):
    """How a parse call terminated."""

    SUCCESS = "success"  # Clean parse after normalization
    FALLBACK = "fallback"  # Recovered via repair or fragment extraction
    FAILURE = "failure"


class RecoveryStage(str, Enum):
    """Pipeline stage that produced the segments."""

    VALIDATION = "validation"
    REPAIR = "repair"
    FRAGMENT_EXTRACTION = "fragment_extraction"


class RecoveryApproach(str, Enum):
    """Strategy recommended by the recovery estimator."""

    JSON_REPAIR = "json_repair"
    FRAGMENT_EXTRACTION = "fragment_extraction"
    RAW_TEXT_FALLBACK = "raw_text_fallback"


# =============================================================================
# Segment Models
# =============================================================================

CHANGE_FIELDS = ("original", "replacement", "reason")


class ChangeSegment(BaseModel):
    """A single proposed edit."""

    original: str
    replacement: str
    reason: str

    @field_validator("original", "replacement", "reason")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Change fields must carry text."""
        if not v.strip():
            raise ValueError("change fields must be non-empty strings")
        return v


# Text segments are plain strings
Segment = Union[str, ChangeSegment]


def effective_text(segments: list[Segment]) -> str:
    """Reconstruct the suggested document from a segment sequence."""
    return "".join(
        segment.replacement if isinstance(segment, ChangeSegment) else segment
        for segment in segments
    )


def segment_to_wire(segment: Segment) -> str | dict[str, str]:
    """Convert a segment to its JSON-compatible form."""
    if isinstance(segment, ChangeSegment):
        return segment.model_dump()
    return segment


def segments_to_wire(segments: list[Segment]) -> str:
    """Serialize a segment sequence to the wire format.

    Output is ASCII-escaped so that typographic characters survive a trip
    through the normalizer unchanged.
    """
    return json.dumps([segment_to_wire(s) for s in segments])


# =============================================================================
# Telemetry
# =============================================================================


class TelemetrySnapshot(BaseModel):
    """Point-in-time view of parser counters.

    Rates are percentages formatted to two decimal places.
    """

    total_attempts: int
    success_count: int
    fallback_success_count: int
    failure_count: int
    success_rate: str
    primary_success_rate: str
    fallback_success_rate: str
