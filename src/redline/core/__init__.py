"""redline Core - Parsing pipeline stages and contracts."""

from redline.core.errors import ParserError
from redline.core.models import (
    ChangeSegment,
    ErrorType,
    ParseOutcome,
    RecoveryApproach,
    RecoveryStage,
    Segment,
    TelemetrySnapshot,
    effective_text,
    segments_to_wire,
)
from redline.core.telemetry import ParserTelemetry

__all__ = [
    "ChangeSegment",
    "ErrorType",
    "ParseOutcome",
    "ParserError",
    "ParserTelemetry",
    "RecoveryApproach",
    "RecoveryStage",
    "Segment",
    "TelemetrySnapshot",
    "effective_text",
    "segments_to_wire",
]
