"""redline - Fault-tolerant parser for LLM edit-suggestion responses."""

__version__ = "0.1.0"

from redline.core import (  # noqa: E402
    ChangeSegment,
    ErrorType,
    ParserError,
    ParserTelemetry,
    Segment,
    TelemetrySnapshot,
    effective_text,
    segments_to_wire,
)
from redline.engine import ParseReport, ResponseParser, get_telemetry, parse  # noqa: E402

__all__ = [
    "ChangeSegment",
    "ErrorType",
    "ParseReport",
    "ParserError",
    "ParserTelemetry",
    "ResponseParser",
    "Segment",
    "TelemetrySnapshot",
    "__version__",
    "effective_text",
    "get_telemetry",
    "parse",
    "segments_to_wire",
]
