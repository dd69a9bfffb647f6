"""redline Engine - Parsing pipeline orchestration."""

from redline.engine.parser import ParseReport, ResponseParser, get_parser, get_telemetry, parse

__all__ = ["ParseReport", "ResponseParser", "get_parser", "get_telemetry", "parse"]
