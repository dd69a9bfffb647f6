"""
Parser errors - Structured diagnostics for unrecoverable responses.

A ParserError is built once, at the point of terminal failure, logged
immediately and then raised. It carries everything the presentation layer
needs for its three display tiers:
- user message (always shown)
- technical details (collapsible)
- debug information (development only)
"""

import logging
from datetime import datetime, timezone
from typing import Any, TYPE_CHECKING

from redline.core.models import ErrorType

if TYPE_CHECKING:
    from redline.core.validator import ValidationResult

logger = logging.getLogger(__name__)

# Cap on the raw response kept for debugging
MAX_RAW_RESPONSE_LENGTH = 1000

USER_MESSAGES: dict[ErrorType, str] = {
    ErrorType.MISSING_OPENING_BRACKET: "The response is missing an opening bracket [",
    ErrorType.MISSING_CLOSING_BRACKET: "The response is missing a closing bracket ]",
    ErrorType.UNBALANCED_BRACKETS: "The response has unbalanced brackets",
    ErrorType.UNCLOSED_STRING: "There is an unclosed string in the response",
    ErrorType.EMPTY_RESPONSE: "The AI returned an empty response",
    ErrorType.EMPTY_ARRAY: "The AI returned no suggestions",
    ErrorType.INVALID_CHANGE_OBJECT: "A change object is missing required fields",
    ErrorType.INVALID_FIELD_TYPE: "A change object has fields of the wrong type",
    ErrorType.NOT_ARRAY: "The response is not a valid array of changes",
    ErrorType.INVALID_SEGMENT_TYPE: "The response contains an item that is neither text nor a change",
    ErrorType.JSON_SYNTAX_ERROR: "The response contains invalid JSON syntax",
    ErrorType.VALIDATION_FAILED: "The response format is invalid",
    ErrorType.UNEXPECTED_ERROR: "An unexpected error occurred while processing the AI response",
}


class ParserError(Exception):
    """Unrecoverable parse failure with positional context."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType | str = ErrorType.UNEXPECTED_ERROR,
        error_detail: str | None = None,
        position: int | None = None,
        context: str | None = None,
        suggestion: str | None = None,
        raw_response: str | None = None,
        preview_limit: int = MAX_RAW_RESPONSE_LENGTH,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.error_detail = error_detail
        self.position = position
        self.context = context
        self.suggestion = suggestion
        self.timestamp = datetime.now(timezone.utc)

        if raw_response and len(raw_response) > preview_limit:
            self.raw_response_preview: str | None = raw_response[:preview_limit] + "... [truncated]"
        else:
            self.raw_response_preview = raw_response or None

    @classmethod
    def from_validation_result(
        cls,
        result: "ValidationResult",
        raw_response: str | None,
        preview_limit: int = MAX_RAW_RESPONSE_LENGTH,
    ) -> "ParserError":
        """Build an error from a failed validation result."""
        detail = result.error_detail or "Invalid response structure"
        return cls(
            f"Parsing error: {detail}",
            error_type=result.error_type or ErrorType.VALIDATION_FAILED,
            error_detail=result.error_detail,
            position=result.position,
            context=result.context,
            suggestion=result.suggestion or "Check the API response format",
            raw_response=raw_response,
            preview_limit=preview_limit,
        )

    @classmethod
    def unexpected(
        cls,
        error: Exception,
        raw_response: str | None,
        preview_limit: int = MAX_RAW_RESPONSE_LENGTH,
    ) -> "ParserError":
        """Wrap an exception the pipeline did not anticipate."""
        return cls(
            f"Unexpected error while parsing response: {error}",
            error_type=ErrorType.UNEXPECTED_ERROR,
            error_detail=f"{type(error).__name__}: {error}",
            raw_response=raw_response,
            preview_limit=preview_limit,
        )

    @property
    def error_type_value(self) -> str:
        """Error type as a plain string."""
        if isinstance(self.error_type, ErrorType):
            return self.error_type.value
        return str(self.error_type)

    def get_user_message(self) -> str:
        """Plain-language message for display in UI."""
        try:
            base_message = USER_MESSAGES.get(ErrorType(self.error_type), self.message)
        except ValueError:
            base_message = self.message

        if self.suggestion:
            base_message += f". {self.suggestion}"

        return base_message

    def technical_details(self) -> str:
        """One-line technical summary for the collapsible tier."""
        return f"{self.error_type_value}: {self.error_detail or self.message}"

    def debug_info(self) -> dict[str, Any]:
        """Development-only debugging payload."""
        return {
            "position": self.position,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "raw_response_preview": self.raw_response_preview,
        }

    def to_display(self, include_debug: bool = False) -> dict[str, Any]:
        """Tiered representation for the presentation layer."""
        display: dict[str, Any] = {
            "error_type": self.error_type_value,
            "user_message": self.get_user_message(),
            "technical_details": self.technical_details(),
            "suggestion": self.suggestion,
        }
        if include_debug:
            display["debug"] = self.debug_info()
        return display

    def log_details(self) -> None:
        """Log detailed error information for debugging."""
        logger.error(f"[ParserError] {self.timestamp.isoformat()} - {self.error_type_value}: {self.message}")

        if self.error_detail:
            logger.error(f"Detail: {self.error_detail}")

        if self.position is not None:
            logger.error(f"Position: {self.position}")

        if self.context:
            logger.error(f'Context: "{self.context}"')

        if self.suggestion:
            logger.error(f"Suggestion: {self.suggestion}")

        if self.raw_response_preview:
            logger.debug(f"Raw Response Preview: {self.raw_response_preview}")
