"""
redline Parser - Main parsing pipeline.

The parser is responsible for:
1. Rejecting empty or oversized input
2. Normalizing raw model output
3. Validating the segment structure
4. Repairing near-valid JSON
5. Extracting fragments as a last resort
6. ALWAYS counting the attempt in telemetry (success, fallback or failure)

Only the final, unrecoverable outcome raises. Every intermediate stage
reports through a result object and the fallback manager picks the next
step.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from redline.config import Settings, get_settings
from redline.core.errors import ParserError
from redline.core.fallback import (
    FallbackAction,
    FallbackManager,
    RecoveryEstimator,
    RecoveryPrognosis,
)
from redline.core.models import (
    ChangeSegment,
    ErrorType,
    ParseOutcome,
    RecoveryStage,
    Segment,
    TelemetrySnapshot,
)
from redline.core.normalizer import NormalizerResult, ResponseNormalizer
from redline.core.recovery import FragmentExtractor
from redline.core.repair import JSONRepairer
from redline.core.telemetry import ParserTelemetry
from redline.core.validator import StructuralValidator, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class ParseReport:
    """Outcome of a successful parse with recovery details."""

    segments: list[Segment]
    outcome: ParseOutcome
    stage: RecoveryStage
    normalization_steps: list[str] = field(default_factory=list)
    repairs_applied: list[str] = field(default_factory=list)
    prognosis: RecoveryPrognosis | None = None


class ResponseParser:
    """
    Main parsing engine for redline.

    Orchestrates the full pipeline from raw model text to segments.
    Guarantees exactly one telemetry update per parse call.
    """

    def __init__(
        self,
        telemetry: ParserTelemetry | None = None,
        settings: Settings | None = None,
        fallback_manager: FallbackManager | None = None,
    ):
        self.settings = settings or get_settings()
        self.telemetry = telemetry or ParserTelemetry()
        self.fallback = fallback_manager or FallbackManager()
        self.normalizer = ResponseNormalizer()
        self.validator = StructuralValidator(context_chars=self.settings.error_context_chars)
        self.repairer = JSONRepairer()
        self.extractor = FragmentExtractor(self.repairer)
        self.estimator = RecoveryEstimator()

    def parse(self, raw: str) -> list[Segment]:
        """
        Parse a model response into segments.

        Args:
            raw: Complete text response from the model

        Returns:
            Non-empty list of text and change segments

        Raises:
            ParserError: If no segments can be recovered
        """
        return self.parse_detailed(raw).segments

    def parse_detailed(self, raw: str) -> ParseReport:
        """Parse a model response and report how it was recovered."""
        try:
            report = self._run(raw)
        except ParserError:
            self.telemetry.record(ParseOutcome.FAILURE)
            raise
        except Exception as e:
            # Anything else is wrapped so callers only see ParserError
            error = ParserError.unexpected(e, raw, preview_limit=self.settings.raw_preview_chars)
            error.log_details()
            self.telemetry.record(ParseOutcome.FAILURE)
            raise error from e

        self.telemetry.record(report.outcome)
        return report

    def get_telemetry(self) -> TelemetrySnapshot:
        """Snapshot of this parser's counters."""
        return self.telemetry.snapshot()

    def _run(self, raw: str) -> ParseReport:
        """Drive the stage state machine for one response."""
        if raw is None or not raw.strip():
            raise self._fail(
                ParserError(
                    "Parsing error: Response is empty",
                    error_type=ErrorType.EMPTY_RESPONSE,
                    error_detail="Response is empty or whitespace only",
                    suggestion="Try the request again",
                    raw_response=raw,
                )
            )

        if len(raw) > self.settings.max_input_chars:
            raise self._fail(
                ParserError(
                    "Parsing error: Response is too large",
                    error_type=ErrorType.VALIDATION_FAILED,
                    error_detail=f"Response has {len(raw)} characters, limit is {self.settings.max_input_chars}",
                    suggestion="Split the text into smaller requests",
                    raw_response=raw,
                    preview_limit=self.settings.raw_preview_chars,
                )
            )

        # Step 1: Normalize
        normalized = self.normalizer.run(raw)
        logger.debug(f"Normalized response ({len(normalized.text)} chars), steps: {normalized.steps_applied}")

        # Step 2: Validate
        initial = self.validator.validate(normalized.text)
        if initial.is_valid:
            return ParseReport(
                segments=initial.segments,
                outcome=ParseOutcome.SUCCESS,
                stage=RecoveryStage.VALIDATION,
                normalization_steps=normalized.steps_applied,
            )

        logger.info(f"Initial validation failed: {initial.error_type} - {initial.error_detail}")
        prognosis = self.estimator.estimate(raw)
        decision = self.fallback.decide(RecoveryStage.VALIDATION, prognosis)
        logger.debug(decision.reason)

        # Step 3: Repair and re-validate
        repaired = self.repairer.run(normalized.text)
        revalidated = self.validator.validate(repaired.text)
        if revalidated.is_valid:
            logger.info(f"Recovered response via repair: {repaired.repairs_applied}")
            return ParseReport(
                segments=revalidated.segments,
                outcome=ParseOutcome.FALLBACK,
                stage=RecoveryStage.REPAIR,
                normalization_steps=normalized.steps_applied,
                repairs_applied=repaired.repairs_applied,
                prognosis=prognosis,
            )

        # Step 4: Fragment extraction
        decision = self.fallback.decide(RecoveryStage.REPAIR, prognosis)
        logger.debug(decision.reason)
        if decision.action == FallbackAction.EXTRACT_FRAGMENTS:
            fragments = self._extract_fragments(normalized)
            if fragments:
                logger.info(f"Recovered {len(fragments)} segments via fragment extraction")
                return ParseReport(
                    segments=fragments,
                    outcome=ParseOutcome.FALLBACK,
                    stage=RecoveryStage.FRAGMENT_EXTRACTION,
                    normalization_steps=normalized.steps_applied,
                    repairs_applied=repaired.repairs_applied,
                    prognosis=prognosis,
                )
            decision = self.fallback.decide(RecoveryStage.FRAGMENT_EXTRACTION, prognosis)
            logger.debug(decision.reason)

        raise self._fail(
            ParserError.from_validation_result(
                self._most_specific(initial, revalidated),
                raw,
                preview_limit=self.settings.raw_preview_chars,
            )
        )

    def _extract_fragments(self, normalized: NormalizerResult) -> list[Segment]:
        """Extract from the normalized and the unrebalanced text, keeping the richer result."""
        candidates = [self.extractor.extract(normalized.text)]
        if normalized.cleaned and normalized.cleaned != normalized.text:
            # Quote escaping can swallow an object that follows quoted prose
            candidates.append(self.extractor.extract(normalized.cleaned))

        return max(
            candidates,
            key=lambda segments: (sum(isinstance(s, ChangeSegment) for s in segments), len(segments)),
        )

    def _most_specific(self, initial: ValidationResult, revalidated: ValidationResult) -> ValidationResult:
        """Prefer the decoder's position on the repaired text over structural checks."""
        if revalidated.error_type == ErrorType.JSON_SYNTAX_ERROR:
            return revalidated
        return initial

    def _fail(self, error: ParserError) -> ParserError:
        """Log a terminal error before it is raised."""
        error.log_details()
        return error


@lru_cache
def get_parser() -> ResponseParser:
    """Get the cached default parser."""
    return ResponseParser()


def parse(raw: str) -> list[Segment]:
    """Parse a model response with the default parser."""
    return get_parser().parse(raw)


def get_telemetry() -> TelemetrySnapshot:
    """Telemetry snapshot of the default parser."""
    return get_parser().get_telemetry()
