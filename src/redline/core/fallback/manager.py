"""
Fallback Manager - Deterministic stage-to-stage recovery policy.

Implements the locked recovery order:
- validation failure → always attempt repair
- repair failure → fragment extraction, unless the response scores
  too low to be worth it
- fragment extraction yields nothing → fail

The policy never loops back: every parse runs each stage at most once.
"""

from dataclasses import dataclass
from enum import Enum

from redline.core.fallback.estimator import RecoveryPrognosis
from redline.core.models import RecoveryApproach, RecoveryStage


class FallbackAction(str, Enum):
    """What the fallback manager recommends."""

    REPAIR = "REPAIR"  # Rewrite and re-validate
    EXTRACT_FRAGMENTS = "EXTRACT_FRAGMENTS"  # Salvage standalone segments
    FAIL = "FAIL"  # No more options


@dataclass
class FallbackDecision:
    """Decision from fallback manager."""

    action: FallbackAction
    reason: str


class FallbackManager:
    """Decide the next recovery step after a stage fails."""

    def decide(self, failed_stage: RecoveryStage, prognosis: RecoveryPrognosis) -> FallbackDecision:
        """
        Decide what to do after a stage failure.

        Args:
            failed_stage: Stage that just failed to produce segments
            prognosis: Recoverability estimate for the response

        Returns:
            FallbackDecision with recommended action
        """
        if failed_stage == RecoveryStage.VALIDATION:
            # Always attempted, whatever the score
            return FallbackDecision(
                action=FallbackAction.REPAIR,
                reason=f"Validation failed, attempting repair (score {prognosis.recoverability_score})",
            )

        if failed_stage == RecoveryStage.REPAIR:
            if prognosis.recommended_approach == RecoveryApproach.RAW_TEXT_FALLBACK:
                return FallbackDecision(
                    action=FallbackAction.FAIL,
                    reason=f"Score {prognosis.recoverability_score} too low for fragment extraction",
                )
            return FallbackDecision(
                action=FallbackAction.EXTRACT_FRAGMENTS,
                reason=f"Repair failed, extracting fragments (score {prognosis.recoverability_score})",
            )

        return FallbackDecision(
            action=FallbackAction.FAIL,
            reason="No recoverable fragments found",
        )
