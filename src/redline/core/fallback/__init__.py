"""Fallback - Recovery estimation and stage-to-stage policy."""

from redline.core.fallback.estimator import RecoveryEstimator, RecoveryPrognosis
from redline.core.fallback.manager import FallbackAction, FallbackDecision, FallbackManager

__all__ = [
    "FallbackAction",
    "FallbackDecision",
    "FallbackManager",
    "RecoveryEstimator",
    "RecoveryPrognosis",
]
