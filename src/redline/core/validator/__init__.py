"""Structural Validator - Bracket balance + segment schema enforcement."""

from redline.core.validator.validator import StructuralValidator, ValidationResult

__all__ = ["StructuralValidator", "ValidationResult"]
