"""Validation module for availability, conflicts and record invariants."""

from rotaengine.validation.availability import is_available
from rotaengine.validation.conflicts import find_conflicts, has_conflict, shift_intervals_on
from rotaengine.validation.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)
from rotaengine.validation.validator import RotaValidator

__all__ = [
    "RotaValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "find_conflicts",
    "has_conflict",
    "is_available",
    "shift_intervals_on",
]
