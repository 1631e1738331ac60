"""Validation error records.

Every check in the engine reports problems as values: a list of
``ValidationError`` entries, each tagged with the record field the caller
should highlight. Nothing here is raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ValidationErrorType(Enum):
    """Types of validation errors."""

    MISSING_FIELD = "missing_field"
    INVALID_TIME = "invalid_time"
    INVALID_DATE = "invalid_date"
    INVALID_VALUE = "invalid_value"
    INVALID_EMAIL = "invalid_email"
    INVALID_STATUS = "invalid_status"
    CLOSE_BEFORE_OPEN = "close_before_open"
    AVAILABILITY_WINDOW_INVERTED = "availability_window_inverted"
    EMPLOYEE_UNAVAILABLE = "employee_unavailable"
    SHIFT_CONFLICT = "shift_conflict"
    UNKNOWN_REFERENCE = "unknown_reference"
    WEEK_BOUNDS_INVALID = "week_bounds_invalid"
    DATE_OUTSIDE_WEEK = "date_outside_week"
    OVERLAPPING_ASSIGNMENTS = "overlapping_assignments"
    OVERNIGHT_PAIR_BROKEN = "overnight_pair_broken"


@dataclass
class ValidationError:
    """A single validation error.

    Attributes:
        error_type: What kind of problem this is.
        field: Record field the problem belongs to (e.g. "startTime",
            "conflict", "availability").
        message: Human-readable message for the presentation layer.
        record_id: Identifier of the offending record, when known.
        details: Extra structured context.
    """

    error_type: ValidationErrorType
    field: str
    message: str
    record_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, str]:
        """The ``{field, message}`` shape consumed by forms."""
        return {"field": self.field, "message": self.message}

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.record_id:
            parts.append(f"{self.record_id}:")
        parts.append(f"{self.field}: {self.message}")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating one or more records."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def extend(self, other: "ValidationResult") -> None:
        """Merge another result into this one."""
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)

    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def to_list(self) -> list[dict[str, str]]:
        return [e.to_dict() for e in self.errors]
