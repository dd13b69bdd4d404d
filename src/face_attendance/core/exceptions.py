from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateRollNumberError(ValidationError):
    """Raised when a roll number is already taken by another student."""


class NotFoundError(DomainError):
    """Raised when a student or attendance record does not exist."""


class DuplicateAttendanceError(DomainError):
    """Raised when a student already has a record for the given date."""

    def __init__(self, message: str, *, existing: Optional[Any] = None, student: Optional[Any] = None):
        super().__init__(message)
        self.existing = existing
        self.student = student


class NoMatchError(DomainError):
    """Raised when the closest enrolled face is farther than the threshold."""

    def __init__(self, message: str, *, best_distance: float, threshold: float):
        super().__init__(message)
        self.best_distance = best_distance
        self.threshold = threshold


class NoEnrollmentsError(DomainError):
    """Raised when face matching is requested but nobody is enrolled."""


class StorageError(DomainError):
    """Raised when the persistence layer fails; callers may retry."""

    retryable = True
