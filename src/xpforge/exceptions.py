# src/xpforge/exceptions.py

"""Custom exception hierarchy for XPForge.

This module provides a structured exception hierarchy that enables:
1. Proper HTTP status code mapping in API endpoints
2. Detailed error context for logging and debugging
3. Clear distinction between caller mistakes, rejected awards and storage faults
"""

from __future__ import annotations


class XPForgeError(Exception):
    """Base exception for all XPForge errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(XPForgeError):
    """Base class for resource not found errors."""

    pass


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user ID has no rank account."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            message=f"User with ID {user_id} not found",
            details={"user_id": user_id},
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(XPForgeError):
    """Base class for validation errors."""

    pass


class InvalidUserError(ValidationError):
    """Raised when an award names a missing, malformed or unregistered user."""

    def __init__(self, user_id: str | None, reason: str) -> None:
        super().__init__(
            message=f"Invalid user {user_id!r}: {reason}",
            details={"user_id": user_id, "reason": reason},
        )


class UnknownActivityError(ValidationError):
    """Raised when an activity code has no reward rule.

    Unregistered codes are never defaulted to some XP amount, otherwise a
    typo in a caller would become an uncapped XP source.
    """

    def __init__(self, activity: str) -> None:
        super().__init__(
            message=f"Unknown activity '{activity}'",
            details={"activity": activity},
        )


# =============================================================================
# Rejected Awards (HTTP 429)
# =============================================================================


class AwardRejectedError(XPForgeError):
    """Base class for awards refused by a business rule."""

    pass


class DailyLimitExceededError(AwardRejectedError):
    """Raised when the per-day award cap for an activity is already used up."""

    def __init__(self, user_id: str, activity: str, daily_limit: int) -> None:
        super().__init__(
            message=f"Daily limit of {daily_limit} reached for activity "
            f"'{activity}'; no XP awarded",
            details={
                "user_id": user_id,
                "activity": activity,
                "daily_limit": daily_limit,
            },
        )


# =============================================================================
# Storage Errors (HTTP 503)
# =============================================================================


class StorageError(XPForgeError):
    """Base class for persistence failures."""

    pass


class StorageUnavailableError(StorageError):
    """Raised when the ledger or XP counter could not be written.

    Safe to retry by the caller, provided the retry carries the same
    reference_id so the ledger can deduplicate it.
    """

    def __init__(self, user_id: str, activity: str, reason: str) -> None:
        super().__init__(
            message=f"Could not record '{activity}' award for user {user_id}",
            details={"user_id": user_id, "activity": activity, "reason": reason},
        )
