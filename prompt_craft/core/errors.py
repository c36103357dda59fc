"""Error taxonomy for studio operations.

Every error carries a message that can be shown to the user as-is.
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for all studio errors."""

    kind = "studio_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StudioError):
    """Input rejected before reaching the store (e.g. an empty name)."""

    kind = "validation_error"


class ConfirmationRequired(ValidationError):
    """A destructive operation was issued without explicit confirmation."""

    kind = "confirmation_required"


class DuplicateNameError(StudioError):
    """A library or template name collides case-insensitively."""

    kind = "duplicate_name"


class NotFoundError(StudioError):
    """An operation referenced an id or name absent from current state."""

    kind = "not_found"


class InvariantViolation(StudioError):
    """An operation would break a structural invariant."""

    kind = "invariant_violation"


class PersistenceError(StudioError):
    """A store call failed; nothing was applied."""

    kind = "persistence_error"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ExternalServiceError(StudioError):
    """The AI capability is unreachable, unconfigured, or returned unusable output."""

    kind = "external_service_error"
