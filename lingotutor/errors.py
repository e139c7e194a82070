"""
Error taxonomy for the tutoring core.

Callers branch on the class, not on the message:
- InputValidationError: malformed input, rejected before any mutation
- NotFoundError: session/profile/learner absent (caller may recreate)
- PreconditionError: state does not allow the operation (caller may skip silently)
- OracleError: recoverable language-model failure with a generic public message
- RateLimitExceededError: too many requests for one key
"""

from __future__ import annotations

from typing import Optional


class TutorError(Exception):
    """Base class for all tutoring-core errors."""


class InputValidationError(TutorError, ValueError):
    """Missing or malformed input reaching the core."""


class NotFoundError(TutorError, LookupError):
    """A learner-scoped entity does not exist."""

    def __init__(self, entity: str, identifier: str):
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class PreconditionError(TutorError):
    """The entity is in a state that does not allow the operation."""


class SessionEndedError(PreconditionError):
    """Messages cannot be added to, or end called on, an ended session."""


class SessionTooShortError(PreconditionError):
    """The session does not have enough messages to be analyzed."""


class SessionBusyError(PreconditionError):
    """Another turn is already in flight for this session."""


class OracleError(TutorError):
    """
    Recoverable failure of the language-model oracle.

    Attributes:
        public_message: Generic, non-leaking message safe to show upstream
    """

    default_public_message = (
        "An error occurred while generating a response. Please try again."
    )

    def __init__(self, message: str, public_message: Optional[str] = None):
        super().__init__(message)
        self.public_message = public_message or self.default_public_message


class OracleTimeoutError(OracleError):
    """The oracle did not finish within the configured wait."""

    default_public_message = "The tutor took too long to respond. Please try again."


class AnalysisParseError(OracleError):
    """The analytical oracle returned no JSON or JSON violating the schema."""

    default_public_message = "Failed to analyze session"


class RateLimitExceededError(TutorError):
    """Too many requests for a key within the current window."""

    def __init__(self, key: str, retry_after: int):
        super().__init__(f"Too many requests for {key}; retry after {retry_after}s")
        self.key = key
        self.retry_after = retry_after
