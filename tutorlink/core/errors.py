# tutorlink/core/errors.py
# Error taxonomy for the tuition matching workflow
#
# Raised by:
#   - tutorlink.core.workflow      InvalidStateTransition
#   - tutorlink.client.*           everything (mapped from HTTP responses)
#
# Only NetworkError is retryable. Everything else needs a user or admin
# to change something before trying again.

from typing import Any, Optional


class TutorLinkError(Exception):
    """Base class for all workflow and API client errors."""

    retryable = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        payload: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.payload = payload

    def __str__(self) -> str:
        return self.message


class ValidationError(TutorLinkError):
    """Malformed or missing fields. Raised before the network call where possible."""


class AuthenticationError(TutorLinkError):
    """No token available for an endpoint that requires one."""


class AuthorizationError(TutorLinkError):
    """Server answered 401/403 -- shown to the user as "access denied"."""


class NotFoundError(TutorLinkError):
    """Server answered 404."""


class DuplicateApplicationError(TutorLinkError):
    """Tutor already holds a non-withdrawn application for this request."""


class InvalidStateTransition(TutorLinkError):
    """Status change not permitted from the current status."""

    def __init__(
        self,
        message: str,
        current: Optional[str] = None,
        target: Optional[str] = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("code", "invalid_state_transition")
        super().__init__(message, **kwargs)
        self.current = current
        self.target = target


class ServerError(TutorLinkError):
    """Server answered 5xx. Not retried: the mutation may or may not have applied."""


class NetworkError(TutorLinkError):
    """Transport failure, timeout or non-JSON response."""

    retryable = True
