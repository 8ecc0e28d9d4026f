"""
Error types raised by the Tintern client.

Taxonomy:
- AuthenticationError: backend answered 401; the session is gone.
- ApiError: any other non-2xx answer, carrying the backend message.
- AlreadyAppliedError: the duplicate-application flavour of ApiError.
- TransportError: no response at all (connect failure, timeout).
- EnvelopeError: a list endpoint answered with an unrecognized shape.
- PreconditionError / MutationInProgressError: programming errors the UI
  should have prevented (mutating an unsaved item, double edits).
"""

import re
from typing import Any, Dict, Optional

_ALREADY_APPLIED = re.compile(r"already\s+applied", re.IGNORECASE)


class TinternError(Exception):
    """Base class for every client error."""


class ApiError(TinternError):
    """Backend rejected a request with a non-2xx status other than 401."""

    def __init__(self, status: int, message: str, data: Optional[Dict[str, Any]] = None):
        self.status = status
        self.message = message
        self.data = data or {}
        super().__init__(f"HTTP {status}: {message}")

    @classmethod
    def from_response(cls, status: int, body: Any) -> "ApiError":
        """
        Build an error from a parsed (or unparsable) error body.

        The backend reports `{message: str}`; the proxy routes used
        `{error: str}`. Anything else gets a generic message.
        """
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            data = body
        else:
            message = None
            data = {}
        if not message:
            message = f"Request failed with status {status}"
        return cls(status, str(message), data)

    @property
    def is_already_applied(self) -> bool:
        return self.status == 409 or bool(_ALREADY_APPLIED.search(self.message))


class AlreadyAppliedError(ApiError):
    """The user already has an application for this job."""

    DEFAULT_MESSAGE = (
        "You have already applied to this job! "
        "Check your JobApplications in your profile."
    )

    @classmethod
    def from_api_error(cls, error: ApiError) -> "AlreadyAppliedError":
        return cls(error.status, error.message or cls.DEFAULT_MESSAGE, error.data)


class AuthenticationError(TinternError):
    """Backend answered 401; the session has been cleared."""

    def __init__(self, message: str = "User is not authenticated"):
        self.message = message
        super().__init__(message)


class TransportError(TinternError):
    """Request never produced a response."""

    def __init__(self, method: str, endpoint: str, cause: Exception):
        self.method = method
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"{method} {endpoint} failed: {type(cause).__name__}: {cause}")

    @property
    def message(self) -> str:
        return "Could not reach the server. Please check your connection and try again."


class EnvelopeError(TinternError):
    """List response was neither a bare array nor a known envelope."""

    def __init__(self, keys, payload: Any):
        self.keys = tuple(keys)
        self.payload_type = type(payload).__name__
        super().__init__(
            f"Unrecognized list response ({self.payload_type}); "
            f"expected an array or an object with one of {list(self.keys)}"
        )


class PreconditionError(TinternError):
    """Caller asked for something the current local state forbids."""


class MutationInProgressError(PreconditionError):
    """A mutation for the same item is already in flight."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Item {key} already has a mutation in flight")


class InvalidItemError(TinternError):
    """Locally entered item is missing required fields or is malformed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
