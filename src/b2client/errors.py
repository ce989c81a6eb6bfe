"""B2 client error types.

Every failed operation surfaces as a typed exception. Errors raised from an
HTTP exchange keep the status code, the B2 error code and the decoded response
body so callers can tell a bad credential from a missing file.
"""

from __future__ import annotations

from typing import Any


class B2Error(Exception):
    """Base exception for B2 API operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status returned by B2, if a response was received.
        code: B2 error code from the response body (e.g. "bad_auth_token").
        response: Decoded response body, or the raw text when it was not JSON.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        response: dict[str, Any] | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.response = response

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.code:
            parts.append(f"code={self.code}")
        return " ".join(parts)


class NotAuthorizedError(B2Error):
    """Raised when an operation runs before a successful authorize()."""

    def __init__(self, message: str = "Client is not authorized; call authorize() first") -> None:
        super().__init__(message)


class B2TransportError(B2Error):
    """Raised when the HTTP exchange itself fails (timeout, connection reset).

    Attributes:
        timed_out: True when the underlying failure was a timeout.
        cause: The transport exception that was raised.
    """

    def __init__(
        self,
        message: str,
        *,
        timed_out: bool = False,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.timed_out = timed_out
        self.cause = cause


class AuthorizationError(B2Error):
    """Raised when account authorization fails or its response is incomplete."""


class UploadAuthorizationError(B2Error):
    """Raised when an upload URL cannot be obtained."""


class UploadError(B2Error):
    """Raised when the upload request fails or returns no fileId."""


class MetadataError(B2Error):
    """Raised when file info cannot be retrieved or has no fileName."""


class DeleteError(B2Error):
    """Raised when a file version delete returns a non-success status."""


class B2ConfigError(Exception):
    """Raised when client configuration values are invalid or missing."""


class InvalidLogLevel(ValueError):
    """Raised when an activity log is constructed with an undefined level."""

    def __init__(self, level: object) -> None:
        super().__init__(f"Invalid activity log level: {level!r}")
        self.level = level


class ActivityLogError(Exception):
    """Raised when an activity log record cannot be written."""
