"""Exception hierarchy for apitransport.

:meth:`Transport.request <apitransport.transport.Transport.request>` never
raises these for expected failures; they surface from
:meth:`Transport.stream <apitransport.transport.Transport.stream>`, from
settings resolution in :mod:`apitransport.config`, and from the CLI.

Subclass hierarchy::

    ApiTransportError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- RequestFailedError  (exit 4; 3 for 401/403, 5 for 5xx, 6 without a response)
    +-- ConfigError         (exit 1)
    +-- BodyTooLargeError   (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from apitransport.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REQUEST_FAILED,
    EXIT_SERVER_ERROR,
)


class ApiTransportError(Exception):
    """Base exception for all apitransport errors.

    Every subclass sets a class-level ``exit_code``; the CLI entry point
    catches this type and exits with that code.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApiTransportError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(ApiTransportError):
    """Raised when an auth session cannot produce credentials."""

    exit_code = EXIT_AUTH_FAILURE


class ConfigError(ApiTransportError):
    """Raised for configuration problems (missing settings, invalid JSON or values)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestFailedError(ApiTransportError):
    """Raised by ``stream`` when no byte stream could be opened.

    Args:
        message: Normalized failure message.
        error: The decoded error body returned by the server, or the
            :class:`~apitransport.models.SDKError` for transport failures.
        status_code: HTTP status of the failed response, ``None`` when the
            request never got a response.
    """

    exit_code = EXIT_REQUEST_FAILED

    def __init__(self, message: str, error: Any = None, status_code: Optional[int] = None):
        exit_code = None
        if status_code is None:
            exit_code = EXIT_CONNECTION_ERROR
        elif status_code in (401, 403):
            exit_code = EXIT_AUTH_FAILURE
        elif status_code >= 500:
            exit_code = EXIT_SERVER_ERROR
        super().__init__(message, exit_code=exit_code)
        self.error = error
        self.status_code = status_code


class BodyTooLargeError(ApiTransportError):
    """Raised when a response body exceeds the ``size`` limit of a request."""
