"""Exception hierarchy for errors_ai.

All exceptions inherit from :class:`ErrorsAIError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`errors_ai.exit_codes`.
The top-level error handler in :func:`errors_ai.app.main` catches
``ErrorsAIError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ErrorsAIError (exit 1)
    +-- InvalidUsageError               (exit 2)
    +-- AuthError                       (exit 3)
    |   +-- LoginError                  (exit 3, or 124 on timeout)
    +-- ServerError                     (exit 5)
    |   +-- RateLimitError              (exit 5)
    +-- ConnectionError_                (exit 6)
    +-- ConfigError                     (exit 1)
        +-- InvalidConfigurationError   (exit 2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from errors_ai.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SERVER_ERROR,
    EXIT_TIMEOUT,
)

if TYPE_CHECKING:
    from errors_ai.auth.outcome import CallbackOutcome


class ErrorsAIError(Exception):
    """Base exception for all errors_ai errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`errors_ai.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ErrorsAIError):
    """Raised for invalid CLI arguments (e.g. a malformed ``--api-key``)."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(ErrorsAIError):
    """Raised when authentication fails or the stored API key is rejected."""

    exit_code = EXIT_AUTH_FAILURE


class LoginError(AuthError):
    """Raised when a browser login attempt ends in anything but success.

    The failing :class:`~errors_ai.auth.outcome.CallbackOutcome` is kept on
    :attr:`outcome` so callers can branch on its ``kind`` instead of
    matching on the message text. A timed-out attempt exits with
    :data:`~errors_ai.exit_codes.EXIT_TIMEOUT`.

    Args:
        outcome: The terminal outcome of the attempt.
    """

    def __init__(self, outcome: CallbackOutcome):
        from errors_ai.auth.outcome import OutcomeKind

        exit_code = EXIT_TIMEOUT if outcome.kind is OutcomeKind.TIMEOUT else None
        super().__init__(f"Authentication failed: {outcome.message}", exit_code)
        self.outcome = outcome


class ServerError(ErrorsAIError):
    """Raised when the API returns an HTTP 5xx or an unexpected 4xx error."""

    exit_code = EXIT_SERVER_ERROR


class RateLimitError(ServerError):
    """Raised when the API returns HTTP 429 (rate limit exceeded)."""


class ConnectionError_(ErrorsAIError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(ErrorsAIError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidConfigurationError(ConfigError):
    """Raised when the configured base service URL is not a usable absolute URL."""

    exit_code = EXIT_INVALID_USAGE
