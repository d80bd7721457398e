"""Terminal outcomes of a browser login attempt.

Every attempt ends in exactly one :data:`CallbackOutcome`. Each variant is a
small frozen dataclass with a :class:`OutcomeKind` tag and a human-readable
:attr:`message`, so callers can branch on ``outcome.kind`` (or
``isinstance``) rather than on error strings::

    outcome = BrowserLoginFlow().run()
    if isinstance(outcome, Success):
        store.save(Credentials(api_key=outcome.api_key, email=outcome.email))
    elif outcome.kind is OutcomeKind.TIMEOUT:
        ...
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class OutcomeKind(str, enum.Enum):
    """Discriminator shared by all :data:`CallbackOutcome` variants."""

    SUCCESS = "success"
    PROVIDER_ERROR = "provider_error"
    CODE_MISMATCH = "code_mismatch"
    MISSING_PARAMETERS = "missing_parameters"
    TIMEOUT = "timeout"
    LISTENER_BIND_FAILURE = "listener_bind_failure"


@dataclass(frozen=True)
class Success:
    """The callback carried the expected code, an API key, and an email."""

    api_key: str
    email: str
    kind = OutcomeKind.SUCCESS

    @property
    def ok(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return f"Logged in as {self.email}"


@dataclass(frozen=True)
class ProviderError:
    """The Errors.AI dashboard redirected back with an ``error`` parameter."""

    reason: str
    kind = OutcomeKind.PROVIDER_ERROR

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class CodeMismatch:
    """The callback's ``code`` did not equal the verification code shown."""

    kind = OutcomeKind.CODE_MISMATCH

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return "Invalid verification code"


@dataclass(frozen=True)
class MissingParameters:
    """The code matched but ``key`` or ``email`` was absent or empty."""

    kind = OutcomeKind.MISSING_PARAMETERS

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return "Missing API key or email"


@dataclass(frozen=True)
class Timeout:
    """No terminal callback arrived before the deadline."""

    kind = OutcomeKind.TIMEOUT

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return "Authentication timeout - no response received"


@dataclass(frozen=True)
class ListenerBindFailure:
    """The local callback port could not be bound."""

    reason: str
    kind = OutcomeKind.LISTENER_BIND_FAILURE

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return f"Local callback server failed: {self.reason}"


CallbackOutcome = Union[
    Success,
    ProviderError,
    CodeMismatch,
    MissingParameters,
    Timeout,
    ListenerBindFailure,
]
"""Union of every terminal outcome a login attempt can produce."""


def ensure_success(outcome: CallbackOutcome) -> Success:
    """Return *outcome* if it is a :class:`Success`, otherwise raise.

    Args:
        outcome: The terminal outcome of an attempt.

    Returns:
        The same outcome, narrowed to :class:`Success`.

    Raises:
        LoginError: For every failure variant. The outcome is attached as
            ``exc.outcome``.
    """
    if isinstance(outcome, Success):
        return outcome
    from errors_ai.exceptions import LoginError

    raise LoginError(outcome)
