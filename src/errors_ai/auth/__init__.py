"""Browser-based login for errors_ai.

The main entry points are:

- :class:`BrowserLoginFlow` -- runs one login attempt and returns a
  :data:`CallbackOutcome`.
- :func:`authenticate_with_browser` -- the same, but raises
  :class:`~errors_ai.exceptions.LoginError` on anything except success.
- :class:`CredentialStore` -- persists the resulting API key on disk.

Typical usage::

    from errors_ai.auth import CredentialStore, Credentials, authenticate_with_browser

    result = authenticate_with_browser(port=8888)
    CredentialStore().save(Credentials(api_key=result.api_key, email=result.email))
"""

from errors_ai.auth.codes import VERIFICATION_WORDS, generate_verification_code
from errors_ai.auth.completion import CompletionSignal
from errors_ai.auth.credential_store import CredentialStore, Credentials, mask_api_key
from errors_ai.auth.flow import (
    AuthorizationPrompt,
    AuthorizationRequest,
    BrowserLoginFlow,
    authenticate_with_browser,
)
from errors_ai.auth.listener import CallbackListener, ListenerState
from errors_ai.auth.outcome import (
    CallbackOutcome,
    CodeMismatch,
    ListenerBindFailure,
    MissingParameters,
    OutcomeKind,
    ProviderError,
    Success,
    Timeout,
    ensure_success,
)
from errors_ai.auth.race import DeadlineRace
from errors_ai.auth.urls import build_authorization_url

__all__ = [
    "AuthorizationPrompt",
    "AuthorizationRequest",
    "BrowserLoginFlow",
    "CallbackListener",
    "CallbackOutcome",
    "CodeMismatch",
    "CompletionSignal",
    "CredentialStore",
    "Credentials",
    "DeadlineRace",
    "ListenerBindFailure",
    "ListenerState",
    "MissingParameters",
    "OutcomeKind",
    "ProviderError",
    "Success",
    "Timeout",
    "VERIFICATION_WORDS",
    "authenticate_with_browser",
    "build_authorization_url",
    "ensure_success",
    "generate_verification_code",
    "mask_api_key",
]
