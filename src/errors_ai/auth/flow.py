"""Browser login flow -- verification code, local callback, and deadline.

This module ties the pieces of ``errors-ai login`` together. One call to
:meth:`BrowserLoginFlow.run` is one attempt:

1. Generate a verification code (:mod:`errors_ai.auth.codes`).
2. Build the authorization URL (:mod:`errors_ai.auth.urls`). A malformed
   base URL raises :class:`~errors_ai.exceptions.InvalidConfigurationError`
   before anything touches the network.
3. Bind the :class:`~errors_ai.auth.listener.CallbackListener`. If the port
   is unavailable the attempt ends with
   :class:`~errors_ai.auth.outcome.ListenerBindFailure` -- no browser is
   opened and no URL is shown, because nothing would receive the callback.
4. Open the browser (unless disabled) and hand an
   :class:`AuthorizationPrompt` to the caller for display. A browser that
   fails to open is not fatal; the user can still visit the URL by hand.
5. Race the listener against the deadline (:mod:`errors_ai.auth.race`) and
   return the single :data:`~errors_ai.auth.outcome.CallbackOutcome`.

The flow never retries. Calling :meth:`run` again starts a brand-new
attempt with a fresh verification code.

See Also:
    :func:`errors_ai.commands.auth.login` -- the CLI command built on top.
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from typing import Callable, Optional

from errors_ai.auth.codes import generate_verification_code
from errors_ai.auth.listener import DEFAULT_HOST, CallbackListener
from errors_ai.auth.outcome import CallbackOutcome, ListenerBindFailure, Success, ensure_success
from errors_ai.auth.race import DeadlineRace
from errors_ai.auth.urls import build_authorization_url
from errors_ai.models import DEFAULT_BASE_URL, DEFAULT_CALLBACK_PORT, DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationRequest:
    """Immutable parameters of one login attempt."""

    verification_code: str
    base_url: str
    port: int
    no_browser: bool
    authorization_url: str


@dataclass(frozen=True)
class AuthorizationPrompt:
    """What the caller should show the user while the flow waits.

    Attributes:
        request: The attempt's parameters, including the URL and code.
        browser_opened: Whether the browser was successfully asked to
            open :attr:`AuthorizationRequest.authorization_url`. ``False``
            when opening was disabled or failed.
    """

    request: AuthorizationRequest
    browser_opened: bool


BrowserOpener = Callable[[str], bool]
PromptCallback = Callable[[AuthorizationPrompt], None]


class BrowserLoginFlow:
    """Run one browser login attempt end to end.

    The flow owns its listener and race for the lifetime of :meth:`run`;
    nothing is kept between calls.

    Args:
        base_url: Errors.AI service URL the user approves the code on.
        port: Local port for the callback listener.
        timeout_ms: How long to wait for the callback.
        no_browser: Only display the URL, never open a browser.
        code_generator: Produces the verification code. Injectable for tests.
        browser_opener: Opens a URL, returning ``False`` on failure.
            Defaults to :func:`webbrowser.open`.
        on_prompt: Receives the :class:`AuthorizationPrompt` once the
            listener is bound, so the caller can print the URL and code.
        host: Interface the listener binds.

    Example::

        flow = BrowserLoginFlow(port=8888, on_prompt=lambda p: print(p.request.authorization_url))
        outcome = flow.run()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        port: int = DEFAULT_CALLBACK_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        no_browser: bool = False,
        code_generator: Callable[[], str] = generate_verification_code,
        browser_opener: Optional[BrowserOpener] = None,
        on_prompt: Optional[PromptCallback] = None,
        host: str = DEFAULT_HOST,
    ) -> None:
        self._base_url = base_url
        self._port = port
        self._timeout_ms = timeout_ms
        self._no_browser = no_browser
        self._code_generator = code_generator
        self._browser_opener = browser_opener or webbrowser.open
        self._on_prompt = on_prompt
        self._host = host

    def prepare(self) -> AuthorizationRequest:
        """Generate a code and build the request for a new attempt.

        Raises:
            InvalidConfigurationError: If the base URL is malformed.
        """
        code = self._code_generator()
        url = build_authorization_url(self._base_url, code)
        return AuthorizationRequest(
            verification_code=code,
            base_url=self._base_url,
            port=self._port,
            no_browser=self._no_browser,
            authorization_url=url,
        )

    def run(self) -> CallbackOutcome:
        """Perform one attempt and return its terminal outcome.

        Returns:
            Exactly one :data:`~errors_ai.auth.outcome.CallbackOutcome`.

        Raises:
            InvalidConfigurationError: If the base URL is malformed.
        """
        request = self.prepare()
        listener = CallbackListener(request.verification_code, request.port, host=self._host)
        try:
            listener.start()
        except OSError as exc:
            logger.debug("Could not bind callback port %d: %s", request.port, exc)
            return ListenerBindFailure(reason=str(exc))

        try:
            browser_opened = False
            if not request.no_browser:
                browser_opened = self._open_browser(request.authorization_url)
            if self._on_prompt is not None:
                self._on_prompt(AuthorizationPrompt(request=request, browser_opened=browser_opened))
            return DeadlineRace(listener, self._timeout_ms).run()
        finally:
            listener.close()

    def _open_browser(self, url: str) -> bool:
        try:
            opened = bool(self._browser_opener(url))
        except (webbrowser.Error, OSError) as exc:
            logger.debug("Browser could not be opened: %s", exc)
            return False
        if not opened:
            logger.debug("No runnable browser found for %s", url)
        return opened


def authenticate_with_browser(
    base_url: str = DEFAULT_BASE_URL,
    port: int = DEFAULT_CALLBACK_PORT,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    no_browser: bool = False,
    on_prompt: Optional[PromptCallback] = None,
    browser_opener: Optional[BrowserOpener] = None,
) -> Success:
    """Run a browser login and return the issued credential.

    Thin wrapper over :class:`BrowserLoginFlow` for callers that prefer
    exceptions to outcome values.

    Returns:
        The :class:`~errors_ai.auth.outcome.Success` outcome carrying
        ``api_key`` and ``email``.

    Raises:
        InvalidConfigurationError: If the base URL is malformed.
        LoginError: For every other failure; ``exc.outcome`` holds the
            failing outcome.
    """
    flow = BrowserLoginFlow(
        base_url=base_url,
        port=port,
        timeout_ms=timeout_ms,
        no_browser=no_browser,
        browser_opener=browser_opener,
        on_prompt=on_prompt,
    )
    return ensure_success(flow.run())
