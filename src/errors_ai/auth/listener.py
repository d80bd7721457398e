"""Local HTTP listener that receives the browser login callback.

After the user approves the verification code, the Errors.AI dashboard
redirects their browser to ``http://localhost:<port>/callback`` with either
``code``, ``key`` and ``email`` query parameters or a single ``error``
parameter. :class:`CallbackListener` serves exactly one such terminal
request, publishes the resulting
:data:`~errors_ai.auth.outcome.CallbackOutcome` on its
:class:`~errors_ai.auth.completion.CompletionSignal`, and shuts down.

A background thread polls a stdlib :class:`~http.server.ThreadingHTTPServer`
through ``handle_request()``; each accepted connection is served on its own
daemon thread, so a connection that never sends a request cannot hold up
the real callback or the shutdown. Concurrent ``/callback`` requests race
for :meth:`CallbackListener.settle`, which admits exactly one. Requests for
other paths get a 404 and leave the listener running.

See Also:
    :class:`errors_ai.auth.race.DeadlineRace` -- waits on the listener
    with a deadline.
"""

from __future__ import annotations

import enum
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

from errors_ai.auth.completion import CompletionSignal
from errors_ai.auth.outcome import (
    CallbackOutcome,
    CodeMismatch,
    ListenerBindFailure,
    MissingParameters,
    ProviderError,
    Success,
)
from errors_ai.auth.pages import render_outcome_page

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"
DEFAULT_HOST = "127.0.0.1"

_POLL_INTERVAL = 0.025
"""Seconds between stop-flag checks while no request is pending."""

_REQUEST_TIMEOUT = 5.0
"""Socket timeout for one accepted connection."""

_JOIN_TIMEOUT = 1.0
"""Upper bound for the serve loop, or the thread writing the result page, to finish."""


class ListenerState(str, enum.Enum):
    """Lifecycle of a :class:`CallbackListener`. Transitions only move forward."""

    IDLE = "idle"
    LISTENING = "listening"
    CLOSED = "closed"


def evaluate_callback(params: dict[str, list[str]], expected_code: str) -> CallbackOutcome:
    """Classify the query parameters of a ``/callback`` request.

    Checks run in order: provider error, verification code, then the
    presence of ``key`` and ``email``.

    Args:
        params: Query parameters as returned by :func:`urllib.parse.parse_qs`.
        expected_code: The verification code shown to the user.

    Returns:
        The terminal outcome for this request.
    """

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    error = first("error")
    if error:
        return ProviderError(reason=error)
    if first("code") != expected_code:
        return CodeMismatch()
    api_key = first("key")
    email = first("email")
    if not api_key or not email:
        return MissingParameters()
    return Success(api_key=api_key, email=email)


class _CallbackServer(ThreadingHTTPServer):
    """Threaded HTTP server that knows which listener it belongs to."""

    daemon_threads = True
    block_on_close = False

    def __init__(self, address: tuple[str, int], listener: CallbackListener) -> None:
        self.listener = listener
        super().__init__(address, _CallbackHandler)
        self.timeout = _POLL_INTERVAL


class _CallbackHandler(BaseHTTPRequestHandler):
    timeout = _REQUEST_TIMEOUT
    server: _CallbackServer

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != CALLBACK_PATH:
            self._send_not_found()
            return

        listener = self.server.listener
        outcome = evaluate_callback(parse_qs(parsed.query), listener.expected_code)
        # Claim the outcome before writing the page; the deadline may fire at any point.
        if not listener.settle(outcome):
            logger.debug("Ignoring %s after the attempt was resolved", CALLBACK_PATH)
            self._send_not_found()
            return

        status, page = render_outcome_page(outcome)
        try:
            self._send(status, "text/html; charset=utf-8", page)
        finally:
            listener.close()

    def do_POST(self) -> None:
        self._send(405, "text/plain; charset=utf-8", "Method not allowed")

    do_PUT = do_POST
    do_DELETE = do_POST

    def _send_not_found(self) -> None:
        self._send(404, "text/plain; charset=utf-8", "Not found")

    def _send(self, status: int, content_type: str, body: str) -> None:
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("callback listener: " + format, *args)


class CallbackListener:
    """Serve one login callback on a local port.

    The listener binds in :meth:`start`, evaluates ``/callback`` requests on
    a background thread until one of them is terminal, and publishes that
    outcome on :attr:`completion`. :meth:`close` may be called any number
    of times from any thread (a request handler, the deadline, or the
    owning flow); only the first call changes state.

    Args:
        expected_code: Verification code the callback must echo back.
        port: TCP port to bind. ``0`` picks a free ephemeral port.
        host: Interface to bind. Loopback by default.

    Example::

        listener = CallbackListener("ALPHA-1234", port=8888)
        listener.start()
        outcome = listener.completion.wait(timeout=300)
        listener.close()
    """

    def __init__(self, expected_code: str, port: int, host: str = DEFAULT_HOST) -> None:
        self._expected_code = expected_code
        self._address = (host, port)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._state = ListenerState.IDLE
        self._server: Optional[_CallbackServer] = None
        self._thread: Optional[threading.Thread] = None
        self._responder: Optional[threading.Thread] = None
        self.completion: CompletionSignal[CallbackOutcome] = CompletionSignal()

    @property
    def expected_code(self) -> str:
        return self._expected_code

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def port(self) -> int:
        """The bound port once listening, otherwise the requested one."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._address[1]

    @property
    def callback_url(self) -> str:
        return f"http://localhost:{self.port}{CALLBACK_PATH}"

    def start(self) -> None:
        """Bind the port and start serving on a daemon thread.

        Raises:
            OSError: If the port cannot be bound (already in use,
                permission denied). The listener stays ``IDLE``.
            RuntimeError: If the listener was already started or closed.
        """
        with self._lock:
            if self._state is not ListenerState.IDLE:
                raise RuntimeError(f"Cannot start a listener that is {self._state.value}")
            self._server = _CallbackServer(self._address, self)
            self._state = ListenerState.LISTENING
            self._thread = threading.Thread(
                target=self._serve, name="errors-ai-callback", daemon=True
            )
            self._thread.start()
        logger.debug("Callback listener bound on %s:%d", self._address[0], self.port)

    def settle(self, outcome: CallbackOutcome) -> bool:
        """Publish *outcome* if the listener is still waiting for one.

        The calling thread becomes the responder: :meth:`close` waits for
        it so that the result page reaches the browser before the port is
        released.

        Returns:
            ``True`` if *outcome* became the attempt's result, ``False`` if
            the listener is closed or another outcome was published first.
        """
        with self._lock:
            if self._state is not ListenerState.LISTENING:
                return False
            won = self.completion.resolve(outcome)
            if won:
                self._responder = threading.current_thread()
        if won:
            logger.debug("Callback resolved the attempt: %s", outcome.kind.value)
        return won

    def close(self) -> None:
        """Stop serving and release the port. Idempotent and thread-safe.

        Blocks until the serve loop has exited and the listening socket is
        closed. Connections that are still open but idle are abandoned to
        their daemon threads; only the thread writing the result page is
        waited for.
        """
        with self._lock:
            previous = self._state
            self._state = ListenerState.CLOSED
            self._stop.set()
            server, thread, responder = self._server, self._thread, self._responder

        if previous is ListenerState.LISTENING:
            logger.debug("Closing callback listener on port %d", self.port)
        if server is None or thread is None:
            return
        current = threading.current_thread()
        if current is not thread:
            thread.join(_JOIN_TIMEOUT)
        if responder is not None and responder is not current:
            responder.join(_JOIN_TIMEOUT)
        server.server_close()

    def _serve(self) -> None:
        assert self._server is not None
        try:
            while not self._stop.is_set():
                self._server.handle_request()
        except Exception as exc:
            logger.exception("Callback listener stopped unexpectedly")
            with self._lock:
                self._state = ListenerState.CLOSED
                self._stop.set()
            self.completion.resolve(
                ListenerBindFailure(reason=f"callback server stopped unexpectedly: {exc}")
            )
        finally:
            self._server.server_close()
