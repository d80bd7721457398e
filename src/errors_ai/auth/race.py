"""Race a running callback listener against a deadline."""

from __future__ import annotations

import logging

from errors_ai.auth.listener import CallbackListener
from errors_ai.auth.outcome import CallbackOutcome, Timeout
from errors_ai.models import DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)


class DeadlineRace:
    """Wait for the first terminal event of a login attempt.

    Two sources can complete an attempt: the listener publishing a callback
    outcome, or *timeout_ms* elapsing. Both write to the listener's
    :class:`~errors_ai.auth.completion.CompletionSignal`, so exactly one of
    them wins. Whatever the winner, the listener is closed and its port
    released before :meth:`run` returns.

    Args:
        listener: A listener that has already been started.
        timeout_ms: Maximum time to wait, in milliseconds.
    """

    def __init__(self, listener: CallbackListener, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        self._listener = listener
        self._timeout_ms = timeout_ms

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    def run(self) -> CallbackOutcome:
        """Block until a callback or the deadline resolves the attempt.

        Returns:
            The callback outcome, or :class:`~errors_ai.auth.outcome.Timeout`.
        """
        signal = self._listener.completion
        try:
            outcome = signal.wait(self._timeout_ms / 1000.0)
            if outcome is None:
                if signal.resolve(Timeout()):
                    logger.debug("Deadline of %d ms elapsed first", self._timeout_ms)
                # A callback may have won between the wait and the resolve.
                outcome = signal.wait(0)
        finally:
            self._listener.close()
        assert outcome is not None
        return outcome
