"""Single-resolution completion signal shared by the listener and the timer."""

from __future__ import annotations

import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class CompletionSignal(Generic[T]):
    """A write-once slot that wakes up a waiter when the first value arrives.

    Both sides of a login attempt -- the HTTP handler thread and the
    deadline in the waiting thread -- call :meth:`resolve`. Only the first
    call stores its value and returns ``True``; every later call is a
    no-op that returns ``False``.

    Example::

        signal: CompletionSignal[str] = CompletionSignal()
        assert signal.resolve("first")
        assert not signal.resolve("second")
        assert signal.wait(0) == "first"
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._value: Optional[T] = None

    @property
    def is_resolved(self) -> bool:
        """Whether a value has been stored."""
        return self._event.is_set()

    def resolve(self, value: T) -> bool:
        """Store *value* unless another value was stored first.

        Args:
            value: The candidate result.

        Returns:
            ``True`` if this call won, ``False`` if the signal was already
            resolved.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._value = value
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> Optional[T]:
        """Block until resolved or until *timeout* seconds have passed.

        Args:
            timeout: Maximum seconds to wait. ``None`` waits forever.

        Returns:
            The stored value, or ``None`` if the timeout elapsed first.
        """
        if not self._event.wait(timeout):
            return None
        return self._value
