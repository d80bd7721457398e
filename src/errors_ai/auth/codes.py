"""Human-speakable verification codes for the browser login flow.

A code such as ``FOXTROT-4821`` is shown in the terminal and on the
approval page so the user can check that both belong to the same login
attempt. It is a short-lived, single-use value rather than a credential:
eight words times 9000 numbers is enough to make a stray or replayed
callback fail the comparison.
"""

from __future__ import annotations

import secrets

VERIFICATION_WORDS: tuple[str, ...] = (
    "ALPHA",
    "BRAVO",
    "CHARLIE",
    "DELTA",
    "ECHO",
    "FOXTROT",
    "GOLF",
    "HOTEL",
)

_MIN_NUMBER = 1000
_MAX_NUMBER = 9999


def generate_verification_code() -> str:
    """Return a fresh ``WORD-NNNN`` verification code.

    Returns:
        A code whose word is drawn from :data:`VERIFICATION_WORDS` and whose
        number is in ``[1000, 9999]``.
    """
    word = secrets.choice(VERIFICATION_WORDS)
    number = _MIN_NUMBER + secrets.randbelow(_MAX_NUMBER - _MIN_NUMBER + 1)
    return f"{word}-{number}"
