"""Persistent storage for the Errors.AI API key.

Stores the key obtained by ``errors-ai login`` in
``~/.local/share/errors-ai/credentials.json`` (XDG) or the platform
equivalent. Files are written atomically via
:func:`~errors_ai.config.atomic_write` with ``0o600`` permissions so that
the key is never world-readable, even momentarily.

See Also:
    :mod:`errors_ai.auth.flow` -- produces the credentials saved here.
    :class:`~errors_ai.client.ErrorsAIClient` -- reads them back.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from errors_ai.config import atomic_write, get_data_dir

_CREDENTIALS_FILENAME = "credentials.json"


class Credentials(BaseModel):
    """The stored API key and the account it belongs to.

    Attributes:
        api_key: The secret ``sk_live_...`` key.
        email: Account email reported at login time.
        created_at: When the key was stored (UTC).
        expires_at: Optional UTC expiry. ``None`` means the key does not
            expire on the client side.
    """

    api_key: str = Field(description="Errors.AI API key")
    email: str = Field(description="Account email the key belongs to")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the credential was stored",
    )
    expires_at: Optional[datetime] = Field(
        default=None, description="When this credential expires (None = never)"
    )


def mask_api_key(api_key: str) -> str:
    """Return *api_key* with everything but its prefix and last 3 chars hidden.

    Example::

        >>> mask_api_key("sk_live_abcdef123456")
        'sk_live_***456'
    """
    if len(api_key) <= 11:
        return "***"
    return f"{api_key[:8]}***{api_key[-3:]}"


class CredentialStore:
    """Read/write the single credential file for this machine.

    All writes are atomic: content is written to a temporary file in the
    same directory, fsynced, then renamed into place.

    Args:
        path: Override the credential file location. Defaults to
            ``<data_dir>/credentials.json``.

    Example::

        store = CredentialStore()
        store.save(Credentials(api_key="sk_live_abc", email="me@example.com"))
        assert store.load().email == "me@example.com"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else get_data_dir() / _CREDENTIALS_FILENAME

    @property
    def path(self) -> Path:
        """The filesystem path of the credential file."""
        return self._path

    def save(self, credentials: Credentials) -> None:
        """Persist *credentials* atomically with ``0o600`` permissions.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        data = credentials.model_dump(mode="json")
        atomic_write(self._path, json.dumps(data, indent=2) + "\n", mode=0o600)

    def load(self) -> Optional[Credentials]:
        """Load the stored credentials.

        Returns:
            The stored :class:`Credentials`, or ``None`` if the file does
            not exist or cannot be parsed.
        """
        if not self._path.is_file():
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
            return Credentials.model_validate(data)
        except (json.JSONDecodeError, ValueError, OSError):
            return None

    def exists(self) -> bool:
        """Whether a credential file is present (it may still be unreadable)."""
        return self._path.is_file()

    def clear(self) -> None:
        """Delete the credential file. A no-op when it is already gone."""
        if self._path.is_file():
            self._path.unlink()
