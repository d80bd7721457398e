"""Synchronous client for the Errors.AI REST API.

:class:`ErrorsAIClient` wraps :class:`httpx.Client` with bearer-token auth,
a CLI ``User-Agent``, and mapping of HTTP error statuses onto the
:mod:`errors_ai.exceptions` hierarchy. The CLI only needs ``whoami`` -- to
show the current account and to validate a key passed with
``errors-ai login --api-key``.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from errors_ai import __version__
from errors_ai.auth.credential_store import CredentialStore
from errors_ai.exceptions import AuthError, ConnectionError_, RateLimitError, ServerError
from errors_ai.models import DEFAULT_BASE_URL, UserInfo

USER_AGENT = f"errors-ai-cli/{__version__}"
DEFAULT_TIMEOUT = 120.0


class ErrorsAIClient:
    """HTTP client for Errors.AI API calls.

    Must be used as a context manager so that the underlying transport is
    opened and closed properly.

    Args:
        api_key: API key to authenticate with. When ``None`` the key is
            read from the :class:`~errors_ai.auth.credential_store.CredentialStore`.
        base_url: Errors.AI service URL.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests to mock the API).

    Raises:
        AuthError: If no API key was given and none is stored.

    Example::

        with ErrorsAIClient() as client:
            user = client.whoami()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if api_key is None:
            stored = CredentialStore().load()
            api_key = stored.api_key if stored is not None else None
        if not api_key:
            raise AuthError("Not authenticated. Run: errors-ai login")
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> ErrorsAIClient:
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def whoami(self) -> UserInfo:
        """Return the account the API key belongs to (``GET /api/whoami``)."""
        data = self._request("GET", "/api/whoami")
        try:
            return UserInfo.model_validate(data)
        except ValidationError as exc:
            raise ServerError(
                f"Unexpected response from /api/whoami: {exc.error_count()} invalid field(s)"
            ) from exc

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        assert self._client is not None, "Client not initialised -- use as context manager"
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request to {self._base_url} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ConnectionError_(
                "Network error. Please check your internet connection and try again."
            ) from exc
        _map_response_error(response)
        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(f"Invalid JSON in response from {path}") from exc


def _map_response_error(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("error") or detail.get("message") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    if status == 401:
        raise AuthError(
            "Authentication failed. Your API key may be invalid or expired.\n"
            "Run: errors-ai login"
        )
    if status == 403:
        raise AuthError(
            "Access denied. This feature requires a Pro or Team plan.\n"
            "Upgrade at: https://errors.ai/pricing"
        )
    if status == 429:
        raise RateLimitError(
            "Rate limit exceeded. Please try again later or upgrade your plan."
        )
    if status >= 500:
        raise ServerError("Server error. Please try again later or contact support.")
    prefix = f"API error (HTTP {status})"
    raise ServerError(f"{prefix}: {msg}" if msg else prefix)
