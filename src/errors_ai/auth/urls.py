"""Authorization URL construction."""

from __future__ import annotations

from urllib.parse import urlparse

from errors_ai.exceptions import InvalidConfigurationError

AUTH_PATH = "/cli/auth"


def build_authorization_url(base_url: str, code: str) -> str:
    """Build the dashboard link the user opens to approve *code*.

    Args:
        base_url: Absolute ``http``/``https`` URL of the Errors.AI service,
            e.g. ``"https://errors.ai"``. One trailing slash is tolerated.
        code: The verification code for this attempt.

    Returns:
        ``"{base_url}/cli/auth?code={code}"``.

    Raises:
        InvalidConfigurationError: If *base_url* is not an absolute
            ``http``/``https`` URL with a host.
    """
    parsed = urlparse(base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidConfigurationError(
            f"Invalid base URL '{base_url}': expected an absolute http(s) URL"
        )
    if parsed.query or parsed.fragment:
        raise InvalidConfigurationError(
            f"Invalid base URL '{base_url}': must not contain a query or fragment"
        )
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    return f"{base_url}{AUTH_PATH}?code={code}"
