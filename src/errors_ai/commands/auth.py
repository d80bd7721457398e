"""Auth commands -- log in, log out, and show the current account.

Registered on the root application as ``errors-ai login``,
``errors-ai logout`` and ``errors-ai whoami``.

Typical workflow::

    errors-ai login                  # browser flow on port 8888
    errors-ai login --no-browser     # print the URL instead of opening it
    errors-ai login --api-key sk_live_...
    errors-ai whoami
    errors-ai logout
"""

from __future__ import annotations

from typing import Optional

import typer

from errors_ai.auth import (
    AuthorizationPrompt,
    CredentialStore,
    Credentials,
    authenticate_with_browser,
    mask_api_key,
)
from errors_ai.client import ErrorsAIClient
from errors_ai.config import resolve_login_settings
from errors_ai.exceptions import AuthError, ErrorsAIError, InvalidUsageError
from errors_ai.output import (
    OutputFormat,
    format_response,
    get_output,
    info,
    notice,
    print_fields,
    success,
    suggest,
    warning,
)
from errors_ai.output import error as print_error

API_KEY_PREFIX = "sk_live_"


def login(
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="Use this API key instead of the browser flow."
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Don't open a browser automatically."
    ),
    port: Optional[int] = typer.Option(
        None, "--port", min=1, max=65535, help="Local port for the login callback [default: 8888]."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Errors.AI service URL [default: https://errors.ai]."
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", min=1, help="How long to wait for approval [default: 300000]."
    ),
) -> None:
    """Authenticate with Errors.AI.

    Without ``--api-key``, shows a verification code, opens the approval
    page in the browser, and waits on a local port for the dashboard to
    send the issued API key back. The key is then stored in the
    credential file.

    Raises:
        typer.Exit: With the failing error's exit code (3 for a rejected
            login, 124 when nobody approved the code in time).
    """
    try:
        settings = resolve_login_settings(
            cli_base_url=base_url,
            cli_port=port,
            cli_timeout_ms=timeout_ms,
            cli_no_browser=no_browser,
        )
        store = CredentialStore()
        if api_key is not None:
            credentials = _login_with_api_key(api_key, settings.base_url)
        else:
            info("Authenticating with Errors.AI...")
            result = authenticate_with_browser(
                base_url=settings.base_url,
                port=settings.port,
                timeout_ms=settings.timeout_ms,
                no_browser=settings.no_browser,
                on_prompt=_show_prompt,
            )
            credentials = Credentials(api_key=result.api_key, email=result.email)
        store.save(credentials)
    except ErrorsAIError as exc:
        print_error(f"Login failed: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    success("Authentication successful!")
    info(f"Logged in as: {credentials.email}")
    info(f"API key saved to: {store.path}")
    suggest("Try: errors-ai whoami")


def _show_prompt(prompt: AuthorizationPrompt) -> None:
    """Tell the user where to approve the login while the listener waits."""
    request = prompt.request
    if prompt.browser_opened:
        notice(f"Opening browser to: {request.authorization_url}")
    elif request.no_browser:
        notice(f"Visit this URL to authenticate:\n{request.authorization_url}")
    else:
        warning("Could not open browser automatically.")
        notice(f"Please visit: {request.authorization_url}")
    notice(f"Verification code: {request.verification_code}")
    info("Waiting for authentication...")


def _login_with_api_key(api_key: str, base_url: str) -> Credentials:
    """Validate a manually supplied key against the API."""
    if not api_key.startswith(API_KEY_PREFIX):
        raise InvalidUsageError(
            f'Invalid API key format. API keys should start with "{API_KEY_PREFIX}"'
        )
    try:
        with ErrorsAIClient(api_key=api_key, base_url=base_url) as client:
            user = client.whoami()
    except ErrorsAIError as exc:
        raise AuthError(f"Failed to authenticate with provided API key: {exc}") from exc
    return Credentials(api_key=api_key, email=user.email)


def logout() -> None:
    """Remove stored credentials."""
    store = CredentialStore()
    if not store.exists():
        info("Not logged in.")
        return
    store.clear()
    success(f"Credentials removed from {store.path}")
    suggest("You can log back in with: errors-ai login")


def whoami(
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Errors.AI service URL [default: https://errors.ai]."
    ),
) -> None:
    """Show the currently authenticated account.

    Raises:
        typer.Exit: With the failing error's exit code when the API
            rejects the stored key or cannot be reached.
    """
    credentials = CredentialStore().load()
    if credentials is None:
        info("Not logged in.")
        suggest("Run: errors-ai login")
        return

    try:
        settings = resolve_login_settings(cli_base_url=base_url)
        with ErrorsAIClient(api_key=credentials.api_key, base_url=settings.base_url) as client:
            user = client.whoami()
    except ErrorsAIError as exc:
        print_error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    masked = mask_api_key(credentials.api_key)
    if get_output().format == OutputFormat.JSON:
        record = user.model_dump(mode="json", exclude_none=True)
        record["api_key"] = masked
        format_response(record)
        return

    fields = [("Logged in as", user.email)]
    if user.plan:
        fields.append(("Plan", user.plan))
    fields.append(("API Key", masked))
    if user.analyses_today is not None:
        limit = "unlimited" if user.limit is None else str(user.limit)
        fields.append(("Analyses today", f"{user.analyses_today} / {limit}"))
    if user.member_since:
        fields.append(("Member since", user.member_since))
    print_fields(fields)
