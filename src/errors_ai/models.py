"""Pydantic models shared across errors_ai modules.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`GlobalConfig`, plus :class:`LoginSettings`, the fully
resolved settings for one login attempt.

**API models** -- parsed from Errors.AI REST responses: :class:`UserInfo`.

The credential file model lives next to its store in
:mod:`errors_ai.auth.credential_store`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_BASE_URL = "https://errors.ai"
"""Production Errors.AI host."""

DEFAULT_CALLBACK_PORT = 8888
"""Local port the login callback listener binds by default."""

DEFAULT_TIMEOUT_MS = 300_000
"""How long ``errors-ai login`` waits for approval (5 minutes)."""


class GlobalConfig(BaseModel):
    """User-level configuration stored in ``<config_dir>/config.json``.

    Every field has a default so a missing file behaves like an empty one.
    Unknown keys are preserved so that newer CLI versions can add settings
    without older versions discarding them on save.
    """

    model_config = ConfigDict(extra="allow")

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Errors.AI service base URL"
    )
    port: int = Field(
        default=DEFAULT_CALLBACK_PORT,
        ge=1,
        le=65535,
        description="Local port for the login callback listener",
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Milliseconds to wait for browser login approval",
    )
    no_browser: bool = Field(
        default=False, description="Never open a browser automatically"
    )


class LoginSettings(BaseModel):
    """Effective settings for a single ``errors-ai login`` invocation.

    Produced by :func:`errors_ai.config.resolve_login_settings` after
    layering CLI flags, environment variables, the config file, and
    defaults.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    port: int = Field(default=DEFAULT_CALLBACK_PORT, ge=1, le=65535)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    no_browser: bool = False


class UserInfo(BaseModel):
    """Account details returned by ``GET /api/whoami``.

    The API speaks camelCase; fields are exposed in snake_case and accept
    either spelling on input.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: str
    plan: Optional[str] = None
    analyses_today: Optional[int] = Field(default=None, alias="analysesToday")
    limit: Optional[int] = None
    member_since: Optional[str] = Field(default=None, alias="memberSince")
