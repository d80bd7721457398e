"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for errors_ai:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.errors-ai/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~errors_ai.models.GlobalConfig`
  JSON file storing login defaults (base URL, callback port, timeout).
* **Precedence resolution** -- :func:`resolve_login_settings` merges CLI
  flags, environment variables, the config file, and defaults into the
  settings for one login attempt.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from errors_ai.exceptions import ConfigError
from errors_ai.models import GlobalConfig, LoginSettings

_APP_NAME = "errors-ai"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "ERRORS_AI_BASE_URL"
ENV_PORT = "ERRORS_AI_PORT"
ENV_TIMEOUT_MS = "ERRORS_AI_TIMEOUT_MS"
ENV_NO_BROWSER = "ERRORS_AI_NO_BROWSER"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/errors-ai/`` (default ``~/.config/errors-ai/``).
    On macOS/Windows: ``~/.errors-ai/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (credentials, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/errors-ai/`` (default ``~/.local/share/errors-ai/``).
    On macOS/Windows: ``~/.errors-ai/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.

    Args:
        path: Destination file.
        data: Text content to write.
        mode: Optional permission bits applied to the temp file before any
            content is written (e.g. ``0o600`` for secrets).
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in the error path
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~errors_ai.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_int(name: str) -> Optional[int]:
    """Read an integer environment variable, ``None`` when unset or empty."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Environment variable {name} must be an integer, got '{raw}'") from None


def _env_bool(name: str) -> Optional[bool]:
    """Read a boolean environment variable, ``None`` when unset."""
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got '{raw}'")


def resolve_login_settings(
    cli_base_url: Optional[str] = None,
    cli_port: Optional[int] = None,
    cli_timeout_ms: Optional[int] = None,
    cli_no_browser: Optional[bool] = None,
) -> LoginSettings:
    """Resolve the settings for one login attempt.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``ERRORS_AI_BASE_URL``, ``ERRORS_AI_PORT``,
           ``ERRORS_AI_TIMEOUT_MS``, ``ERRORS_AI_NO_BROWSER``)
        3. User config (``~/.config/errors-ai/config.json``)
        4. Defaults

    The base URL is not validated here; the login flow rejects a malformed
    one with :class:`~errors_ai.exceptions.InvalidConfigurationError`
    before any network activity.

    Returns:
        The effective :class:`~errors_ai.models.LoginSettings`.

    Raises:
        ConfigError: If the config file is invalid, an environment variable
            cannot be parsed, or a resolved value is out of range.
    """
    # 4 + 3. Defaults filled in by the model
    global_cfg = load_global_config()
    base_url = global_cfg.base_url
    port = global_cfg.port
    timeout_ms = global_cfg.timeout_ms
    no_browser = global_cfg.no_browser

    # 2. Environment
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        base_url = env_base_url
    env_port = _env_int(ENV_PORT)
    if env_port is not None:
        port = env_port
    env_timeout = _env_int(ENV_TIMEOUT_MS)
    if env_timeout is not None:
        timeout_ms = env_timeout
    env_no_browser = _env_bool(ENV_NO_BROWSER)
    if env_no_browser is not None:
        no_browser = env_no_browser

    # 1. CLI flags (highest precedence)
    if cli_base_url is not None:
        base_url = cli_base_url
    if cli_port is not None:
        port = cli_port
    if cli_timeout_ms is not None:
        timeout_ms = cli_timeout_ms
    if cli_no_browser:
        no_browser = True

    try:
        return LoginSettings(
            base_url=base_url,
            port=port,
            timeout_ms=timeout_ms,
            no_browser=no_browser,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid login settings: {exc}") from exc
