"""Tests for errors_ai.config -- XDG paths, atomic writes, login settings precedence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from errors_ai.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    resolve_login_settings,
    save_global_config,
)
from errors_ai.exceptions import ConfigError
from errors_ai.models import (
    DEFAULT_BASE_URL,
    DEFAULT_CALLBACK_PORT,
    DEFAULT_TIMEOUT_MS,
    GlobalConfig,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("errors_ai.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        result = get_config_dir()
        assert result == tmp_path / "cfg" / "errors-ai"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("errors_ai.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "errors-ai"

    def test_data_dir_xdg_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("errors_ai.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        assert get_data_dir() == tmp_path / "data" / "errors-ai"

    def test_non_xdg_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("errors_ai.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert get_config_dir() == tmp_path / ".errors-ai"
        assert get_data_dir() == tmp_path / ".errors-ai"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        atomic_write(target, '{"a": 1}')
        assert target.read_text() == '{"a": 1}'

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "secret.json"
        atomic_write(target, "x", mode=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_failure_keeps_original_and_cleans_up(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("original")
        with patch("errors_ai.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError, match="boom"):
                atomic_write(target, "new")
        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        cfg = load_global_config()
        assert cfg.base_url == DEFAULT_BASE_URL
        assert cfg.port == DEFAULT_CALLBACK_PORT
        assert cfg.timeout_ms == DEFAULT_TIMEOUT_MS
        assert cfg.no_browser is False

    def test_save_and_load(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(port=9999, no_browser=True))
        cfg = load_global_config()
        assert cfg.port == 9999
        assert cfg.no_browser is True

    def test_unknown_keys_preserved(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"port": 1234, "future": "x"})
        cfg = load_global_config()
        save_global_config(cfg)
        data = json.loads((get_config_dir() / "config.json").read_text())
        assert data["future"] == "x"

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = get_config_dir() / "config.json"
        path.write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_value(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"port": 70000})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Login settings precedence
# ---------------------------------------------------------------------------


class TestResolveLoginSettings:
    def test_defaults(self, isolated_config: Path) -> None:
        settings = resolve_login_settings()
        assert settings.base_url == "https://errors.ai"
        assert settings.port == 8888
        assert settings.timeout_ms == 300_000
        assert settings.no_browser is False

    def test_config_file_layer(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(base_url="http://localhost:3000", port=7000))
        settings = resolve_login_settings()
        assert settings.base_url == "http://localhost:3000"
        assert settings.port == 7000

    def test_env_overrides_config(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(port=7000, timeout_ms=1000))
        monkeypatch.setenv("ERRORS_AI_PORT", "7100")
        monkeypatch.setenv("ERRORS_AI_TIMEOUT_MS", "2000")
        monkeypatch.setenv("ERRORS_AI_BASE_URL", "https://staging.errors.ai")
        monkeypatch.setenv("ERRORS_AI_NO_BROWSER", "yes")
        settings = resolve_login_settings()
        assert settings.port == 7100
        assert settings.timeout_ms == 2000
        assert settings.base_url == "https://staging.errors.ai"
        assert settings.no_browser is True

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORS_AI_PORT", "7100")
        monkeypatch.setenv("ERRORS_AI_BASE_URL", "https://staging.errors.ai")
        settings = resolve_login_settings(
            cli_base_url="http://localhost:3000",
            cli_port=7200,
            cli_timeout_ms=500,
            cli_no_browser=True,
        )
        assert settings.base_url == "http://localhost:3000"
        assert settings.port == 7200
        assert settings.timeout_ms == 500
        assert settings.no_browser is True

    def test_cli_no_browser_false_keeps_lower_layer(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ERRORS_AI_NO_BROWSER", "1")
        assert resolve_login_settings(cli_no_browser=False).no_browser is True

    def test_bad_env_int(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORS_AI_PORT", "eighty")
        with pytest.raises(ConfigError, match="ERRORS_AI_PORT"):
            resolve_login_settings()

    def test_bad_env_bool(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORS_AI_NO_BROWSER", "maybe")
        with pytest.raises(ConfigError, match="ERRORS_AI_NO_BROWSER"):
            resolve_login_settings()

    def test_out_of_range_port(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ERRORS_AI_PORT", "0")
        with pytest.raises(ConfigError, match="Invalid login settings"):
            resolve_login_settings()

    def test_base_url_not_validated_here(self, isolated_config: Path) -> None:
        assert resolve_login_settings(cli_base_url="not a url").base_url == "not a url"
