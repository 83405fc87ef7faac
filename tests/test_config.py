"""Tests for specsdk.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specsdk.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
)
from specsdk.exceptions import ConfigError
from specsdk.models import GenerationConfig, GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _write_global(root: Path, data: Any) -> None:
    _write_json(root / "config" / "specsdk" / "config.json", data)


@pytest.fixture
def xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Force XDG layout under tmp_path and clear SPECSDK_* variables."""
    monkeypatch.setattr("specsdk.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("SPECSDK_SDK_VERSION", "SPECSDK_APP_VERSION", "SPECSDK_OUTPUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_custom(self, xdg: Path) -> None:
        result = get_config_dir()
        assert result == xdg / "config" / "specsdk"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specsdk.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".config" / "specsdk"

    def test_data_dir_xdg_custom(self, xdg: Path) -> None:
        assert get_data_dir() == xdg / "data" / "specsdk"

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specsdk.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".specsdk"
        assert get_data_dir() == tmp_path / ".specsdk" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        atomic_write(target, "API = {}\n")
        assert target.read_text(encoding="utf-8") == "API = {}\n"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        target.write_text("old content", encoding="utf-8")
        atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "client.py"
        atomic_write(target, "deep write")
        assert target.read_text(encoding="utf-8") == "deep write"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_original_kept_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "client.py"
        target.write_text("previous", encoding="utf-8")
        with patch("specsdk.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                atomic_write(target, "will fail")
        assert target.read_text(encoding="utf-8") == "previous"
        assert [f for f in tmp_path.iterdir() if ".tmp" in f.name] == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, xdg: Path) -> None:
        cfg = load_global_config()
        assert cfg == GlobalConfig()
        assert cfg.generation.sdk_version is None
        assert cfg.output.format == "auto"

    def test_load_values(self, xdg: Path) -> None:
        _write_global(xdg, {
            "generation": {"sdk_version": "1.2.3"},
            "output": {"format": "json"},
        })
        cfg = load_global_config()
        assert cfg.generation.sdk_version == "1.2.3"
        assert cfg.output.format == "json"

    def test_unknown_output_format_rejected(self, xdg: Path) -> None:
        _write_global(xdg, {"output": {"format": "yaml"}})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_json_raises_config_error(self, xdg: Path) -> None:
        path = xdg / "config" / "specsdk" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, xdg: Path) -> None:
        _write_json(
            xdg / "config" / "specsdk" / "config.json",
            {"generation": {"sdk_version": ["not", "a", "string"]}},
        )
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, xdg: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, xdg: Path) -> None:
        _write_json(xdg / "specsdk.json", {"generation": {"output": "client.py"}})
        assert load_project_config() == {"generation": {"output": "client.py"}}

    def test_load_invalid_json_raises_config_error(self, xdg: Path) -> None:
        (xdg / "specsdk.json").write_text("{bad", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_rejected(self, xdg: Path) -> None:
        _write_json(xdg / "specsdk.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """Test the full precedence chain: CLI > env > project > global > defaults."""

    def test_defaults(self, xdg: Path) -> None:
        cfg = resolve_config()
        assert cfg.generation == GenerationConfig()

    def test_global_values(self, xdg: Path) -> None:
        _write_global(xdg, {"generation": {"sdk_version": "1.0.0"}})
        assert resolve_config().generation.sdk_version == "1.0.0"

    def test_project_overrides_global(self, xdg: Path) -> None:
        _write_global(xdg, {"generation": {"sdk_version": "1.0.0", "app_version": "a"}})
        _write_json(xdg / "specsdk.json", {"generation": {"sdk_version": "2.0.0"}})
        generation = resolve_config().generation
        assert generation.sdk_version == "2.0.0"
        assert generation.app_version == "a"

    def test_env_overrides_project(self, xdg: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(xdg / "specsdk.json", {"generation": {"sdk_version": "2.0.0"}})
        monkeypatch.setenv("SPECSDK_SDK_VERSION", "3.0.0")
        monkeypatch.setenv("SPECSDK_OUTPUT", "env_client.py")
        generation = resolve_config().generation
        assert generation.sdk_version == "3.0.0"
        assert generation.output == "env_client.py"

    def test_cli_overrides_env(self, xdg: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECSDK_APP_VERSION", "env")
        generation = resolve_config(cli_app_version="cli").generation
        assert generation.app_version == "cli"

    def test_empty_env_ignored(self, xdg: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(xdg / "specsdk.json", {"generation": {"sdk_version": "2.0.0"}})
        monkeypatch.setenv("SPECSDK_SDK_VERSION", "")
        assert resolve_config().generation.sdk_version == "2.0.0"

    def test_output_format_kept(self, xdg: Path) -> None:
        _write_global(xdg, {"output": {"format": "plain"}})
        assert resolve_config(cli_sdk_version="1.0.0").output.format == "plain"

    def test_invalid_project_generation(self, xdg: Path) -> None:
        _write_json(xdg / "specsdk.json", {"generation": "nope"})
        with pytest.raises(ConfigError, match="must be an object"):
            resolve_config()
