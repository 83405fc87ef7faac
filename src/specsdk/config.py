"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specsdk:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specsdk/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single hand-edited :class:`~specsdk.models.GlobalConfig`
  JSON file storing generation defaults and the default output format.
* **Project config** -- An optional ``./specsdk.json`` pinning the SDK
  version, app version or output path of the repository it lives in.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

Generated client modules are written with an atomic temp-file-then-rename
strategy (:func:`atomic_write`) so an interrupted run never leaves a
truncated file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from specsdk.exceptions import ConfigError
from specsdk.models import GenerationConfig, GlobalConfig

_APP_NAME = "specsdk"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specsdk.json"

ENV_SDK_VERSION = "SPECSDK_SDK_VERSION"
ENV_APP_VERSION = "SPECSDK_APP_VERSION"
ENV_OUTPUT = "SPECSDK_OUTPUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specsdk/`` (default ``~/.config/specsdk/``).
    On macOS/Windows: ``~/.specsdk/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specsdk/`` (default ``~/.local/share/specsdk/``).
    On macOS/Windows: ``~/.specsdk/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file and a rename.

    The temporary file is created next to *path* so that ``os.replace`` is
    an atomic rename on POSIX systems. On any failure the temp file is
    removed and the original file, if any, is left untouched.
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
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
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~specsdk.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specsdk.json``.

    Only the ``generation`` object is read by :func:`resolve_config`, e.g.
    ``{"generation": {"sdk_version": "2.1.0", "output": "src/client.py"}}``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_sdk_version: Optional[str] = None,
    cli_app_version: Optional[str] = None,
    cli_output: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_sdk_version``, ``cli_app_version``, ``cli_output``)
        2. Environment variables (``SPECSDK_SDK_VERSION``,
           ``SPECSDK_APP_VERSION``, ``SPECSDK_OUTPUT``)
        3. Project config (``./specsdk.json``)
        4. User config (``~/.config/specsdk/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~specsdk.models.GlobalConfig`.

    Raises:
        ConfigError: If a config file is invalid.
    """
    # 5 + 4. Global config fills in defaults automatically
    global_cfg = load_global_config()
    generation = global_cfg.generation.model_dump()

    # 3. Project-local generation settings
    project = load_project_config()
    if project is not None:
        section = project.get("generation") or {}
        if not isinstance(section, dict):
            raise ConfigError("Project config 'generation' must be an object")
        try:
            overrides = GenerationConfig.model_validate(section)
        except ValueError as exc:
            raise ConfigError(f"Invalid project generation settings: {exc}") from exc
        generation.update(overrides.model_dump(exclude_unset=True))

    # 2. Environment, then 1. CLI flags
    for key, env_var, cli_value in (
        ("sdk_version", ENV_SDK_VERSION, cli_sdk_version),
        ("app_version", ENV_APP_VERSION, cli_app_version),
        ("output", ENV_OUTPUT, cli_output),
    ):
        env_value = os.environ.get(env_var)
        if env_value:
            generation[key] = env_value
        if cli_value is not None:
            generation[key] = cli_value

    global_cfg.generation = GenerationConfig.model_validate(generation)

    return global_cfg
