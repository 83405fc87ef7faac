"""Shared test fixtures for specsdk.

Provides reusable fixtures for loading spec fixtures, creating isolated
config environments, managing output state, and loading generated client
modules. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
import types
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from specsdk.models import ApiDescription
from specsdk.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    The library logger is restored too, since the CLI callback detaches it
    from the root logger that ``caplog`` listens on.
    """
    yield
    reset_output()
    logger = logging.getLogger("specsdk")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def whook_raw() -> dict[str, Any]:
    """Load the raw six-operation Whook example document."""
    with open(FIXTURES_DIR / "whook.json") as f:
        return json.load(f)


@pytest.fixture
def whook_text() -> str:
    return (FIXTURES_DIR / "whook.json").read_text()


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore 3.1 document (YAML, with refs)."""
    with open(FIXTURES_DIR / "petstore.yaml") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Extracted description fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def whook_description(whook_raw: dict[str, Any]) -> ApiDescription:
    from specsdk.parser.extractor import extract_spec

    return extract_spec(whook_raw, "3.0.2")


@pytest.fixture
def petstore_description(petstore_raw: dict[str, Any]) -> ApiDescription:
    from specsdk.parser.extractor import extract_spec

    return extract_spec(petstore_raw, "3.1.0")


# ---------------------------------------------------------------------------
# Generated module loader
# ---------------------------------------------------------------------------


@pytest.fixture
def load_client() -> Callable[[str], types.ModuleType]:
    """Return a function executing generated source as a fresh module."""

    def _load(source: str, name: str = "generated_client") -> types.ModuleType:
        module = types.ModuleType(name)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)
        return module

    return _load


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SPECSDK_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPECSDK_SDK_VERSION",
        "SPECSDK_APP_VERSION",
        "SPECSDK_OUTPUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
