"""Shared test fixtures for openapi-tui.

Provides the petstore document (raw and parsed), an isolated config
environment, a fresh :class:`~openapi_tui.state.State`, output management and
a CLI runner. These fixtures are discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from openapi_tui.models import ParsedSpec
from openapi_tui.output import OutputFormat, OutputManager, reset_output, set_output
from openapi_tui.state import State


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE = FIXTURES_DIR / "petstore.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Raw petstore 3.1 document."""
    with open(PETSTORE) as f:
        return json.load(f)


@pytest.fixture
def petstore_spec(petstore_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed petstore document."""
    from openapi_tui.parser.extractor import extract_spec

    return extract_spec(petstore_raw, "3.1.0")


@pytest.fixture
def state(petstore_spec: ParsedSpec) -> State:
    """Fresh application state over the petstore document."""
    return State.from_document(petstore_spec)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears the OPENAPI_TUI_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("openapi_tui.config._is_xdg_platform", lambda: True)

    for var in ["OPENAPI_TUI_SPEC", "OPENAPI_TUI_BASE_URL"]:
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


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
