"""Configuration loading with XDG paths and precedence resolution.

This module handles all configuration for openapi-tui. Configuration is
read-only: nothing the TUI does at runtime is written back.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-tui/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~openapi_tui.models.GlobalConfig`
  JSON file storing key bindings, the tick rate, the session history limit
  and HTTP settings.
* **Project config** -- ``./openapi-tui.json`` in the working directory may
  pin the ``spec`` and ``base_url`` for a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config and defaults into the
  effective :class:`~openapi_tui.models.LaunchOptions`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from openapi_tui.exceptions import ConfigError
from openapi_tui.models import GlobalConfig, LaunchOptions

_APP_NAME = "openapi-tui"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "openapi-tui.json"
_LOG_FILENAME = "openapi-tui.log"

ENV_SPEC = "OPENAPI_TUI_SPEC"
ENV_BASE_URL = "OPENAPI_TUI_BASE_URL"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/openapi-tui/`` (default
    ``~/.config/openapi-tui/``). On macOS/Windows: ``~/.openapi-tui/``.

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
    """Return the data directory (log file, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-tui/`` (default
    ``~/.local/share/openapi-tui/``). On macOS/Windows: ``~/.openapi-tui/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_log_file() -> Path:
    """Where diagnostics go while the TUI owns the terminal."""
    return get_data_dir() / _LOG_FILENAME


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~openapi_tui.models.GlobalConfig`. If the
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


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./openapi-tui.json``.

    Only the ``spec`` and ``base_url`` keys are consulted; anything else is
    ignored so the file can be shared with other tooling.

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
    cli_spec: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    dry_run: bool = False,
) -> tuple[GlobalConfig, LaunchOptions]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_spec``, ``cli_base_url``)
        2. Environment variables (``OPENAPI_TUI_SPEC``, ``OPENAPI_TUI_BASE_URL``)
        3. Project config (``./openapi-tui.json``)
        4. Defaults (``openapi.json``, document servers)

    Returns:
        A tuple of ``(global_config, launch_options)``.
    """
    global_cfg = load_global_config()
    options = LaunchOptions(dry_run=dry_run)

    project = load_project_config()
    if project is not None:
        if project.get("spec"):
            options.spec = str(project["spec"])
        if project.get("base_url"):
            options.base_url = str(project["base_url"])

    env_spec = os.environ.get(ENV_SPEC)
    if env_spec:
        options.spec = env_spec
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        options.base_url = env_base_url

    if cli_spec is not None:
        options.spec = cli_spec
    if cli_base_url is not None:
        options.base_url = cli_base_url

    return global_cfg, options
