"""Read an OpenAPI document from a file, a URL or stdin.

The loader only turns bytes into a ``dict``; it never interprets operations.
Both JSON and YAML are accepted, with the format picked from the file
extension or the ``content-type`` header and content sniffing as a fallback.

Public functions:

* :func:`load_spec` -- fetch and decode a document from any supported source.
* :func:`validate_openapi_version` -- accept OpenAPI 3.x, reject Swagger 2.x.

Every failure surfaces as :class:`~openapi_tui.exceptions.SpecParseError`,
which the CLI reports once and exits with code 7.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi_tui.exceptions import SpecParseError
from openapi_tui.output import get_output

_JSON_SUFFIXES = frozenset({".json"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        source: ``-`` for stdin, an ``http(s)://`` URL, or a file path.
        timeout: Network timeout used for URL sources.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or does not decode to
            a mapping.
    """
    get_output().debug(f"Loading document from {source}")
    if source == "-":
        text = sys.stdin.read()
        if not text.strip():
            raise SpecParseError("No input received from stdin")
        return _decode(text, fmt="", origin="stdin")
    if is_url(source):
        text, fmt = _fetch(source, timeout)
        return _decode(text, fmt=fmt, origin=source)

    path = Path(source)
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {source}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {source}: {exc}") from exc
    if not text.strip():
        raise SpecParseError(f"Spec file is empty: {source}")

    suffix = path.suffix.lower()
    fmt = "json" if suffix in _JSON_SUFFIXES else "yaml" if suffix in _YAML_SUFFIXES else ""
    return _decode(text, fmt=fmt, origin=source)


def _fetch(url: str, timeout: float) -> tuple[str, str]:
    """GET *url* and return ``(body, format_hint)``."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _decode(text: str, fmt: str, origin: str) -> dict[str, Any]:
    """Decode *text* as JSON or YAML.

    JSON is tried first unless the hint says YAML; an explicit JSON hint
    does not fall back to YAML.
    """
    failures: list[str] = []

    if fmt != "yaml":
        try:
            return _require_mapping(json.loads(text), origin)
        except json.JSONDecodeError as exc:
            if fmt == "json":
                raise SpecParseError(f"Invalid JSON in {origin}: {exc}") from exc
            failures.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(text), origin)
    except yaml.YAMLError as exc:
        failures.append(f"YAML error: {exc}")

    raise SpecParseError(
        f"Failed to parse {origin} as JSON or YAML\n  " + "\n  ".join(failures)
    )


def _require_mapping(data: Any, origin: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        kind = "empty document" if data is None else type(data).__name__
        raise SpecParseError(f"{origin} must be a JSON/YAML object (got {kind})")
    return data


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the ``openapi`` version string.

    Args:
        spec: The decoded document.

    Returns:
        The version string (``"3.0.3"``, ``"3.1.0"``, ...).

    Raises:
        SpecParseError: If the document is Swagger 2.x, has no ``openapi``
            field, or declares a major version other than 3.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    return version_str
