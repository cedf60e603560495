"""OpenAPI document parser -- load, validate and flatten into operations.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file,
remote URL or stdin) into a :class:`~openapi_tui.models.ParsedSpec`.

Typical usage::

    from openapi_tui.parser import load_document

    parsed = load_document("openapi.yaml")

Sub-modules:

* :mod:`~openapi_tui.parser.loader` -- I/O layer plus format detection and
  OpenAPI version validation.
* :mod:`~openapi_tui.parser.resolver` -- on-demand ``$ref`` resolution with
  cycle detection.
* :mod:`~openapi_tui.parser.extractor` -- walks the document and produces
  :class:`~openapi_tui.models.OperationEntry` objects in document order.
"""

from __future__ import annotations

from openapi_tui.models import ParsedSpec
from openapi_tui.parser.extractor import extract_spec
from openapi_tui.parser.loader import load_spec, validate_openapi_version


def load_document(source: str, timeout: float = 30.0) -> ParsedSpec:
    """Load, validate and extract a document in one step.

    Raises:
        SpecParseError: On any load, decode, version or ``$ref`` failure.
    """
    raw = load_spec(source, timeout=timeout)
    version = validate_openapi_version(raw)
    return extract_spec(raw, version, source=source)


__all__ = ["load_document", "load_spec", "validate_openapi_version", "extract_spec"]
