"""Resolve ``$ref`` JSON Reference pointers, one level at a time.

The document is never rewritten. Callers follow a pointer only when they need
the target: the extractor for parameter and request-body objects, the schema
navigator when the user drills into a component schema.

Only **internal** references (``#/...``) are supported.

Public functions:

* :func:`resolve_pointer` -- look up a single ``#/a/b/c`` pointer.
* :func:`resolve` -- follow exactly one ``$ref`` hop, or return inline values.
* :func:`resolve_chain` -- follow ``$ref`` hops until a concrete object,
  detecting cycles.
* :func:`component_schema_name` -- the ``Name`` in ``#/components/schemas/Name``.
"""

from __future__ import annotations

from typing import Any, Optional

from openapi_tui.exceptions import SchemaResolutionError

COMPONENT_SCHEMA_PREFIX = "#/components/schemas/"


def _unescape(segment: str) -> str:
    # RFC 6901: ~1 before ~0
    return segment.replace("~1", "/").replace("~0", "~")


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Return the value *ref* points to inside *root*.

    Args:
        ref: An internal JSON pointer such as ``#/components/schemas/Pet``.
        root: The document to resolve against.

    Raises:
        SchemaResolutionError: For external references and for pointers whose
            segments do not exist.
    """
    if ref == "#":
        return root
    if not ref.startswith("#/"):
        raise SchemaResolutionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw in ref[2:].split("/"):
        segment = _unescape(raw)
        if isinstance(current, dict):
            if segment not in current:
                raise SchemaResolutionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SchemaResolutionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SchemaResolutionError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )
    return current


def ref_of(obj: Any) -> Optional[str]:
    """Return the ``$ref`` string of *obj*, or ``None`` for inline values."""
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            return ref
    return None


def resolve(obj: Any, root: dict[str, Any]) -> Any:
    """Follow exactly one level of ``$ref``; inline values are returned as-is."""
    ref = ref_of(obj)
    if ref is None:
        return obj
    return resolve_pointer(ref, root)


def resolve_chain(obj: Any, root: dict[str, Any]) -> Any:
    """Follow ``$ref`` hops until the value is no longer a reference.

    Raises:
        SchemaResolutionError: If a pointer is missing or the chain revisits
            a pointer it has already followed.
    """
    seen: list[str] = []
    ref = ref_of(obj)
    while ref is not None:
        if ref in seen:
            chain = " -> ".join([*seen, ref])
            raise SchemaResolutionError(f"Circular $ref chain: {chain}")
        seen.append(ref)
        obj = resolve_pointer(ref, root)
        ref = ref_of(obj)
    return obj


def component_schema_name(ref: str) -> Optional[str]:
    """Return ``Name`` for ``#/components/schemas/Name``, else ``None``."""
    if not ref.startswith(COMPONENT_SCHEMA_PREFIX):
        return None
    name = ref[len(COMPONENT_SCHEMA_PREFIX):]
    if not name or "/" in name:
        return None
    return _unescape(name)
