"""Schema navigator: render a schema as YAML lines and drill through ``$ref``.

A navigator shows one schema at a time as block-YAML lines with a cursor. When
the cursor sits on a ``$ref: '#/components/schemas/Name'`` line, :meth:`go`
replaces the view with ``Name`` and remembers where the cursor was;
:meth:`back` returns to the previous schema with the cursor restored.

Resolution is lazy and one level deep, so self-referencing schemas never
recurse: every hop is a user action. Rendered component schemas are cached by
name and the cache can be shared between navigators.
"""

from __future__ import annotations

from typing import Any, Optional

import yaml

from openapi_tui.exceptions import SchemaResolutionError
from openapi_tui.parser.resolver import component_schema_name, ref_of, resolve

_LIST_ITEM = "- "


def render_schema(schema: Any) -> list[str]:
    """Render *schema* as ordered block-YAML display lines.

    Key order follows the document, so the output is stable per schema.
    """
    if schema is None:
        return []
    text = yaml.safe_dump(
        schema,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    lines = text.splitlines()
    # safe_dump terminates bare scalars with a document end marker
    if lines and lines[-1] == "...":
        lines.pop()
    return lines


def ref_on_line(line: str) -> Optional[str]:
    """Return the pointer when *line* is exactly a ``$ref`` entry.

    Accepts ``$ref: '#/...'`` with any indentation, optionally as a list
    item (``- $ref: ...``). Anything else on the line disqualifies it.
    """
    text = line.strip()
    if text.startswith(_LIST_ITEM):
        text = text[len(_LIST_ITEM):].lstrip()
    if not text.startswith("$ref:"):
        return None
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError:
        return None
    if isinstance(parsed, dict) and len(parsed) == 1:
        return ref_of(parsed)
    return None


class SchemaNavigator:
    """Cursor and drill/back history over rendered schemas.

    Args:
        document: The raw OpenAPI document that pointers resolve against.
        cache: Optional shared ``name -> lines`` render cache.

    Invariant: ``name_history`` and ``offset_history`` always have the same
    length; both empty means the root schema is displayed.
    """

    def __init__(
        self,
        document: dict[str, Any],
        cache: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self._document = document
        self._cache = cache if cache is not None else {}
        self._root: Any = None
        self._root_lines: list[str] = []
        self._lines: list[str] = []
        self._cursor = 0
        self._name_history: list[str] = []
        self._offset_history: list[int] = []

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def name_history(self) -> list[str]:
        return list(self._name_history)

    @property
    def offset_history(self) -> list[int]:
        return list(self._offset_history)

    @property
    def current_name(self) -> Optional[str]:
        """Component name on display, or ``None`` at the root."""
        return self._name_history[-1] if self._name_history else None

    @property
    def cursor_line(self) -> Optional[str]:
        if not self._lines:
            return None
        return self._lines[self._cursor]

    # ------------------------------------------------------------------ #
    # Resolution and rendering
    # ------------------------------------------------------------------ #

    def resolve(self, ref_or_inline: Any) -> Any:
        """Follow exactly one level of ``$ref``."""
        return resolve(ref_or_inline, self._document)

    def render_component(self, name: str) -> list[str]:
        """Render ``#/components/schemas/<name>``, using the cache.

        Raises:
            SchemaResolutionError: If the document has no such schema.
        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        schemas = (self._document.get("components") or {}).get("schemas") or {}
        if name not in schemas:
            raise SchemaResolutionError(
                f"Cannot resolve $ref '#/components/schemas/{name}': schema not found"
            )
        lines = render_schema(schemas[name])
        self._cache[name] = lines
        return lines

    def set_root(self, schema: Any) -> None:
        """Display *schema* as the root and forget the drill history."""
        self._root = schema
        self._root_lines = render_schema(schema)
        self._lines = self._root_lines
        self._cursor = 0
        self._name_history.clear()
        self._offset_history.clear()

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    def go(self) -> bool:
        """Drill into the component schema referenced on the cursor line.

        Returns:
            ``True`` if the view changed; ``False`` for non-reference lines.

        Raises:
            SchemaResolutionError: If the target schema does not exist. The
                navigator state is left untouched.
        """
        line = self.cursor_line
        if line is None:
            return False
        ref = ref_on_line(line)
        name = component_schema_name(ref) if ref is not None else None
        if name is None:
            return False

        lines = self.render_component(name)
        self._offset_history.append(self._cursor)
        self._name_history.append(name)
        self._lines = lines
        self._cursor = 0
        return True

    def back(self) -> None:
        """Return to the previous schema with its cursor restored.

        At the root with an empty history the cursor is reset to 0.
        """
        if not self._name_history:
            self._cursor = 0
            return

        self._name_history.pop()
        offset = self._offset_history.pop()
        if self._name_history:
            self._lines = self.render_component(self._name_history[-1])
        else:
            self._lines = self._root_lines
        self._cursor = self._clamp(offset)

    def up(self) -> None:
        self._cursor = self._clamp(self._cursor - 1)

    def down(self) -> None:
        self._cursor = self._clamp(self._cursor + 1)

    def _clamp(self, index: int) -> int:
        if not self._lines:
            return 0
        return max(0, min(index, len(self._lines) - 1))
