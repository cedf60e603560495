"""Filterable, taggable list of the document's operations.

The catalog holds every :class:`~openapi_tui.models.OperationEntry` in
document order and a *visible* subset derived from a path substring filter
and an optional tag. The selection always indexes into the visible subset, or
is ``None`` when nothing is visible.
"""

from __future__ import annotations

from typing import Optional

from openapi_tui.models import OperationEntry, ParsedSpec


class Catalog:
    """Operation list with filter, tag and a circular selection.

    Args:
        entries: Operations in document order.
        tags: Tag names offered by the tag pane.
    """

    def __init__(self, entries: list[OperationEntry], tags: Optional[list[str]] = None) -> None:
        self._entries = list(entries)
        self._tags = list(tags or [])
        self._filter_text = ""
        self._active_tag: Optional[str] = None
        self._visible: list[OperationEntry] = []
        self._selection: Optional[int] = None
        self._recompute()

    @classmethod
    def load(cls, document: ParsedSpec) -> Catalog:
        """Build a catalog from a parsed document."""
        return cls(document.operations, document.tags)

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def entries(self) -> list[OperationEntry]:
        return list(self._entries)

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    @property
    def visible(self) -> list[OperationEntry]:
        return list(self._visible)

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def active_tag(self) -> Optional[str]:
        return self._active_tag

    @property
    def selection(self) -> Optional[int]:
        return self._selection

    def active(self) -> Optional[OperationEntry]:
        """Return the selected visible entry, or ``None`` when nothing is visible."""
        if self._selection is None:
            return None
        return self._visible[self._selection]

    def lookup(self, key: str) -> Optional[OperationEntry]:
        """Find an entry by its key, ignoring filter and tag."""
        for entry in self._entries:
            if entry.key == key:
                return entry
        return None

    # ------------------------------------------------------------------ #
    # Mutation
    # ------------------------------------------------------------------ #

    def set_filter(self, text: str) -> None:
        """Show only entries whose path contains *text* (case-sensitive)."""
        self._filter_text = text
        self._recompute()

    def set_tag(self, tag: Optional[str]) -> None:
        """Show only entries carrying *tag*; ``None`` removes the restriction."""
        self._active_tag = tag
        self._recompute()

    def next(self) -> None:
        if self._selection is None:
            return
        self._selection = (self._selection + 1) % len(self._visible)

    def prev(self) -> None:
        if self._selection is None:
            return
        self._selection = (self._selection - 1) % len(self._visible)

    def select(self, index: int) -> None:
        """Select visible entry *index*, clamped into range."""
        if self._selection is None:
            return
        self._selection = max(0, min(index, len(self._visible) - 1))

    def _recompute(self) -> None:
        self._visible = [
            entry
            for entry in self._entries
            if self._filter_text in entry.path
            and (self._active_tag is None or entry.has_tag(self._active_tag))
        ]
        self._selection = 0 if self._visible else None
