"""Popup listing suspended sessions."""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import CloseHistory, NewCall
from openapi_tui.events import Consumed, Key
from openapi_tui.models import OperationEntry
from openapi_tui.panes import Pane, ScrollView, method_label
from openapi_tui.state import State


class HistoryPane(Pane):
    """Modal list of suspended operations; it swallows every key.

    Args:
        entries: Operations with a suspended session, most recent first.
    """

    title = "History"
    status_hint = "[j,k → select] [enter → resume] [esc → close]"

    def __init__(self, entries: list[OperationEntry]) -> None:
        super().__init__()
        self.entries = entries
        self.selection = 0
        self.focused = True

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        if key.code in ("down", "j"):
            if self.entries:
                self.selection = (self.selection + 1) % len(self.entries)
        elif key.code in ("up", "k"):
            if self.entries:
                self.selection = (self.selection - 1) % len(self.entries)
        elif key.code == "enter":
            if self.entries:
                return Consumed(NewCall(self.entries[self.selection].key))
        elif key.code in ("esc", "q"):
            return Consumed(CloseHistory())
        return Consumed()

    def render(self, state: State) -> RenderableType:
        lines: list[Text] = []
        for index, entry in enumerate(self.entries):
            line = method_label(entry.method)
            line.append(entry.path)
            if index == self.selection:
                line.stylize("reverse")
            lines.append(line)
        return self.frame(ScrollView(lines, self.selection), subtitle=f"{len(self.entries)}")
