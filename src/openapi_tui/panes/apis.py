"""Operation list pane (the catalog's visible entries)."""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import Action, Down, Up, Update
from openapi_tui.models import OperationKind
from openapi_tui.panes import Pane, ScrollView, method_label
from openapi_tui.state import State


class ApisPane(Pane):
    title = "APIs"
    status_hint = "[j,k → move] [enter → new call] [/ → filter] [: → command]"

    def update(self, action: Action, state: State) -> Optional[Action]:
        if not self.focused:
            return None
        if isinstance(action, Down):
            state.catalog.next()
            return Update()
        if isinstance(action, Up):
            state.catalog.prev()
            return Update()
        return None

    def render(self, state: State) -> RenderableType:
        catalog = state.catalog
        lines: list[Text] = []
        for index, entry in enumerate(catalog.visible):
            line = Text()
            line.append_text(method_label(entry.method))
            line.append(" ")
            path_style = "strike" if entry.deprecated else ""
            if entry.kind == OperationKind.WEBHOOK:
                path_style = "italic"
            line.append(entry.path, style=path_style)
            if entry.summary:
                line.append(f"  {entry.summary}", style="bright_black")
            if index == catalog.selection:
                line.stylize("reverse" if self.focused else "underline")
            lines.append(line)

        subtitle = f"{len(catalog.visible)}/{len(catalog.entries)}"
        if catalog.filter_text:
            subtitle = f"/{catalog.filter_text}  {subtitle}"
        if not lines:
            return self.frame(Text("No operations match", style="bright_black"), subtitle)
        return self.frame(ScrollView(lines, catalog.selection or 0), subtitle)
