"""Tag pane: restricts the catalog to one tag."""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import Action, Down, Up, Update
from openapi_tui.panes import Pane, ScrollView
from openapi_tui.state import State

ALL_TAGS = "All"


class TagsPane(Pane):
    """Entry 0 is "All" (no tag restriction); the rest are the document's tags.

    Moving the selection applies the tag immediately.
    """

    title = "Tags"
    status_hint = "[j,k → select tag]"

    def __init__(self) -> None:
        super().__init__()
        self.selection = 0

    def init(self, state: State) -> None:
        tag = state.catalog.active_tag
        tags = state.catalog.tags
        self.selection = tags.index(tag) + 1 if tag in tags else 0

    def update(self, action: Action, state: State) -> Optional[Action]:
        if not self.focused:
            return None
        count = len(state.catalog.tags) + 1
        if isinstance(action, Down):
            self.selection = (self.selection + 1) % count
        elif isinstance(action, Up):
            self.selection = (self.selection - 1) % count
        else:
            return None
        tag = None if self.selection == 0 else state.catalog.tags[self.selection - 1]
        state.catalog.set_tag(tag)
        return Update()

    def render(self, state: State) -> RenderableType:
        lines: list[Text] = []
        for index, name in enumerate([ALL_TAGS, *state.catalog.tags]):
            line = Text(name)
            if index == self.selection:
                line.stylize("reverse" if self.focused else "underline")
            lines.append(line)
        return self.frame(ScrollView(lines, self.selection))
