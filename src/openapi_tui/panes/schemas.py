"""Request and response schema panes.

Both panes show a set of tabs, each with a root schema, in a
:class:`~openapi_tui.navigator.SchemaNavigator`. They follow the catalog's
active operation and rebuild their tabs whenever it changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import (
    Action,
    Back,
    Down,
    Go,
    Tab,
    TabNext,
    TabPrev,
    TimedStatusLine,
    Up,
)
from openapi_tui.exceptions import SchemaResolutionError
from openapi_tui.models import OperationEntry, ParameterLocation
from openapi_tui.navigator import SchemaNavigator
from openapi_tui.panes import Pane, ScrollView, tab_bar
from openapi_tui.state import State

SchemaTab = tuple[str, Any]


class SchemaPane(Pane, ABC):
    """Tabbed schema viewer with drill/back navigation."""

    status_hint = "[1-9 → select tab] [g,b → go/back definitions]"
    empty_text = "Nothing to show"

    def __init__(self) -> None:
        super().__init__()
        self.tabs: list[SchemaTab] = []
        self.tab_index = 0
        self.navigator: Optional[SchemaNavigator] = None
        self._operation_key: Optional[str] = None

    def init(self, state: State) -> None:
        self.navigator = SchemaNavigator(state.document.raw_spec, cache=state.schema_cache)
        self.sync(state)

    @abstractmethod
    def build_tabs(self, operation: OperationEntry) -> list[SchemaTab]:
        """Tabs to show for *operation*."""

    def sync(self, state: State) -> None:
        """Rebuild the tabs if the catalog's active operation changed."""
        operation = state.catalog.active()
        key = operation.key if operation is not None else None
        if key == self._operation_key and self.navigator is not None:
            return
        self._operation_key = key
        self.tabs = self.build_tabs(operation) if operation is not None else []
        self.select_tab(0)

    def select_tab(self, index: int) -> None:
        if self.navigator is None:
            return
        if not self.tabs:
            self.tab_index = 0
            self.navigator.set_root(None)
            return
        self.tab_index = index % len(self.tabs)
        self.navigator.set_root(self.tabs[self.tab_index][1])

    def update(self, action: Action, state: State) -> Optional[Action]:
        self.sync(state)
        if not self.focused or self.navigator is None:
            return None
        if isinstance(action, Up):
            self.navigator.up()
        elif isinstance(action, Down):
            self.navigator.down()
        elif isinstance(action, Go):
            try:
                self.navigator.go()
            except SchemaResolutionError as exc:
                return TimedStatusLine(str(exc))
        elif isinstance(action, Back):
            self.navigator.back()
        elif isinstance(action, Tab):
            if 0 <= action.index < len(self.tabs):
                self.select_tab(action.index)
        elif isinstance(action, TabNext):
            self.select_tab(self.tab_index + 1)
        elif isinstance(action, TabPrev):
            self.select_tab(self.tab_index - 1)
        return None

    def render(self, state: State) -> RenderableType:
        self.sync(state)
        if not self.tabs or self.navigator is None:
            return self.frame(Text(self.empty_text, style="bright_black"))

        navigator = self.navigator
        width = len(str(max(len(navigator.lines), 1)))
        lines: list[Text] = []
        for number, content in enumerate(navigator.lines):
            line = Text(f"{number + 1:>{width}} ", style="bright_black")
            line.append(content, style="cyan" if "$ref:" in content else "")
            if self.focused and number == navigator.cursor:
                line.stylize("reverse")
            lines.append(line)

        trail = " > ".join(navigator.name_history)
        header = [tab_bar([title for title, _ in self.tabs], self.tab_index)]
        return self.frame(ScrollView(lines, navigator.cursor, header), subtitle=trail or None)


_REQUEST_TABS: list[tuple[str, ParameterLocation]] = [
    ("Query", ParameterLocation.QUERY),
    ("Header", ParameterLocation.HEADER),
    ("Path", ParameterLocation.PATH),
    ("Cookie", ParameterLocation.COOKIE),
]


class RequestSchemaPane(SchemaPane):
    """Tabs: Body (media type → schema), then one per parameter location
    (name → schema). Empty tabs are left out."""

    title = "Request"
    empty_text = "No request body or parameters"

    def build_tabs(self, operation: OperationEntry) -> list[SchemaTab]:
        tabs: list[SchemaTab] = []
        body = operation.request_body
        if body is not None and body.content:
            tabs.append(("Body", dict(body.content)))
        for title, location in _REQUEST_TABS:
            params = operation.parameters_in(location)
            if params:
                tabs.append((title, {p.name: p.schema_ for p in params}))
        return tabs


class ResponseSchemaPane(SchemaPane):
    """One tab per (status, media type); a response without content gets
    a single tab showing its description."""

    title = "Responses"
    empty_text = "No responses declared"

    def build_tabs(self, operation: OperationEntry) -> list[SchemaTab]:
        tabs: list[SchemaTab] = []
        for response in operation.responses:
            if not response.content:
                tabs.append((response.status_code, {"description": response.description}))
                continue
            for media_type, schema in response.content.items():
                tabs.append((f"{response.status_code} {media_type}", schema))
        return tabs
