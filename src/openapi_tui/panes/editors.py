"""Session page editors: parameters and request body.

Both editors write straight into the session's
:class:`~openapi_tui.models.RequestDraft`. ``Submit`` (Enter) starts inline
editing and switches the input mode to ``INSERT``; while editing the pane
claims every key. Leaving edit mode with Enter (parameters) or Esc (body)
stores the value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import (
    Action,
    Down,
    OpenRequestPayload,
    Submit,
    Tab,
    TabNext,
    TabPrev,
    TimedStatusLine,
    Up,
)
from openapi_tui.events import Consumed, Key
from openapi_tui.models import APIParameter, OperationEntry, ParameterLocation
from openapi_tui.panes import Pane, ScrollView, tab_bar
from openapi_tui.panes.input import LineInput, TextArea
from openapi_tui.session import Session
from openapi_tui.state import InputMode, State

_LOCATION_TITLES: list[tuple[str, ParameterLocation]] = [
    ("Path", ParameterLocation.PATH),
    ("Query", ParameterLocation.QUERY),
    ("Header", ParameterLocation.HEADER),
    ("Cookie", ParameterLocation.COOKIE),
]


class ParameterEditorPane(Pane):
    """One tab per parameter location that the operation uses.

    An empty value commits as *unset*.
    """

    title = "Parameters"
    status_hint = "[1-9 → select tab] [j,k → select] [enter → edit] [esc → hang up]"

    def __init__(self, session: Session, operation: OperationEntry) -> None:
        super().__init__()
        self.session = session
        self.tabs: list[tuple[str, list[APIParameter]]] = [
            (title, operation.parameters_in(location))
            for title, location in _LOCATION_TITLES
            if operation.parameters_in(location)
        ]
        self.tab_index = int(session.pane_state.get("parameters.tab", 0))
        self.row = int(session.pane_state.get("parameters.row", 0))
        self.editor: Optional[LineInput] = None

    @property
    def editing(self) -> bool:
        return self.editor is not None

    def current(self) -> Optional[APIParameter]:
        if not self.tabs:
            return None
        params = self.tabs[self.tab_index][1]
        return params[self.row] if 0 <= self.row < len(params) else None

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        if self.editor is None:
            return None
        if key.code == "enter":
            self._commit(state)
        elif key.code == "esc":
            self._stop(state)
        else:
            self.editor.handle(key)
        return Consumed()

    def update(self, action: Action, state: State) -> Optional[Action]:
        if not self.focused or not self.tabs:
            return None
        params = self.tabs[self.tab_index][1]
        if isinstance(action, Submit):
            param = self.current()
            if param is not None:
                value = self.session.draft.values_for(param.location).get(param.name)
                self.editor = LineInput(value or "")
                state.input_mode = InputMode.INSERT
        elif isinstance(action, Down):
            self.row = min(self.row + 1, len(params) - 1)
        elif isinstance(action, Up):
            self.row = max(self.row - 1, 0)
        elif isinstance(action, Tab):
            if 0 <= action.index < len(self.tabs):
                self._select_tab(action.index)
        elif isinstance(action, TabNext):
            self._select_tab((self.tab_index + 1) % len(self.tabs))
        elif isinstance(action, TabPrev):
            self._select_tab((self.tab_index - 1) % len(self.tabs))
        self._remember()
        return None

    def unfocus(self, state: State) -> None:
        if self.editor is not None:
            self._commit(state)
        super().unfocus(state)

    def _select_tab(self, index: int) -> None:
        self.tab_index = index
        self.row = 0

    def _remember(self) -> None:
        self.session.pane_state["parameters.tab"] = self.tab_index
        self.session.pane_state["parameters.row"] = self.row

    def _commit(self, state: State) -> None:
        param = self.current()
        if param is not None and self.editor is not None:
            text = self.editor.text
            self.session.draft.values_for(param.location)[param.name] = text or None
        self._stop(state)

    def _stop(self, state: State) -> None:
        self.editor = None
        state.input_mode = InputMode.NORMAL

    def render(self, state: State) -> RenderableType:
        if not self.tabs:
            return self.frame(Text("No parameters", style="bright_black"))

        lines: list[Text] = []
        for index, param in enumerate(self.tabs[self.tab_index][1]):
            values = self.session.draft.values_for(param.location)
            line = Text()
            line.append(param.name, style="bold")
            line.append("*" if param.required else " ", style="red")
            line.append(" = ")
            if index == self.row and self.editor is not None:
                text = self.editor.text
                cursor = self.editor.cursor
                line.append(text[:cursor])
                line.append(text[cursor:cursor + 1] or " ", style="reverse")
                line.append(text[cursor + 1:])
            else:
                value = values.get(param.name)
                if value is None:
                    line.append("<unset>", style="bright_black")
                else:
                    line.append(value, style="green")
            if param.description:
                line.append(f"  {param.description}", style="bright_black")
            if index == self.row and self.focused and self.editor is None:
                line.stylize("reverse")
            lines.append(line)

        header = [tab_bar([title for title, _ in self.tabs], self.tab_index)]
        mode = "editing" if self.editing else None
        return self.frame(ScrollView(lines, self.row, header), subtitle=mode)


class BodyEditorPane(Pane):
    """Raw request body with one tab per declared content type.

    The selected tab becomes the request's ``content-type``. ``:request open
    <file>`` replaces the body with the file's contents.
    """

    title = "Body"
    status_hint = "[1-9 → content type] [enter → edit, esc → done] [:request open <file>]"

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session
        self.editor: Optional[TextArea] = None

    @property
    def editing(self) -> bool:
        return self.editor is not None

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        if self.editor is None:
            return None
        if key.code == "esc":
            self._commit(state)
        else:
            self.editor.handle(key)
        return Consumed()

    def update(self, action: Action, state: State) -> Optional[Action]:
        if isinstance(action, OpenRequestPayload):
            return self.load(action.path)
        draft = self.session.draft
        if not self.focused or not draft.body_content_types:
            return None
        count = len(draft.body_content_types)
        current = draft.body_content_type_index or 0
        if isinstance(action, Submit):
            self.editor = TextArea(draft.body)
            state.input_mode = InputMode.INSERT
        elif isinstance(action, Tab):
            if 0 <= action.index < count:
                draft.body_content_type_index = action.index
        elif isinstance(action, TabNext):
            draft.body_content_type_index = (current + 1) % count
        elif isinstance(action, TabPrev):
            draft.body_content_type_index = (current - 1) % count
        return None

    def unfocus(self, state: State) -> None:
        if self.editor is not None:
            self._commit(state)
        super().unfocus(state)

    def load(self, path: str) -> Action:
        """Replace the body with the contents of *path*."""
        try:
            text = Path(path).expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return TimedStatusLine(f"Cannot open {path}: {exc}")
        self.session.draft.body = text
        if self.editor is not None:
            self.editor.set(text)
        return TimedStatusLine(f"Loaded {len(text)} characters from {path}")

    def _commit(self, state: State) -> None:
        if self.editor is not None:
            self.session.draft.body = self.editor.text
        self.editor = None
        state.input_mode = InputMode.NORMAL

    def render(self, state: State) -> RenderableType:
        draft = self.session.draft
        if not draft.body_content_types:
            return self.frame(Text("No request body", style="bright_black"))

        if self.editor is not None:
            source_lines = self.editor.lines
            cursor_row, cursor_col = self.editor.row, self.editor.col
        else:
            source_lines = draft.body.split("\n")
            cursor_row, cursor_col = 0, -1

        lines: list[Text] = []
        for row, content in enumerate(source_lines):
            line = Text(content)
            if self.editor is not None and row == cursor_row:
                if cursor_col >= len(content):
                    line.append(" ")
                line.stylize("reverse", cursor_col, cursor_col + 1)
            lines.append(line)

        header = [tab_bar(draft.body_content_types, draft.body_content_type_index)]
        mode = "editing" if self.editing else None
        return self.frame(ScrollView(lines, cursor_row, header), subtitle=mode)
