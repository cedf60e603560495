"""Response viewer: accept type tabs, dial on Enter, latest record below."""

from __future__ import annotations

from typing import Optional

from rich.console import Group, RenderableType
from rich.syntax import Syntax
from rich.text import Text

from openapi_tui.actions import Action, Dial, Down, Submit, Tab, TabNext, TabPrev, Up
from openapi_tui.models import ResponseRecord
from openapi_tui.panes import Pane, ScrollView, tab_bar
from openapi_tui.session import Session
from openapi_tui.state import State

_LEXERS = (("json", "json"), ("yaml", "yaml"), ("xml", "xml"), ("html", "html"))


def _status_style(status: int) -> str:
    if status < 300:
        return "bold green"
    if status < 400:
        return "bold yellow"
    return "bold red"


def _lexer(record: ResponseRecord) -> Optional[str]:
    content_type = ""
    for name, value in record.headers:
        if name.lower() == "content-type":
            content_type = value.lower()
            break
    for marker, lexer in _LEXERS:
        if marker in content_type:
            return lexer
    return None


class ResponseViewerPane(Pane):
    """The selected tab becomes the request's ``accept`` header."""

    title = "Response"
    status_hint = "[1-9 → accept type] [enter → dial] [j,k → scroll]"

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session
        self.scroll = 0

    def update(self, action: Action, state: State) -> Optional[Action]:
        if not self.focused:
            return None
        draft = self.session.draft
        count = len(draft.accept_content_types)
        if isinstance(action, Submit):
            self.scroll = 0
            return Dial()
        if isinstance(action, Down):
            self.scroll += 1
        elif isinstance(action, Up):
            self.scroll = max(0, self.scroll - 1)
        elif count and isinstance(action, Tab):
            if 0 <= action.index < count:
                draft.accept_content_type_index = action.index
        elif count and isinstance(action, TabNext):
            draft.accept_content_type_index = ((draft.accept_content_type_index or 0) + 1) % count
        elif count and isinstance(action, TabPrev):
            draft.accept_content_type_index = ((draft.accept_content_type_index or 0) - 1) % count
        return None

    def render(self, state: State) -> RenderableType:
        draft = self.session.draft
        parts: list[RenderableType] = []
        if draft.accept_content_types:
            parts.append(tab_bar(draft.accept_content_types, draft.accept_content_type_index))

        record = state.responses.get(self.session.operation_key)
        if record is None:
            parts.append(Text("No response yet. Press enter to dial.", style="bright_black"))
            return self.frame(Group(*parts))

        if record.failed:
            parts.append(Text(record.error or "", style="bold red"))
        if record.status is not None:
            status = Text()
            status.append(f"{record.protocol_version} ", style="bright_black")
            status.append(f"{record.status} {record.reason}", style=_status_style(record.status))
            status.append(f"  {record.size} B  {record.elapsed_ms:.0f} ms", style="bright_black")
            parts.append(status)
            for name, value in record.headers:
                header = Text()
                header.append(f"{name}: ", style="cyan")
                header.append(value)
                parts.append(header)
            parts.append(Text(""))

        body_lines = record.body.split("\n")
        self.scroll = min(self.scroll, max(0, len(body_lines) - 1))
        lexer = _lexer(record)
        if lexer is not None:
            visible = "\n".join(body_lines[self.scroll:])
            parts.append(Syntax(visible, lexer, theme="monokai", word_wrap=False))
        else:
            parts.append(ScrollView([Text(line) for line in body_lines[self.scroll:]]))
        return self.frame(Group(*parts))
