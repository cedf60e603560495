"""Phone page: the active call of one operation.

The page is rebuilt whenever a different session reaches the top of the
active stack. Focus and full-screen state are kept on the
:class:`~openapi_tui.session.Session`, so a resumed call looks exactly as it
was left.
"""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.layout import Layout

from openapi_tui.actions import Action, HangUp
from openapi_tui.events import Key
from openapi_tui.models import OperationEntry
from openapi_tui.pages import Page
from openapi_tui.panes.address import AddressPane
from openapi_tui.panes.editors import BodyEditorPane, ParameterEditorPane
from openapi_tui.panes.response_viewer import ResponseViewerPane
from openapi_tui.session import Session
from openapi_tui.state import State


class PhonePage(Page):
    """Panes in focus order: Parameters, Body, Response.

    Esc hangs up and parks the session in history.
    """

    def __init__(self, session: Session, operation: OperationEntry) -> None:
        self.session = session
        self.operation = operation
        self.address = AddressPane(operation.key)
        self.parameters = ParameterEditorPane(session, operation)
        self.body = BodyEditorPane(session)
        self.response = ResponseViewerPane(session)
        super().__init__([self.parameters, self.body, self.response])
        self.focus_index = min(session.focused_pane_index, len(self.panes) - 1)
        self.fullscreen = session.fullscreen

    def init(self, state: State) -> Optional[Action]:
        self.address.init(state)
        return super().init(state)

    def key_action(self, key: Key, state: State) -> Optional[Action]:
        if key.code == "esc" and not (key.ctrl or key.alt):
            return HangUp(self.session.operation_key)
        return super().key_action(key, state)

    def update(self, action: Action, state: State) -> list[Action]:
        follow_ups = super().update(action, state)
        self.session.focused_pane_index = self.focus_index
        self.session.fullscreen = self.fullscreen
        return follow_ups

    def layout(self, state: State) -> RenderableType:
        root = Layout()
        body = Layout(name="body")
        root.split_column(Layout(self.address.render(state), size=3), body)
        editors = Layout(name="editors", ratio=2)
        body.split_row(editors, Layout(self.response.render(state), ratio=3))
        editors.split_column(
            Layout(self.parameters.render(state), ratio=1),
            Layout(self.body.render(state), ratio=1),
        )
        return root
