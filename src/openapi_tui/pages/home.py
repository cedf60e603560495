"""Home page: catalog browsing and schema inspection."""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.layout import Layout

from openapi_tui.actions import Action, NewCall
from openapi_tui.events import Key
from openapi_tui.pages import Page
from openapi_tui.panes.address import AddressPane
from openapi_tui.panes.apis import ApisPane
from openapi_tui.panes.schemas import RequestSchemaPane, ResponseSchemaPane
from openapi_tui.panes.tags import TagsPane
from openapi_tui.state import State


class HomePage(Page):
    """Panes in focus order: APIs, Tags, Address, Request, Responses.

    Enter opens a call for the selected operation.
    """

    def __init__(self) -> None:
        self.apis = ApisPane()
        self.tags = TagsPane()
        self.address = AddressPane()
        self.request = RequestSchemaPane()
        self.response = ResponseSchemaPane()
        super().__init__([self.apis, self.tags, self.address, self.request, self.response])

    def key_action(self, key: Key, state: State) -> Optional[Action]:
        if key.code == "enter" and not (key.ctrl or key.alt):
            return NewCall()
        return super().key_action(key, state)

    def layout(self, state: State) -> RenderableType:
        root = Layout()
        left = Layout(name="left", ratio=2)
        right = Layout(name="right", ratio=3)
        root.split_row(left, right)
        left.split_column(
            Layout(self.apis.render(state), ratio=3),
            Layout(self.tags.render(state), ratio=1),
        )
        right.split_column(
            Layout(self.address.render(state), size=3),
            Layout(self.request.render(state), ratio=1),
            Layout(self.response.render(state), ratio=1),
        )
        return root
