"""Address bar: method and full URL of an operation."""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.models import OperationEntry, OperationKind
from openapi_tui.panes import Pane, method_label
from openapi_tui.state import State


class AddressPane(Pane):
    """Shows the catalog's active operation, or a fixed one on a session page.

    Args:
        operation_key: Pin the pane to this operation instead of following
            the catalog selection.
    """

    title = "Address"

    def __init__(self, operation_key: Optional[str] = None) -> None:
        super().__init__()
        self.operation_key = operation_key

    def operation(self, state: State) -> Optional[OperationEntry]:
        if self.operation_key is not None:
            return state.catalog.lookup(self.operation_key)
        return state.catalog.active()

    def render(self, state: State) -> RenderableType:
        operation = self.operation(state)
        if operation is None:
            return self.frame(Text("No operation selected", style="bright_black"))

        line = method_label(operation.method)
        if operation.kind == OperationKind.WEBHOOK:
            line.append(f"webhook {operation.path}", style="italic")
        else:
            line.append(state.base_url(operation), style="bright_black")
            line.append(operation.path, style="bold")
        if operation.deprecated:
            line.append("  deprecated", style="red")
        return self.frame(line, subtitle=operation.operation_id)
