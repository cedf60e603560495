"""Shared state threaded through every update call.

There is exactly one :class:`State` per running application. The dispatch
loop owns it and passes it explicitly to pages and panes; nothing else holds a
reference, so every mutation happens on the UI loop in a visible order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from openapi_tui.catalog import Catalog
from openapi_tui.client.response import ResponseStore
from openapi_tui.models import OperationEntry, ParsedSpec
from openapi_tui.request import default_base_url


class InputMode(str, enum.Enum):
    """Who receives printable keys.

    ``NORMAL`` keys go through the keymap; ``INSERT`` keys go to the focused
    editor; ``COMMAND`` keys go to the footer.
    """

    NORMAL = "normal"
    INSERT = "insert"
    COMMAND = "command"


@dataclass
class State:
    """Everything the panes read or mutate.

    Args:
        document: The parsed OpenAPI document (immutable).
        catalog: Operation list with filter, tag and selection.
        base_url_override: ``--base-url`` / environment override.
    """

    document: ParsedSpec
    catalog: Catalog
    base_url_override: Optional[str] = None
    input_mode: InputMode = InputMode.NORMAL
    responses: ResponseStore = field(default_factory=ResponseStore)
    schema_cache: dict[str, list[str]] = field(default_factory=dict)
    running: bool = True

    @classmethod
    def from_document(cls, document: ParsedSpec, base_url_override: Optional[str] = None) -> State:
        return cls(document=document, catalog=Catalog.load(document), base_url_override=base_url_override)

    def base_url(self, operation: Optional[OperationEntry] = None) -> str:
        return default_base_url(self.document, operation, self.base_url_override)
