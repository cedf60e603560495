"""Footer: mode indicator, status line, and the ``/`` and ``:`` input.

While a ``/`` (filter) or ``:`` (command) input is open the input mode is
``COMMAND`` and the footer claims every key. Enter finishes with
``FooterResult(command, text)``, Esc with ``FooterResult(command, None)``.
Up and Down recall earlier inputs from a bounded ring buffer.

Status messages are either sticky (``StatusLine``) or expire after a number
of seconds (``TimedStatusLine``, ``Error``), checked on every tick against
an injectable clock.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Optional

from rich.console import RenderableType
from rich.text import Text

from openapi_tui.actions import (
    Action,
    Error,
    FocusFooter,
    FooterResult,
    StatusLine,
    Tick,
    TimedStatusLine,
)
from openapi_tui.events import Consumed, Key
from openapi_tui.output import get_output
from openapi_tui.panes import Pane
from openapi_tui.panes.input import LineInput
from openapi_tui.state import InputMode, State

_MODE_STYLES = {
    InputMode.NORMAL: "bold black on blue",
    InputMode.INSERT: "bold black on green",
    InputMode.COMMAND: "bold black on yellow",
}


class FooterPane(Pane):
    """Bottom line of the screen.

    Args:
        history_size: Number of past inputs kept for recall.
        status_seconds: Lifetime of ``Error`` messages.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        history_size: int = 50,
        status_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.command: Optional[str] = None
        self.input = LineInput()
        self.history: deque[str] = deque(maxlen=history_size)
        self.status = ""
        self._status_seconds = status_seconds
        self._clock = clock
        self._expires_at: Optional[float] = None
        self._recall: Optional[int] = None

    # ------------------------------------------------------------------ #
    # Input
    # ------------------------------------------------------------------ #

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        if self.command is None or state.input_mode != InputMode.COMMAND:
            return None
        if key.code == "enter":
            text = self.input.text
            if text and (not self.history or self.history[-1] != text):
                self.history.append(text)
            return Consumed(self._finish(state, text))
        if key.code == "esc":
            return Consumed(self._finish(state, None))
        if key.code == "up":
            self._recall_older()
        elif key.code == "down":
            self._recall_newer()
        else:
            self.input.handle(key)
        return Consumed()

    def _finish(self, state: State, text: Optional[str]) -> Action:
        command = self.command or ""
        self.command = None
        self._recall = None
        self.input.set("")
        state.input_mode = InputMode.NORMAL
        return FooterResult(command, text)

    def _recall_older(self) -> None:
        if not self.history:
            return
        self._recall = len(self.history) - 1 if self._recall is None else max(0, self._recall - 1)
        self.input.set(self.history[self._recall])

    def _recall_newer(self) -> None:
        if self._recall is None:
            return
        self._recall += 1
        if self._recall >= len(self.history):
            self._recall = None
            self.input.set("")
        else:
            self.input.set(self.history[self._recall])

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def update(self, action: Action, state: State) -> Optional[Action]:
        if isinstance(action, FocusFooter):
            self.command = action.command
            self.input.set(action.initial)
            self._recall = None
            state.input_mode = InputMode.COMMAND
        elif isinstance(action, StatusLine):
            self.show(action.text)
        elif isinstance(action, TimedStatusLine):
            self.show(action.text, action.seconds)
        elif isinstance(action, Error):
            get_output().error(action.message)
            self.show(f"Error: {action.message}", self._status_seconds)
        elif isinstance(action, Tick):
            if self._expires_at is not None and self._clock() >= self._expires_at:
                self.show("")
        return None

    def show(self, text: str, seconds: Optional[float] = None) -> None:
        self.status = text
        self._expires_at = None if seconds is None else self._clock() + seconds

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render(self, state: State) -> RenderableType:
        line = Text(no_wrap=True, overflow="ellipsis")
        line.append(f" {state.input_mode.value.upper()} ", style=_MODE_STYLES[state.input_mode])
        line.append(" ")
        if self.command is not None:
            text, cursor = self.input.text, self.input.cursor
            line.append(self.command, style="bold")
            line.append(text[:cursor])
            line.append(text[cursor:cursor + 1] or " ", style="reverse")
            line.append(text[cursor + 1:])
        else:
            line.append(self.status)
        return line
