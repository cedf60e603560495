"""Pages: fixed, ordered sets of panes with one focused pane.

A page routes keys to its focused pane first; keys the pane passes on are
translated by the page's Normal-mode key table. Actions are offered to every
pane, and panes that act only while focused check that themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import RenderableType

from openapi_tui.actions import (
    Action,
    Back,
    Down,
    FocusFooter,
    FocusNext,
    FocusPrev,
    Go,
    Help,
    Submit,
    Tab,
    TabNext,
    TabPrev,
    ToggleFullScreen,
    Up,
)
from openapi_tui.events import Consumed, Key
from openapi_tui.panes import Pane
from openapi_tui.state import InputMode, State

_NORMAL_KEYS: dict[str, type[Action]] = {
    "l": FocusNext,
    "right": FocusNext,
    "tab": FocusNext,
    "h": FocusPrev,
    "left": FocusPrev,
    "backtab": FocusPrev,
    "j": Down,
    "down": Down,
    "k": Up,
    "up": Up,
    "g": Go,
    "b": Back,
    "backspace": Back,
    "enter": Submit,
    "f": ToggleFullScreen,
    "]": TabNext,
    "[": TabPrev,
    "?": Help,
}


class Page(ABC):
    """Base class for pages.

    Args:
        panes: Focusable panes in focus order.
    """

    def __init__(self, panes: list[Pane]) -> None:
        self.panes = panes
        self.focus_index = 0
        self.fullscreen = False

    @property
    def focused_pane(self) -> Pane:
        return self.panes[self.focus_index]

    def init(self, state: State) -> Optional[Action]:
        for pane in self.panes:
            pane.init(state)
        return self.focused_pane.focus(state)

    # ------------------------------------------------------------------ #
    # Focus
    # ------------------------------------------------------------------ #

    def focus_next(self, state: State) -> Optional[Action]:
        return self._move_focus(1, state)

    def focus_prev(self, state: State) -> Optional[Action]:
        return self._move_focus(-1, state)

    def _move_focus(self, step: int, state: State) -> Optional[Action]:
        if self.fullscreen or len(self.panes) < 2:
            return None
        self.focused_pane.unfocus(state)
        self.focus_index = (self.focus_index + step) % len(self.panes)
        return self.focused_pane.focus(state)

    def toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen

    # ------------------------------------------------------------------ #
    # Routing
    # ------------------------------------------------------------------ #

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        response = self.focused_pane.handle_key_event(key, state)
        if response is not None:
            return response
        if state.input_mode != InputMode.NORMAL:
            return None
        action = self.key_action(key, state)
        return Consumed(action) if action is not None else None

    def key_action(self, key: Key, state: State) -> Optional[Action]:
        """Normal-mode key table shared by all pages."""
        if key.ctrl or key.alt:
            return None
        code = key.code
        if len(code) == 1 and "1" <= code <= "9":
            return Tab(int(code) - 1)
        if code == "/":
            return FocusFooter("/", state.catalog.filter_text)
        if code == ":":
            return FocusFooter(":")
        factory = _NORMAL_KEYS.get(code)
        return factory() if factory is not None else None

    def update(self, action: Action, state: State) -> list[Action]:
        follow_ups: list[Action] = []
        focus_action: Optional[Action] = None
        if isinstance(action, FocusNext):
            focus_action = self.focus_next(state)
        elif isinstance(action, FocusPrev):
            focus_action = self.focus_prev(state)
        elif isinstance(action, ToggleFullScreen):
            self.toggle_fullscreen()
        if focus_action is not None:
            follow_ups.append(focus_action)

        for pane in self.panes:
            follow_up = pane.update(action, state)
            if follow_up is not None:
                follow_ups.append(follow_up)
        return follow_ups

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render(self, state: State) -> RenderableType:
        if self.fullscreen:
            return self.focused_pane.render(state)
        return self.layout(state)

    @abstractmethod
    def layout(self, state: State) -> RenderableType:
        """Compose the non-fullscreen arrangement of the panes."""
