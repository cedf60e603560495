"""Terminal events fed into the dispatch loop, and handler responses.

The terminal adapter (:mod:`openapi_tui.tui`) translates whatever the
terminal library reports into these plain values so the core never imports
the terminal library.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from openapi_tui.actions import Action


@dataclass(frozen=True)
class Key:
    """A key press.

    Args:
        code: A single character (``"q"``, ``"G"``) or a named key
            (``"enter"``, ``"esc"``, ``"backspace"``, ``"up"``, ...).
        ctrl: Control was held.
        alt: Alt was held.
    """

    code: str
    ctrl: bool = False
    alt: bool = False

    @property
    def notation(self) -> str:
        """Key binding notation, e.g. ``<ctrl-c>`` or ``<enter>``."""
        modifiers = ("ctrl-" if self.ctrl else "") + ("alt-" if self.alt else "")
        return f"<{modifiers}{self.code}>"

    @property
    def char(self) -> Optional[str]:
        """The printable character, or ``None`` for named and modified keys."""
        if self.ctrl or self.alt or len(self.code) != 1:
            return None
        return self.code


@dataclass(frozen=True)
class MouseEvent:
    kind: str
    x: int
    y: int


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class TickEvent:
    pass


@dataclass(frozen=True)
class RenderEvent:
    pass


Event = Union[Key, MouseEvent, ResizeEvent, TickEvent, RenderEvent]


@dataclass(frozen=True)
class Consumed:
    """Returned by a handler that claims an event, optionally emitting one action."""

    action: Optional[Action] = None
