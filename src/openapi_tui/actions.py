"""Actions exchanged on the dispatch bus.

Every action is a frozen dataclass. Actions are split into two families:

* :class:`NavigationAction` -- focus, cursor and view changes that carry no
  data beyond an optional index.
* :class:`CommandAction` -- requests with a payload (footer results, session
  commands, status messages).

``:`` footer input is parsed with :func:`parse_command` into a structured
:class:`Command` rather than matched as a raw string.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Callable, Optional


class Action:
    """Base class of every bus action."""


class NavigationAction(Action):
    pass


class CommandAction(Action):
    pass


# --- Navigation ---


@dataclass(frozen=True)
class Tick(NavigationAction):
    pass


@dataclass(frozen=True)
class Render(NavigationAction):
    pass


@dataclass(frozen=True)
class Resize(NavigationAction):
    width: int
    height: int


@dataclass(frozen=True)
class Suspend(NavigationAction):
    pass


@dataclass(frozen=True)
class Resume(NavigationAction):
    pass


@dataclass(frozen=True)
class Quit(NavigationAction):
    pass


@dataclass(frozen=True)
class Update(NavigationAction):
    """The catalog selection or filter changed; views derived from it refresh."""


@dataclass(frozen=True)
class FocusNext(NavigationAction):
    pass


@dataclass(frozen=True)
class FocusPrev(NavigationAction):
    pass


@dataclass(frozen=True)
class Up(NavigationAction):
    pass


@dataclass(frozen=True)
class Down(NavigationAction):
    pass


@dataclass(frozen=True)
class Go(NavigationAction):
    pass


@dataclass(frozen=True)
class Back(NavigationAction):
    pass


@dataclass(frozen=True)
class Submit(NavigationAction):
    pass


@dataclass(frozen=True)
class Tab(NavigationAction):
    """Select tab *index* (0-based) in the focused pane."""

    index: int


@dataclass(frozen=True)
class TabNext(NavigationAction):
    pass


@dataclass(frozen=True)
class TabPrev(NavigationAction):
    pass


@dataclass(frozen=True)
class ToggleFullScreen(NavigationAction):
    pass


@dataclass(frozen=True)
class Noop(NavigationAction):
    pass


@dataclass(frozen=True)
class Help(NavigationAction):
    pass


# --- Commands ---


@dataclass(frozen=True)
class FocusFooter(CommandAction):
    """Open the footer input for *command* (``"/"`` or ``":"``)."""

    command: str
    initial: str = ""


@dataclass(frozen=True)
class FooterResult(CommandAction):
    """Footer input finished; *argument* is ``None`` when cancelled."""

    command: str
    argument: Optional[str] = None


@dataclass(frozen=True)
class NewCall(CommandAction):
    """Open a call for *key*; ``None`` means the catalog's active operation."""

    key: Optional[str] = None


@dataclass(frozen=True)
class HangUp(CommandAction):
    """Close the top session; with a *key* it is parked in history."""

    key: Optional[str] = None


@dataclass(frozen=True)
class Dial(CommandAction):
    pass


@dataclass(frozen=True)
class History(CommandAction):
    pass


@dataclass(frozen=True)
class CloseHistory(CommandAction):
    pass


@dataclass(frozen=True)
class StatusLine(CommandAction):
    text: str


@dataclass(frozen=True)
class TimedStatusLine(CommandAction):
    text: str
    seconds: float = 3.0


@dataclass(frozen=True)
class OpenRequestPayload(CommandAction):
    path: str


@dataclass(frozen=True)
class Error(CommandAction):
    message: str


# --- Names used by key bindings ---


ACTION_NAMES: dict[str, Callable[[], Action]] = {
    "quit": Quit,
    "suspend": Suspend,
    "resume": Resume,
    "focus_next": FocusNext,
    "focus_prev": FocusPrev,
    "up": Up,
    "down": Down,
    "go": Go,
    "back": Back,
    "submit": Submit,
    "tab_next": TabNext,
    "tab_prev": TabPrev,
    "toggle_fullscreen": ToggleFullScreen,
    "noop": Noop,
    "help": Help,
    "new_call": NewCall,
    "hang_up": HangUp,
    "dial": Dial,
    "history": History,
}


def action_from_name(name: str) -> Optional[Action]:
    """Instantiate the payload-free action bound to *name*."""
    factory = ACTION_NAMES.get(name)
    return factory() if factory is not None else None


# --- ':' commands ---

_VERB_ALIASES = {
    "q": "quit",
    "quit": "quit",
    "r": "request",
    "request": "request",
    "history": "history",
    "help": "help",
}


@dataclass(frozen=True)
class Command:
    """A parsed ``:`` command. ``verb`` is canonical for known aliases."""

    verb: str
    arguments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def known(self) -> bool:
        return self.verb in _VERB_ALIASES.values()


def parse_command(text: str) -> Command:
    """Parse ``:`` footer input such as ``request open ./body.json``.

    Quoted arguments are honoured; unbalanced quotes fall back to
    whitespace splitting.
    """
    try:
        tokens = shlex.split(text)
    except ValueError:
        tokens = text.split()
    if not tokens:
        return Command(verb="")
    verb = _VERB_ALIASES.get(tokens[0], tokens[0])
    return Command(verb=verb, arguments=tuple(tokens[1:]))
