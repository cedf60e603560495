"""The action bus and dispatch loop.

One iteration of the loop takes a terminal event, offers it to the focus
chain and then drains the action queue completely:

1. **Focus chain** -- the footer while in ``COMMAND`` mode (it claims every
   key), else the popup if one is open, else the active page (the phone page
   of the top session, or the home page). A handler either consumes the key,
   optionally emitting one action, or passes.
2. **Keymap** -- a key nobody consumed is translated through the configured
   bindings, but only in ``NORMAL`` mode.
3. **Drain** -- each queued action goes to the dispatcher's own handlers,
   then the footer, then the popup or the active page. Follow-ups are
   appended to the same queue and processed before the next event.

A handler that re-emits the action it received would loop forever; that is
reported as :class:`~openapi_tui.exceptions.DispatchError`.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Optional

from rich.align import Align
from rich.console import RenderableType
from rich.layout import Layout

from openapi_tui.actions import (
    Action,
    CloseHistory,
    Dial,
    Error,
    FooterResult,
    HangUp,
    Help,
    History,
    NewCall,
    OpenRequestPayload,
    Quit,
    Render,
    Resize,
    Resume,
    StatusLine,
    Suspend,
    Tick,
    TimedStatusLine,
    Update,
    parse_command,
)
from openapi_tui.client.pipeline import RequestPipeline
from openapi_tui.events import Consumed, Event, Key, RenderEvent, ResizeEvent, TickEvent
from openapi_tui.exceptions import DispatchError, RequestBuildError
from openapi_tui.keymap import Keymap
from openapi_tui.models import GlobalConfig
from openapi_tui.output import get_output
from openapi_tui.pages import Page
from openapi_tui.pages.home import HomePage
from openapi_tui.pages.phone import PhonePage
from openapi_tui.panes import Pane
from openapi_tui.panes.footer import FooterPane
from openapi_tui.panes.history import HistoryPane
from openapi_tui.request import build_request, missing_required
from openapi_tui.session import SessionManager
from openapi_tui.state import InputMode, State

HELP_TEXT = (
    "[/ filter] [: command] [enter → call] [esc → hang up] "
    "[h,l → focus] [g,b → go/back] [f → fullscreen] [q → quit]"
)

_POPUP_WIDTH = 72
_POPUP_HEIGHT = 16


def _as_list(action: Optional[Action]) -> list[Action]:
    return [action] if action is not None else []


class Dispatcher:
    """Owns the state, the pages and the action queue.

    Args:
        state: The shared application state.
        pipeline: Executes dialed requests.
        config: Global configuration (key bindings, history limit, ...).
        keymap: Overrides the keymap built from *config*.
        clock: Monotonic time source for timed status messages.
    """

    def __init__(
        self,
        state: State,
        pipeline: RequestPipeline,
        config: Optional[GlobalConfig] = None,
        keymap: Optional[Keymap] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = config or GlobalConfig()
        self.state = state
        self.pipeline = pipeline
        self.keymap = keymap or Keymap.from_config(config.keybindings)
        self.sessions = SessionManager(config.history_limit)
        self.footer = FooterPane(config.command_history_size, config.status_line_seconds, clock)
        self.home = HomePage()
        self.phone: Optional[PhonePage] = None
        self.popup: Optional[Pane] = None
        self.queue: deque[Action] = deque()
        self.suspend_requested = False
        self._status_seconds = config.status_line_seconds

        self.footer.init(state)
        self.queue.extend(_as_list(self.home.init(state)))
        self.drain()

    @property
    def active_page(self) -> Page:
        return self.phone if self.phone is not None else self.home

    # ------------------------------------------------------------------ #
    # Loop
    # ------------------------------------------------------------------ #

    def step(self, event: Event) -> None:
        """Handle one event and drain every resulting action."""
        self.handle_event(event)
        self.drain()

    def dispatch(self, action: Action) -> None:
        """Queue *action* from outside the focus chain and drain."""
        self.queue.append(action)
        self.drain()

    def handle_event(self, event: Event) -> None:
        if isinstance(event, TickEvent):
            self.queue.append(Tick())
        elif isinstance(event, RenderEvent):
            self.queue.append(Render())
        elif isinstance(event, ResizeEvent):
            self.queue.append(Resize(event.width, event.height))
        elif isinstance(event, Key):
            self._handle_key(event)

    def _handle_key(self, key: Key) -> None:
        response = self._route_key(key)
        if response is not None:
            self.queue.extend(_as_list(response.action))
            return
        if self.state.input_mode == InputMode.NORMAL:
            self.queue.extend(_as_list(self.keymap.translate(key)))

    def _route_key(self, key: Key) -> Optional[Consumed]:
        if self.state.input_mode == InputMode.COMMAND:
            return self.footer.handle_key_event(key, self.state)
        if self.popup is not None:
            return self.popup.handle_key_event(key, self.state)
        return self.active_page.handle_key_event(key, self.state)

    def drain(self) -> None:
        """Process queued actions, including follow-ups, until none remain.

        Raises:
            DispatchError: If a handler returns the action it was given.
        """
        while self.queue:
            action = self.queue.popleft()
            if not isinstance(action, (Tick, Render)):
                get_output().debug(f"action: {action}")
            for follow_up in self._route_action(action):
                if follow_up == action:
                    raise DispatchError(f"{type(action).__name__} re-emitted by its own handler")
                self.queue.append(follow_up)

    def _route_action(self, action: Action) -> list[Action]:
        follow_ups = self._handle(action)
        follow_ups.extend(_as_list(self.footer.update(action, self.state)))
        if self.popup is not None:
            follow_ups.extend(_as_list(self.popup.update(action, self.state)))
        else:
            follow_ups.extend(self.active_page.update(action, self.state))
        return follow_ups

    # ------------------------------------------------------------------ #
    # Dispatcher handlers
    # ------------------------------------------------------------------ #

    def _handle(self, action: Action) -> list[Action]:
        if isinstance(action, Tick):
            return self._tick()
        if isinstance(action, Quit):
            self.state.running = False
        elif isinstance(action, Suspend):
            self.suspend_requested = True
        elif isinstance(action, Resume):
            self.suspend_requested = False
        elif isinstance(action, NewCall):
            return self._new_call(action.key)
        elif isinstance(action, HangUp):
            return self._hang_up(action.key)
        elif isinstance(action, History):
            return self._open_history()
        elif isinstance(action, CloseHistory):
            self.popup = None
        elif isinstance(action, Dial):
            return self._dial()
        elif isinstance(action, FooterResult):
            return self._footer_result(action)
        elif isinstance(action, Help):
            return [TimedStatusLine(HELP_TEXT, self._status_seconds * 3)]
        return []

    def _tick(self) -> list[Action]:
        self.keymap.clear_pending()
        notices: list[Action] = []
        for key, record in self.pipeline.deliver(self.state.responses):
            if record.failed:
                notices.append(TimedStatusLine(f"{key}: {record.error}", self._status_seconds))
            else:
                notices.append(TimedStatusLine(f"{key}: {record.status} {record.reason}".rstrip(), self._status_seconds))
        return notices

    def _new_call(self, key: Optional[str]) -> list[Action]:
        catalog = self.state.catalog
        operation = catalog.lookup(key) if key is not None else catalog.active()
        if operation is None:
            message = f"Unknown operation: {key}" if key is not None else "No operation selected"
            return [TimedStatusLine(message, self._status_seconds)]

        self.popup = None
        top = self.sessions.top()
        if top is not None and top.operation_key == operation.key:
            return []
        self.sessions.new_call(operation)
        return self._show_top_session()

    def _hang_up(self, key: Optional[str]) -> list[Action]:
        if self.sessions.top() is None:
            return []
        if self.phone is not None:
            # commits an edit in progress
            self.phone.focused_pane.unfocus(self.state)
        self.state.input_mode = InputMode.NORMAL
        self.sessions.hang_up(key)
        return self._show_top_session()

    def _show_top_session(self) -> list[Action]:
        """Rebuild the phone page for the session now on top of the stack."""
        top = self.sessions.top()
        if top is None:
            self.phone = None
            return _as_list(self.home.focused_pane.focus(self.state))
        operation = self.state.catalog.lookup(top.operation_key)
        if operation is None:
            raise DispatchError(f"Session for unknown operation {top.operation_key}")
        self.phone = PhonePage(top, operation)
        return _as_list(self.phone.init(self.state))

    def _open_history(self) -> list[Action]:
        entries = []
        for key in self.sessions.history.keys():
            operation = self.state.catalog.lookup(key)
            if operation is not None:
                entries.append(operation)
        if not entries:
            return [TimedStatusLine("No suspended sessions", self._status_seconds)]
        self.popup = HistoryPane(entries)
        return _as_list(self.popup.focus(self.state))

    def _dial(self) -> list[Action]:
        session = self.sessions.top()
        if session is None:
            return [TimedStatusLine("No active call: select an operation and press enter", self._status_seconds)]
        operation = self.state.catalog.lookup(session.operation_key)
        if operation is None:
            return [Error(f"Unknown operation: {session.operation_key}")]

        try:
            request = build_request(session.draft, operation, self.state.base_url(operation))
        except RequestBuildError as exc:
            return [Error(str(exc))]

        self.pipeline.dial(session.operation_key, request)
        missing = missing_required(session.draft, operation)
        if missing:
            return [
                TimedStatusLine(
                    f"Dialing {request.method} {request.url} with required values unset: "
                    + ", ".join(missing),
                    self._status_seconds,
                )
            ]
        return [StatusLine(f"Dialing {request.method} {request.url} ...")]

    def _footer_result(self, action: FooterResult) -> list[Action]:
        if action.argument is None:
            return []
        if action.command == "/":
            self.state.catalog.set_filter(action.argument)
            return [Update()]
        if action.command == ":":
            return self._run_command(action.argument)
        return []

    def _run_command(self, text: str) -> list[Action]:
        command = parse_command(text)
        if command.verb == "":
            return []
        if command.verb == "quit":
            return [Quit()]
        if command.verb == "history":
            return [History()]
        if command.verb == "help":
            return [Help()]
        if command.verb == "request":
            if not command.arguments:
                return [NewCall()]
            if command.arguments[0] == "open" and len(command.arguments) == 2:
                if self.sessions.top() is None:
                    return [TimedStatusLine("No active call to load a payload into", self._status_seconds)]
                return [OpenRequestPayload(command.arguments[1])]
            return [TimedStatusLine("Usage: :request [open <file>]", self._status_seconds)]
        return [TimedStatusLine(f"Unknown command: {command.verb}", self._status_seconds)]

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render(self) -> RenderableType:
        """Compose the active page, the popup (if any) and the footer."""
        if self.popup is not None:
            body: RenderableType = Align.center(
                self.popup.render(self.state),
                vertical="middle",
                width=_POPUP_WIDTH,
                height=_POPUP_HEIGHT,
            )
        else:
            body = self.active_page.render(self.state)
        root = Layout()
        root.split_column(Layout(body, name="page"), Layout(self.footer.render(self.state), size=1))
        return root
