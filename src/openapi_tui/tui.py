"""Textual adapter: terminal I/O for the dispatcher.

Textual owns the terminal and the asyncio loop. This module only translates
its key, resize and timer callbacks into :mod:`openapi_tui.events` values,
steps the :class:`~openapi_tui.dispatcher.Dispatcher`, and paints whatever
Rich renderable the dispatcher composes. No application logic lives here.
"""

from __future__ import annotations

from typing import Optional

from rich.console import RenderableType
from textual import events
from textual.app import App, ComposeResult
from textual.widget import Widget

from openapi_tui.actions import Resume
from openapi_tui.client.pipeline import RequestPipeline
from openapi_tui.dispatcher import Dispatcher
from openapi_tui.events import Event, Key, ResizeEvent, TickEvent
from openapi_tui.models import GlobalConfig, LaunchOptions, ParsedSpec
from openapi_tui.output import get_output
from openapi_tui.state import State

_NAMED_KEYS = {
    "escape": "esc",
    "enter": "enter",
    "tab": "tab",
    "shift+tab": "backtab",
    "backspace": "backspace",
    "delete": "delete",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "pageup": "pageup",
    "pagedown": "pagedown",
}


def translate_key(event: events.Key) -> Optional[Key]:
    """Map a Textual key event to a core :class:`~openapi_tui.events.Key`."""
    name = event.key
    if name in _NAMED_KEYS:
        return Key(_NAMED_KEYS[name])
    if event.is_printable and event.character:
        return Key(event.character)

    ctrl = alt = False
    parts = name.split("+")
    for modifier in parts[:-1]:
        if modifier == "ctrl":
            ctrl = True
        elif modifier == "alt":
            alt = True
        elif modifier != "shift":
            return None
    code = _NAMED_KEYS.get(parts[-1], parts[-1])
    if not code:
        return None
    return Key(code, ctrl=ctrl, alt=alt)


class DispatchView(Widget):
    """Full-screen widget that paints the dispatcher's renderable."""

    DEFAULT_CSS = """
    DispatchView {
        height: 1fr;
        width: 1fr;
    }
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher

    def render(self) -> RenderableType:
        return self.dispatcher.render()


class OpenapiTuiApp(App[None], inherit_bindings=False):
    """Hosts the dispatcher inside Textual's event loop.

    Args:
        dispatcher: The configured dispatcher (its pipeline is started on
            mount and closed on unmount).
        tick_rate: Ticks per second.
    """

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, dispatcher: Dispatcher, tick_rate: float = 4.0) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.tick_rate = tick_rate
        self.failure: Optional[BaseException] = None
        self._view = DispatchView(dispatcher)

    def compose(self) -> ComposeResult:
        yield self._view

    async def on_mount(self) -> None:
        await self.dispatcher.pipeline.start()
        self.set_interval(1 / self.tick_rate, self._tick)

    async def on_unmount(self) -> None:
        await self.dispatcher.pipeline.aclose()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        key = translate_key(event)
        if key is not None:
            self._step(key)

    def on_resize(self, event: events.Resize) -> None:
        self._step(ResizeEvent(event.size.width, event.size.height))

    def _tick(self) -> None:
        self._step(TickEvent())

    def _step(self, event: Event) -> None:
        try:
            self.dispatcher.step(event)
            if self.dispatcher.suspend_requested:
                self.action_suspend_process()
                self.dispatcher.dispatch(Resume())
        except Exception as exc:
            # re-raised by run_tui once the terminal is restored
            self.failure = exc
            self.exit()
            return
        if not self.dispatcher.state.running:
            self.exit()
            return
        self._view.refresh()


def run_tui(document: ParsedSpec, config: GlobalConfig, options: LaunchOptions) -> None:
    """Run the interactive UI until the user quits.

    Raises:
        Exception: Whatever a handler raised; the terminal is restored first.
    """
    state = State.from_document(document, options.base_url)
    pipeline = RequestPipeline(config.request, dry_run=options.dry_run)
    dispatcher = Dispatcher(state, pipeline, config)
    get_output().debug(
        f"starting UI: {len(document.operations)} operations, base URL {state.base_url()}"
    )
    app = OpenapiTuiApp(dispatcher, config.tick_rate)
    app.run()
    if app.failure is not None:
        raise app.failure
