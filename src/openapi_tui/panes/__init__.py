"""Focusable regions of a page.

Every pane implements the same small protocol (:class:`Pane`): lifecycle hooks
(``init``, ``focus``, ``unfocus``), input handling (``handle_key_event``),
action handling (``update``) and ``render``, which returns a Rich renderable.
The set of panes is fixed; pages compose them.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.panel import Panel
from rich.text import Text

from openapi_tui.actions import Action, StatusLine
from openapi_tui.events import Consumed, Key
from openapi_tui.models import HTTPMethod
from openapi_tui.state import State

METHOD_STYLES: dict[HTTPMethod, str] = {
    HTTPMethod.GET: "bold green",
    HTTPMethod.POST: "bold yellow",
    HTTPMethod.PUT: "bold blue",
    HTTPMethod.PATCH: "bold cyan",
    HTTPMethod.DELETE: "bold red",
    HTTPMethod.HEAD: "bold magenta",
    HTTPMethod.OPTIONS: "bold magenta",
    HTTPMethod.TRACE: "bold magenta",
}


class Pane:
    """Base class of every pane.

    Subclasses override only the hooks they need; the defaults ignore input
    and actions. ``status_hint`` is shown on the status line when the pane
    gains focus.
    """

    title: str = ""
    status_hint: str = ""

    def __init__(self) -> None:
        self.focused = False

    def init(self, state: State) -> None:
        """Called once when the owning page is built."""

    def focus(self, state: State) -> Optional[Action]:
        self.focused = True
        if self.status_hint:
            return StatusLine(self.status_hint)
        return None

    def unfocus(self, state: State) -> None:
        self.focused = False

    def handle_key_event(self, key: Key, state: State) -> Optional[Consumed]:
        """Claim *key* by returning :class:`Consumed`, or ``None`` to pass."""
        return None

    def update(self, action: Action, state: State) -> Optional[Action]:
        """React to *action*; may return one follow-up action."""
        return None

    def render(self, state: State) -> RenderableType:
        return self.frame(Text(""))

    def frame(self, body: RenderableType, subtitle: Optional[str] = None) -> Panel:
        """Wrap *body* in a border that reflects focus."""
        return Panel(
            body,
            title=self.title,
            title_align="left",
            subtitle=subtitle,
            subtitle_align="right",
            border_style="green" if self.focused else "bright_black",
        )


def tab_bar(titles: list[str], selected: Optional[int]) -> Text:
    """One-line tab strip with the selected tab highlighted."""
    bar = Text()
    for index, title in enumerate(titles):
        if index:
            bar.append(" | ", style="bright_black")
        style = "reverse bold" if index == selected else ""
        bar.append(f" {index + 1}:{title} ", style=style)
    return bar


def method_label(method: HTTPMethod) -> Text:
    return Text(f"{method.value.upper():<7}", style=METHOD_STYLES.get(method, "bold"))


def window(count: int, cursor: int, height: int) -> range:
    """Indexes of a *height*-line window that keeps *cursor* visible."""
    if height <= 0 or count <= height:
        return range(count)
    start = min(max(0, cursor - height // 2), count - height)
    return range(start, start + height)


class ScrollView:
    """Renders only the lines that fit, keeping the cursor line in view.

    Args:
        lines: One :class:`~rich.text.Text` per display line.
        cursor: Index of the line that must stay visible.
        header: Lines pinned above the scrolled region (tab bars).
    """

    def __init__(self, lines: list[Text], cursor: int = 0, header: Optional[list[Text]] = None) -> None:
        self.lines = lines
        self.cursor = cursor
        self.header = header or []

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        height = (options.height or len(self.lines) + len(self.header)) - len(self.header)
        for line in self.header:
            yield _single_line(line)
        for index in window(len(self.lines), self.cursor, height):
            yield _single_line(self.lines[index])


def _single_line(line: Text) -> Text:
    line.no_wrap = True
    line.overflow = "ellipsis"
    return line
