"""Editable text buffers used by the footer and the session editors."""

from __future__ import annotations

from openapi_tui.events import Key


class LineInput:
    """Single-line buffer with a cursor.

    Args:
        text: Initial content; the cursor starts at its end.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.cursor = len(text)

    def set(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def handle(self, key: Key) -> bool:
        """Apply an editing key. Returns ``False`` for keys it does not edit with."""
        char = key.char
        if char is not None:
            self.text = self.text[: self.cursor] + char + self.text[self.cursor:]
            self.cursor += 1
        elif key.code == "backspace" and not key.ctrl:
            if self.cursor > 0:
                self.text = self.text[: self.cursor - 1] + self.text[self.cursor:]
                self.cursor -= 1
        elif key.code == "delete":
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1:]
        elif key.code == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key.code == "right":
            self.cursor = min(len(self.text), self.cursor + 1)
        elif key.code == "home" or (key.ctrl and key.code == "a"):
            self.cursor = 0
        elif key.code == "end" or (key.ctrl and key.code == "e"):
            self.cursor = len(self.text)
        elif key.ctrl and key.code == "u":
            self.text = self.text[self.cursor:]
            self.cursor = 0
        else:
            return False
        return True


class TextArea:
    """Multi-line buffer; ``enter`` splits the current line."""

    def __init__(self, text: str = "") -> None:
        self.set(text)

    def set(self, text: str) -> None:
        self.lines = text.split("\n")
        self.row = len(self.lines) - 1
        self.col = len(self.lines[self.row])

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def handle(self, key: Key) -> bool:
        """Apply an editing key. Returns ``False`` for keys it does not edit with."""
        line = self.lines[self.row]
        char = key.char
        if char is not None:
            self.lines[self.row] = line[: self.col] + char + line[self.col:]
            self.col += 1
        elif key.code == "tab":
            self.lines[self.row] = line[: self.col] + "  " + line[self.col:]
            self.col += 2
        elif key.code == "enter":
            self.lines[self.row] = line[: self.col]
            self.lines.insert(self.row + 1, line[self.col:])
            self.row += 1
            self.col = 0
        elif key.code == "backspace":
            if self.col > 0:
                self.lines[self.row] = line[: self.col - 1] + line[self.col:]
                self.col -= 1
            elif self.row > 0:
                previous = self.lines.pop(self.row - 1)
                self.row -= 1
                self.col = len(previous)
                self.lines[self.row] = previous + line
        elif key.code == "left":
            self.col = max(0, self.col - 1)
        elif key.code == "right":
            self.col = min(len(line), self.col + 1)
        elif key.code == "up":
            self.row = max(0, self.row - 1)
            self.col = min(self.col, len(self.lines[self.row]))
        elif key.code == "down":
            self.row = min(len(self.lines) - 1, self.row + 1)
            self.col = min(self.col, len(self.lines[self.row]))
        elif key.code == "home":
            self.col = 0
        elif key.code == "end":
            self.col = len(line)
        else:
            return False
        return True
