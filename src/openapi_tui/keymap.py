"""Key bindings: parse sequence notation and translate keys into actions.

Bindings map a key sequence to an action name from
:data:`~openapi_tui.actions.ACTION_NAMES`. A sequence is written as one or
more ``<...>`` tokens, each an optional ``ctrl-``/``alt-`` modifier plus a key
code: ``<q>``, ``<ctrl-c>``, ``<g><g>``, ``<enter>``.

Translation tries the key on its own first. Otherwise it is appended to the
keys pressed since the last tick and the accumulated chord is looked up, so a
multi-key binding has to be typed within one tick interval.
"""

from __future__ import annotations

import re
from typing import Optional

from openapi_tui.actions import ACTION_NAMES, Action, action_from_name
from openapi_tui.events import Key
from openapi_tui.exceptions import ConfigError

DEFAULT_KEYBINDINGS: dict[str, str] = {
    "<q>": "quit",
    "<ctrl-c>": "quit",
    "<ctrl-d>": "quit",
    "<ctrl-z>": "suspend",
}

_TOKEN = re.compile(r"<((?:ctrl-|alt-)*)([^<>]+?)>")


def parse_key_sequence(notation: str) -> tuple[Key, ...]:
    """Parse ``<ctrl-c>``-style notation into keys.

    Raises:
        ConfigError: If *notation* is empty or contains text outside tokens.
    """
    keys: list[Key] = []
    position = 0
    for match in _TOKEN.finditer(notation):
        if match.start() != position:
            break
        modifiers, code = match.group(1), match.group(2)
        keys.append(Key(code=code, ctrl="ctrl-" in modifiers, alt="alt-" in modifiers))
        position = match.end()
    if not keys or position != len(notation):
        raise ConfigError(f"Invalid key sequence: {notation!r}")
    return tuple(keys)


class Keymap:
    """Sequence-to-action table with chord accumulation.

    Args:
        bindings: Key sequence notation mapped to action names.

    Raises:
        ConfigError: For malformed sequences or unknown action names.
    """

    def __init__(self, bindings: dict[str, str]) -> None:
        self._bindings: dict[tuple[Key, ...], str] = {}
        for notation, name in bindings.items():
            if name not in ACTION_NAMES:
                raise ConfigError(
                    f"Unknown action {name!r} bound to {notation!r}. "
                    f"Known actions: {', '.join(sorted(ACTION_NAMES))}"
                )
            self._bindings[parse_key_sequence(notation)] = name
        self._pending: list[Key] = []

    @classmethod
    def from_config(cls, overrides: Optional[dict[str, str]] = None) -> Keymap:
        """Defaults merged with the user's ``keybindings`` config."""
        return cls({**DEFAULT_KEYBINDINGS, **(overrides or {})})

    @property
    def pending(self) -> tuple[Key, ...]:
        return tuple(self._pending)

    def lookup(self, sequence: tuple[Key, ...]) -> Optional[str]:
        return self._bindings.get(sequence)

    def translate(self, key: Key) -> Optional[Action]:
        """Return the action bound to *key* or to the chord it completes."""
        name = self._bindings.get((key,))
        if name is not None:
            self._pending.clear()
            return action_from_name(name)

        self._pending.append(key)
        chord = tuple(self._pending)
        name = self._bindings.get(chord)
        if name is not None:
            self._pending.clear()
            return action_from_name(name)
        if not self._is_prefix(chord):
            self._pending = [key] if self._is_prefix((key,)) else []
        return None

    def clear_pending(self) -> None:
        """Forget the partial chord; called on every tick."""
        self._pending.clear()

    def _is_prefix(self, chord: tuple[Key, ...]) -> bool:
        size = len(chord)
        return any(len(seq) > size and seq[:size] == chord for seq in self._bindings)
