"""Tests for key binding parsing, translation and ':' command parsing."""

from __future__ import annotations

import pytest

from openapi_tui.actions import Command, History, Quit, Suspend, ToggleFullScreen, parse_command
from openapi_tui.events import Key
from openapi_tui.exceptions import ConfigError
from openapi_tui.keymap import Keymap, parse_key_sequence


class TestParseKeySequence:
    def test_single(self) -> None:
        assert parse_key_sequence("<q>") == (Key("q"),)

    def test_modifiers(self) -> None:
        assert parse_key_sequence("<ctrl-alt-x>") == (Key("x", ctrl=True, alt=True),)

    def test_named_and_chord(self) -> None:
        assert parse_key_sequence("<g><enter>") == (Key("g"), Key("enter"))

    @pytest.mark.parametrize("notation", ["", "q", "<q>x", "x<q>", "<>"])
    def test_invalid(self, notation: str) -> None:
        with pytest.raises(ConfigError, match="Invalid key sequence"):
            parse_key_sequence(notation)

    def test_notation_round_trip(self) -> None:
        key = Key("c", ctrl=True)
        assert parse_key_sequence(key.notation) == (key,)


class TestKeymap:
    def test_defaults(self) -> None:
        keymap = Keymap.from_config()
        assert keymap.translate(Key("q")) == Quit()
        assert keymap.translate(Key("c", ctrl=True)) == Quit()
        assert keymap.translate(Key("z", ctrl=True)) == Suspend()

    def test_override_merges(self) -> None:
        keymap = Keymap.from_config({"<q>": "noop", "<H>": "history"})
        assert keymap.translate(Key("H")) == History()
        assert keymap.translate(Key("d", ctrl=True)) == Quit()
        assert keymap.lookup((Key("q"),)) == "noop"

    def test_unknown_action(self) -> None:
        with pytest.raises(ConfigError, match="Unknown action 'explode'"):
            Keymap({"<x>": "explode"})

    def test_chord(self) -> None:
        keymap = Keymap({"<z><z>": "toggle_fullscreen"})
        assert keymap.translate(Key("z")) is None
        assert keymap.pending == (Key("z"),)
        assert keymap.translate(Key("z")) == ToggleFullScreen()
        assert keymap.pending == ()

    def test_single_key_wins_over_chord(self) -> None:
        keymap = Keymap({"<x>": "quit", "<x><y>": "history"})
        assert keymap.translate(Key("x")) == Quit()
        assert keymap.pending == ()

    def test_broken_chord_restarts(self) -> None:
        keymap = Keymap({"<a><b>": "history"})
        keymap.translate(Key("a"))
        assert keymap.translate(Key("a")) is None
        assert keymap.pending == (Key("a"),)
        assert keymap.translate(Key("b")) == History()

    def test_unbound_key_not_kept(self) -> None:
        keymap = Keymap({"<a><b>": "history"})
        keymap.translate(Key("x"))
        assert keymap.pending == ()

    def test_clear_pending(self) -> None:
        keymap = Keymap({"<a><b>": "history"})
        keymap.translate(Key("a"))
        keymap.clear_pending()
        assert keymap.translate(Key("b")) is None


class TestParseCommand:
    @pytest.mark.parametrize("text,verb", [("q", "quit"), ("quit", "quit"), ("r", "request"), ("history", "history")])
    def test_aliases(self, text: str, verb: str) -> None:
        command = parse_command(text)
        assert command.verb == verb
        assert command.known

    def test_arguments(self) -> None:
        assert parse_command("request open ./body.json") == Command("request", ("open", "./body.json"))

    def test_quoted_argument(self) -> None:
        assert parse_command('r open "my body.json"').arguments == ("open", "my body.json")

    def test_unbalanced_quotes_fall_back(self) -> None:
        assert parse_command('r open "oops').arguments == ("open", '"oops')

    def test_unknown(self) -> None:
        command = parse_command("frobnicate now")
        assert command.verb == "frobnicate"
        assert not command.known

    def test_empty(self) -> None:
        assert parse_command("   ").verb == ""
