"""End-to-end tests of the dispatch loop, driven by key events."""

from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from openapi_tui.actions import Noop, TimedStatusLine
from openapi_tui.client.pipeline import RequestPipeline
from openapi_tui.dispatcher import HELP_TEXT, Dispatcher
from openapi_tui.events import Key, TickEvent
from openapi_tui.exceptions import DispatchError
from openapi_tui.models import RequestConfig
from openapi_tui.panes.apis import ApisPane
from openapi_tui.panes.history import HistoryPane
from openapi_tui.panes.tags import TagsPane
from openapi_tui.state import InputMode, State


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def press(dispatcher: Dispatcher, *codes: str) -> None:
    for code in codes:
        dispatcher.step(Key(code))


def type_text(dispatcher: Dispatcher, text: str) -> None:
    for char in text:
        dispatcher.step(Key(char))


def render_text(dispatcher: Dispatcher) -> str:
    console = Console(record=True, width=140, height=40, file=io.StringIO())
    console.print(dispatcher.render())
    return console.export_text()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dispatcher(state: State, clock: FakeClock, quiet_output) -> Dispatcher:
    return Dispatcher(state, RequestPipeline(dry_run=True), clock=clock)


# ---------------------------------------------------------------------------
# Home page
# ---------------------------------------------------------------------------


class TestHome:
    def test_initial_focus_hint(self, dispatcher: Dispatcher) -> None:
        assert dispatcher.home.focused_pane is dispatcher.home.apis
        assert dispatcher.footer.status == ApisPane.status_hint

    def test_down_moves_selection(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "j")
        active = state.catalog.active()
        assert active is not None and active.key == "createPet"
        press(dispatcher, "k", "k")
        active = state.catalog.active()
        assert active is not None and active.key == "onNewPet"

    def test_focus_cycles_with_hint(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "l")
        assert dispatcher.home.focused_pane is dispatcher.home.tags
        assert dispatcher.home.apis.focused is False
        assert dispatcher.footer.status == TagsPane.status_hint
        press(dispatcher, "h", "h")
        assert dispatcher.home.focused_pane is dispatcher.home.response

    def test_tag_pane_restricts_catalog(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "l", "j")
        assert state.catalog.active_tag == "pets"
        assert len(state.catalog.visible) == 5
        press(dispatcher, "j")
        assert [e.key for e in state.catalog.visible] == ["getInventory"]
        press(dispatcher, "j")
        assert state.catalog.active_tag is None

    def test_fullscreen_suspends_focus_movement(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "f", "l")
        assert dispatcher.home.fullscreen is True
        assert dispatcher.home.focused_pane is dispatcher.home.apis
        press(dispatcher, "f", "l")
        assert dispatcher.home.focused_pane is dispatcher.home.tags

    def test_schema_drill_and_back(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "j", "l", "l", "l")
        request = dispatcher.home.request
        assert dispatcher.home.focused_pane is request
        assert request.navigator is not None

        press(dispatcher, "j", "g")
        assert request.navigator.name_history == ["NewPet"]
        press(dispatcher, "b")
        assert request.navigator.name_history == []
        assert request.navigator.cursor == 1

    def test_schema_panes_follow_selection(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "j", "j")
        titles = [title for title, _ in dispatcher.home.response.tabs]
        assert titles == ["200 application/json", "404 application/json"]

    def test_help(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "?")
        assert dispatcher.footer.status == HELP_TEXT

    def test_q_quits(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "q")
        assert state.running is False


# ---------------------------------------------------------------------------
# Footer input
# ---------------------------------------------------------------------------


class TestFooterInput:
    def test_filter(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "/")
        assert state.input_mode == InputMode.COMMAND
        type_text(dispatcher, "store")
        press(dispatcher, "enter")
        assert state.input_mode == InputMode.NORMAL
        assert state.catalog.filter_text == "store"
        assert [e.key for e in state.catalog.visible] == ["getInventory"]

    def test_filter_escape_keeps_previous(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "/")
        type_text(dispatcher, "store")
        press(dispatcher, "esc")
        assert state.catalog.filter_text == ""
        assert state.input_mode == InputMode.NORMAL

    def test_command_mode_bypasses_keymap(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "/", "q")
        assert state.running is True
        assert dispatcher.footer.input.text == "q"

    def test_colon_quit(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, ":", "q", "enter")
        assert state.running is False

    def test_unknown_command(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, ":")
        type_text(dispatcher, "bogus")
        press(dispatcher, "enter")
        assert dispatcher.footer.status == "Unknown command: bogus"

    def test_request_command_opens_call(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, ":", "r", "enter")
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.operation_key == "listPets"

    def test_request_open_without_call(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, ":")
        type_text(dispatcher, "request open body.json")
        press(dispatcher, "enter")
        assert "No active call" in dispatcher.footer.status

    def test_timed_status_expires_on_tick(self, dispatcher: Dispatcher, clock: FakeClock) -> None:
        dispatcher.dispatch(TimedStatusLine("hello", 2.0))
        dispatcher.step(TickEvent())
        assert dispatcher.footer.status == "hello"
        clock.now += 2.5
        dispatcher.step(TickEvent())
        assert dispatcher.footer.status == ""


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


class TestCalls:
    def test_enter_opens_call(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter")
        assert dispatcher.phone is not None
        assert dispatcher.active_page is dispatcher.phone
        assert dispatcher.sessions.top() is dispatcher.phone.session

    def test_same_call_twice_is_noop(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter")
        phone = dispatcher.phone
        press(dispatcher, ":", "r", "enter")
        assert dispatcher.phone is phone
        assert len(dispatcher.sessions.stack) == 1

    def test_escape_hangs_up_into_history(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter", "esc")
        assert dispatcher.phone is None
        assert dispatcher.active_page is dispatcher.home
        assert "listPets" in dispatcher.sessions.history

    def test_edit_parameter_hang_up_and_resume(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "j", "j", "enter")
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.operation_key == "showPetById"

        press(dispatcher, "enter")
        assert state.input_mode == InputMode.INSERT
        type_text(dispatcher, "7q")
        press(dispatcher, "backspace", "enter")
        assert state.input_mode == InputMode.NORMAL
        draft = dispatcher.phone.session.draft
        assert draft.path_params["petId"] == "7"
        snapshot = draft.model_copy(deep=True)

        press(dispatcher, "esc")
        assert dispatcher.phone is None
        press(dispatcher, "enter")
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.draft == snapshot

    def test_escape_cancels_parameter_edit(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "j", "j", "enter", "enter")
        type_text(dispatcher, "99")
        press(dispatcher, "esc")
        assert state.input_mode == InputMode.NORMAL
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.draft.path_params["petId"] is None

    def test_focus_restored_on_resume(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter", "l", "l", "esc", "enter")
        assert dispatcher.phone is not None
        assert dispatcher.phone.focused_pane is dispatcher.phone.response

    def test_history_popup_resumes(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter", "esc", "j", "enter", "esc")
        press(dispatcher, ":")
        type_text(dispatcher, "history")
        press(dispatcher, "enter")
        assert isinstance(dispatcher.popup, HistoryPane)
        assert [e.key for e in dispatcher.popup.entries] == ["createPet", "listPets"]

        press(dispatcher, "j", "enter")
        assert dispatcher.popup is None
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.operation_key == "listPets"

    def test_history_popup_swallows_keys(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "enter", "esc", ":")
        type_text(dispatcher, "history")
        press(dispatcher, "enter", "f", "q")
        assert dispatcher.popup is None
        assert dispatcher.home.fullscreen is False
        assert state.running is True

    def test_empty_history(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, ":")
        type_text(dispatcher, "history")
        press(dispatcher, "enter")
        assert dispatcher.popup is None
        assert dispatcher.footer.status == "No suspended sessions"

    def test_request_open_loads_body(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        payload = tmp_path / "pet.json"
        payload.write_text('{"name": "Rex"}', encoding="utf-8")
        press(dispatcher, "j", "enter", ":")
        type_text(dispatcher, f"request open {payload}")
        press(dispatcher, "enter")
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.draft.body == '{"name": "Rex"}'
        assert dispatcher.footer.status.startswith("Loaded 15 characters")

    def test_body_tab_selects_content_type(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "j", "enter", "l", "2")
        assert dispatcher.phone is not None
        assert dispatcher.phone.session.draft.body_content_type == "application/x-www-form-urlencoded"

    def test_insert_mode_types_q(self, dispatcher: Dispatcher, state: State) -> None:
        press(dispatcher, "j", "enter", "l", "enter", "q")
        assert state.running is True
        assert dispatcher.phone is not None
        assert dispatcher.phone.body.editor is not None
        assert dispatcher.phone.body.editor.text == "q"


# ---------------------------------------------------------------------------
# Dialing
# ---------------------------------------------------------------------------


class TestDial:
    def test_dial_webhook_is_error(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "k", "enter", "l", "l", "enter")
        assert dispatcher.footer.status.startswith("Error: 'newPet' is a webhook")
        assert dispatcher.pipeline.in_flight == set()

    def test_missing_required_warns_but_dials(self, state: State, clock: FakeClock, quiet_output) -> None:
        async def scenario() -> Dispatcher:
            pipeline = RequestPipeline(dry_run=True)
            await pipeline.start()
            dispatcher = Dispatcher(state, pipeline, clock=clock)
            press(dispatcher, "j", "j", "enter", "l", "l", "enter")
            status = dispatcher.footer.status
            await pipeline.settle()
            dispatcher.step(TickEvent())
            await pipeline.aclose()
            assert "required values unset: petId, tenant" in status
            return dispatcher

        asyncio.run(scenario())
        record = state.responses.get("showPetById")
        assert record is not None
        assert json.loads(record.body)["url"].endswith("/pets/{petId}")

    def test_post_body_dialed(self, state: State, clock: FakeClock, quiet_output) -> None:
        async def scenario() -> Dispatcher:
            pipeline = RequestPipeline(dry_run=True)
            await pipeline.start()
            dispatcher = Dispatcher(state, pipeline, clock=clock)
            press(dispatcher, "j", "enter", "l", "enter")
            type_text(dispatcher, '{"name": "Rex"}')
            press(dispatcher, "esc", "l", "enter")
            assert dispatcher.footer.status == "Dialing POST https://api.petstore.test/v1/pets ..."
            await pipeline.settle()
            dispatcher.step(TickEvent())
            await pipeline.aclose()
            return dispatcher

        dispatcher = asyncio.run(scenario())
        record = state.responses.get("createPet")
        assert record is not None
        echo = json.loads(record.body)
        assert echo["method"] == "POST"
        assert ["content-type", "application/json"] in echo["headers"]
        assert echo["body"] == '{"name": "Rex"}'
        assert dispatcher.footer.status == "createPet: 200 OK"

    def test_response_lands_while_suspended(self, state: State, clock: FakeClock, quiet_output) -> None:
        async def scenario() -> Dispatcher:
            pipeline = RequestPipeline(dry_run=True)
            await pipeline.start()
            dispatcher = Dispatcher(state, pipeline, clock=clock)
            press(dispatcher, "enter", "l", "l", "enter", "esc")
            assert dispatcher.phone is None
            await pipeline.settle()
            dispatcher.step(TickEvent())
            press(dispatcher, "enter")
            await pipeline.aclose()
            return dispatcher

        dispatcher = asyncio.run(scenario())
        assert dispatcher.phone is not None
        assert state.responses.get(dispatcher.phone.session.operation_key) is not None
        assert "200 OK" in render_text(dispatcher)

    def test_network_failure_notice(self, state: State, clock: FakeClock, quiet_output) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario() -> Dispatcher:
            pipeline = RequestPipeline(RequestConfig(), transport=httpx.MockTransport(handler))
            await pipeline.start()
            dispatcher = Dispatcher(state, pipeline, clock=clock)
            press(dispatcher, "enter", "l", "l", "enter")
            await pipeline.settle()
            dispatcher.step(TickEvent())
            await pipeline.aclose()
            return dispatcher

        dispatcher = asyncio.run(scenario())
        record = state.responses.get("listPets")
        assert record is not None and record.failed
        assert dispatcher.footer.status.startswith("listPets: ConnectError")


# ---------------------------------------------------------------------------
# Loop invariants and rendering
# ---------------------------------------------------------------------------


class TestLoop:
    def test_self_reemit_is_fatal(self, dispatcher: Dispatcher) -> None:
        dispatcher._handle = lambda action: [action]  # type: ignore[method-assign]
        with pytest.raises(DispatchError, match="Noop re-emitted"):
            dispatcher.dispatch(Noop())

    def test_suspend_flag(self, dispatcher: Dispatcher) -> None:
        dispatcher.step(Key("z", ctrl=True))
        assert dispatcher.suspend_requested is True

    def test_step_until_quit(self, dispatcher: Dispatcher, state: State) -> None:
        for code in ["j", "q"]:
            dispatcher.step(Key(code))
        assert state.running is False
        active = state.catalog.active()
        assert active is not None and active.key == "createPet"


class TestRender:
    def test_home(self, dispatcher: Dispatcher) -> None:
        text = render_text(dispatcher)
        assert "APIs" in text
        assert "/store/inventory" in text
        assert "NORMAL" in text

    def test_phone(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "j", "j", "enter")
        text = render_text(dispatcher)
        assert "Parameters" in text
        assert "petId" in text
        assert "No response yet" in text

    def test_popup(self, dispatcher: Dispatcher) -> None:
        press(dispatcher, "enter", "esc", ":")
        type_text(dispatcher, "history")
        press(dispatcher, "enter")
        assert "History" in render_text(dispatcher)
