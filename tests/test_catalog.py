"""Tests for openapi_tui.catalog."""

from __future__ import annotations

import pytest

from openapi_tui.catalog import Catalog
from openapi_tui.models import HTTPMethod, OperationEntry, ParsedSpec


def _entry(method: str, path: str, tags: list[str] | None = None, operation_id: str | None = None) -> OperationEntry:
    return OperationEntry(
        path=path,
        method=HTTPMethod(method),
        operation_id=operation_id,
        tags=tags or [],
    )


@pytest.fixture
def five() -> Catalog:
    """Five operations, two of them under /pets."""
    return Catalog(
        [
            _entry("get", "/pets", ["pets"], "listPets"),
            _entry("get", "/users", ["users"], "listUsers"),
            _entry("get", "/pets/{id}", ["pets"], "showPet"),
            _entry("post", "/orders", ["store"], "placeOrder"),
            _entry("get", "/health"),
        ],
        ["pets", "users", "store"],
    )


class TestFilter:
    def test_filter_pets(self, five: Catalog) -> None:
        five.set_filter("pets")
        assert [e.path for e in five.visible] == ["/pets", "/pets/{id}"]
        assert five.selection == 0

    def test_two_next_calls_wrap_around(self, five: Catalog) -> None:
        five.set_filter("pets")
        five.next()
        assert five.selection == 1
        five.next()
        assert five.selection == 0

    def test_filter_is_case_sensitive(self, five: Catalog) -> None:
        five.set_filter("PETS")
        assert five.visible == []

    def test_empty_visible_has_no_active(self, five: Catalog) -> None:
        five.set_filter("nothing-matches")
        assert five.selection is None
        assert five.active() is None
        five.next()
        five.prev()
        assert five.selection is None

    def test_filter_resets_selection(self, five: Catalog) -> None:
        five.next()
        five.next()
        five.set_filter("")
        assert five.selection == 0


class TestTag:
    def test_tag_restricts(self, five: Catalog) -> None:
        five.set_tag("store")
        assert [e.key for e in five.visible] == ["placeOrder"]

    def test_tag_and_filter_combine(self, five: Catalog) -> None:
        five.set_tag("pets")
        five.set_filter("{id}")
        assert [e.key for e in five.visible] == ["showPet"]

    def test_none_removes_tag(self, five: Catalog) -> None:
        five.set_tag("users")
        five.set_tag(None)
        assert len(five.visible) == 5

    @pytest.mark.parametrize("text", ["", "pets", "/", "{", "zzz"])
    @pytest.mark.parametrize("tag", [None, "pets", "users", "missing"])
    def test_visible_matches_definition(self, five: Catalog, text: str, tag: str | None) -> None:
        five.set_filter(text)
        five.set_tag(tag)
        expected = [
            e for e in five.entries if text in e.path and (tag is None or tag in e.tags)
        ]
        assert five.visible == expected
        if expected:
            assert five.active() == expected[five.selection]
        else:
            assert five.active() is None


class TestSelection:
    def test_next_len_times_is_identity(self, five: Catalog) -> None:
        five.select(2)
        for _ in range(len(five.visible)):
            five.next()
        assert five.selection == 2

    def test_prev_inverts_next(self, five: Catalog) -> None:
        five.select(3)
        five.next()
        five.prev()
        assert five.selection == 3

    def test_prev_wraps_to_end(self, five: Catalog) -> None:
        five.prev()
        assert five.selection == 4

    def test_select_clamps(self, five: Catalog) -> None:
        five.select(99)
        assert five.selection == 4
        five.select(-3)
        assert five.selection == 0


class TestLookup:
    def test_by_operation_id(self, five: Catalog) -> None:
        entry = five.lookup("showPet")
        assert entry is not None and entry.path == "/pets/{id}"

    def test_by_synthetic_key(self, five: Catalog) -> None:
        entry = five.lookup("GET /health")
        assert entry is not None and entry.operation_id is None

    def test_ignores_filter(self, five: Catalog) -> None:
        five.set_filter("orders")
        assert five.lookup("listPets") is not None

    def test_unknown(self, five: Catalog) -> None:
        assert five.lookup("nope") is None


def test_load_from_document(petstore_spec: ParsedSpec) -> None:
    catalog = Catalog.load(petstore_spec)
    assert len(catalog.entries) == 6
    assert catalog.tags == ["pets", "store"]
    active = catalog.active()
    assert active is not None and active.key == "listPets"
