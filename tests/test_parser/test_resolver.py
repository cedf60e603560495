"""Tests for openapi_tui.parser.resolver."""

from __future__ import annotations

import pytest

from openapi_tui.exceptions import SchemaResolutionError
from openapi_tui.parser.resolver import (
    component_schema_name,
    ref_of,
    resolve,
    resolve_chain,
    resolve_pointer,
)

DOC = {
    "components": {
        "schemas": {
            "Pet": {"type": "object"},
            "Alias": {"$ref": "#/components/schemas/Pet"},
            "A": {"$ref": "#/components/schemas/B"},
            "B": {"$ref": "#/components/schemas/A"},
            "a/b": {"type": "string"},
        }
    },
    "list": [{"x": 1}, {"x": 2}],
}


class TestResolvePointer:
    def test_component(self) -> None:
        assert resolve_pointer("#/components/schemas/Pet", DOC) == {"type": "object"}

    def test_root(self) -> None:
        assert resolve_pointer("#", DOC) is DOC

    def test_escaped_segment(self) -> None:
        assert resolve_pointer("#/components/schemas/a~1b", DOC) == {"type": "string"}

    def test_array_index(self) -> None:
        assert resolve_pointer("#/list/1", DOC) == {"x": 2}

    def test_missing_key(self) -> None:
        with pytest.raises(SchemaResolutionError, match="key 'Missing' not found"):
            resolve_pointer("#/components/schemas/Missing", DOC)

    def test_bad_array_index(self) -> None:
        with pytest.raises(SchemaResolutionError, match="invalid array index"):
            resolve_pointer("#/list/7", DOC)

    def test_external_ref(self) -> None:
        with pytest.raises(SchemaResolutionError, match="External \\$ref"):
            resolve_pointer("other.yaml#/Pet", DOC)


class TestResolve:
    def test_inline_returned_as_is(self) -> None:
        inline = {"type": "integer"}
        assert resolve(inline, DOC) is inline

    def test_follows_exactly_one_level(self) -> None:
        result = resolve({"$ref": "#/components/schemas/Alias"}, DOC)
        assert result == {"$ref": "#/components/schemas/Pet"}

    def test_ref_of(self) -> None:
        assert ref_of({"$ref": "#/x"}) == "#/x"
        assert ref_of({"type": "string"}) is None
        assert ref_of("text") is None


class TestResolveChain:
    def test_follows_until_concrete(self) -> None:
        result = resolve_chain({"$ref": "#/components/schemas/Alias"}, DOC)
        assert result == {"type": "object"}

    def test_cycle_detected(self) -> None:
        with pytest.raises(SchemaResolutionError, match="Circular \\$ref chain"):
            resolve_chain({"$ref": "#/components/schemas/A"}, DOC)

    def test_cycle_message_lists_chain(self) -> None:
        with pytest.raises(SchemaResolutionError) as exc_info:
            resolve_chain({"$ref": "#/components/schemas/A"}, DOC)
        assert "#/components/schemas/A -> #/components/schemas/B -> #/components/schemas/A" in str(
            exc_info.value
        )


class TestComponentSchemaName:
    def test_name(self) -> None:
        assert component_schema_name("#/components/schemas/Pet") == "Pet"

    def test_unescapes(self) -> None:
        assert component_schema_name("#/components/schemas/a~1b") == "a/b"

    @pytest.mark.parametrize(
        "ref",
        ["#/components/responses/Error", "#/components/schemas/", "#/components/schemas/Pet/properties"],
    )
    def test_not_a_component_schema(self, ref: str) -> None:
        assert component_schema_name(ref) is None
