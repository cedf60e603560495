"""Tests for the abstract page and schema-pane bases."""

from __future__ import annotations

import pytest

from openapi_tui.pages import Page
from openapi_tui.pages.home import HomePage
from openapi_tui.panes.schemas import RequestSchemaPane, ResponseSchemaPane, SchemaPane


class TestAbstractBases:
    def test_page_requires_layout(self) -> None:
        with pytest.raises(TypeError, match="layout"):
            Page([])  # type: ignore[abstract]

    def test_schema_pane_requires_build_tabs(self) -> None:
        with pytest.raises(TypeError, match="build_tabs"):
            SchemaPane()  # type: ignore[abstract]

    def test_concrete_subclasses_instantiate(self) -> None:
        assert isinstance(HomePage(), Page)
        assert isinstance(RequestSchemaPane(), SchemaPane)
        assert isinstance(ResponseSchemaPane(), SchemaPane)
