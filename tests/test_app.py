"""Tests for the Typer application: sub-commands, launch and exit codes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from openapi_tui import __version__
from openapi_tui import app as app_module
from openapi_tui.app import app, main
from openapi_tui.exceptions import SchemaResolutionError, SpecParseError
from openapi_tui.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SPEC_PARSE_ERROR

PETSTORE = Path(__file__).parent / "fixtures" / "petstore.json"


def _invoke(runner: CliRunner, *args: str):
    return runner.invoke(app, ["-o", str(PETSTORE), *args])


class TestVersion:
    def test_version(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"openapi-tui {__version__}" in result.stdout


class TestOperationsCommand:
    def test_plain_listing(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--plain", "operations")
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().split("\n")
        assert lines[0] == "Method\tPath\tOperation ID\tTags\tSummary"
        assert [line.split("\t")[:3] for line in lines[1:]] == [
            ["GET", "/pets", "listPets"],
            ["POST", "/pets", "createPet"],
            ["GET", "/pets/{petId}", "showPetById"],
            ["DELETE", "/pets/{petId}", ""],
            ["GET", "/store/inventory", "getInventory"],
            ["POST", "newPet", "onNewPet"],
        ]

    def test_json_with_tag(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--json", "operations", "--tag", "store")
        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        assert [r["Operation ID"] for r in records] == ["getInventory"]
        assert records[0]["Tags"] == "store"

    def test_filter(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--json", "operations", "--filter", "{petId}")
        records = json.loads(result.stdout)
        assert [r["Method"] for r in records] == ["GET", "DELETE"]

    def test_filter_is_case_sensitive(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--json", "operations", "-f", "PETS")
        assert json.loads(result.stdout) == []

    def test_spec_from_project_config(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "openapi-tui.json").write_text(
            json.dumps({"spec": str(PETSTORE)}), encoding="utf-8"
        )
        result = cli_runner.invoke(app, ["--json", "operations", "-t", "store"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 1

    def test_missing_document(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["-o", "missing.json", "operations"])
        assert isinstance(result.exception, SpecParseError)
        assert result.exception.exit_code == EXIT_SPEC_PARSE_ERROR


class TestSchemaCommand:
    def test_plain_yaml(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--plain", "schema", "Pet")
        assert result.exit_code == 0, result.output
        assert "type: object" in result.stdout
        assert "$ref: '#/components/schemas/Owner'" in result.stdout

    def test_unknown_schema(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--plain", "schema", "Nope")
        assert isinstance(result.exception, SchemaResolutionError)


class TestLaunch:
    def test_no_subcommand_runs_ui(
        self, cli_runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[tuple[Any, ...]] = []
        log_path = isolated_config / "ui.log"

        def fake_run_tui(document: Any, config: Any, options: Any) -> None:
            from openapi_tui.output import get_output

            calls.append((document, config, options, get_output().log_file))

        monkeypatch.setattr("openapi_tui.tui.run_tui", fake_run_tui)
        result = _invoke(cli_runner, "--dry-run", "--base-url", "http://localhost:8080", "--log-file", str(log_path))
        assert result.exit_code == 0, result.output

        document, _, options, attached = calls[0]
        assert len(document.operations) == 6
        assert options.dry_run is True
        assert options.base_url == "http://localhost:8080"
        assert attached == str(log_path)

    def test_log_detached_after_ui(
        self, cli_runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_run_tui(document: Any, config: Any, options: Any) -> None:
            raise RuntimeError("terminal gone")

        monkeypatch.setattr("openapi_tui.tui.run_tui", failing_run_tui)
        result = _invoke(cli_runner, "--log-file", str(isolated_config / "ui.log"))
        assert isinstance(result.exception, RuntimeError)

        from openapi_tui.output import get_output

        assert get_output().log_file is None


class TestMain:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(app_module, "_setup_signal_handlers", lambda: None)

    def test_known_error_maps_to_exit_code(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, quiet_output
    ) -> None:
        def broken_app() -> None:
            raise SpecParseError("Cannot read spec")

        monkeypatch.setattr(app_module, "app", broken_app)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_SPEC_PARSE_ERROR

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, quiet_output
    ) -> None:
        def broken_app() -> None:
            raise ZeroDivisionError("oops")

        monkeypatch.setattr(app_module, "app", broken_app)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_GENERIC_FAILURE

        logs = list((isolated_config / "data" / "openapi-tui" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "ZeroDivisionError: oops" in logs[0].read_text()
