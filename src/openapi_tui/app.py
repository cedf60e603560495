"""Typer application and CLI entry point for openapi-tui.

Without a sub-command the root callback loads the OpenAPI document and hands
the terminal to the interactive UI (:mod:`openapi_tui.tui`). The
``operations`` and ``schema`` sub-commands print the same catalog and schema
renderings non-interactively, through the output layer.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, invokes the Typer app, maps
:class:`~openapi_tui.exceptions.OpenapiTuiError` to its exit code and writes
a crash log for anything else.

See Also:
    :mod:`openapi_tui.config`: Launch option and global config resolution.
    :mod:`openapi_tui.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import typer

from openapi_tui import __version__
from openapi_tui.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from openapi_tui.models import ParsedSpec


app = typer.Typer(
    name="openapi-tui",
    help="Browse and call OpenAPI 3.x APIs from the terminal.",
    no_args_is_help=False,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi-tui {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    openapi_path: Optional[str] = typer.Option(
        None,
        "--openapi-path",
        "-o",
        help="OpenAPI document: file path, URL, or '-' for stdin.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the document's server URL."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Echo requests instead of sending them."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Diagnostics file while the UI owns the terminal."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~openapi_tui.output.OutputManager` from
    CLI flags, resolves configuration, and stores it in the Typer context.
    When no sub-command was given, launches the interactive UI.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        openapi_path: Document source override (highest precedence).
        base_url: Base URL override (highest precedence).
        dry_run: Echo built requests instead of performing HTTP.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        log_file: Where diagnostics go while the UI is running.
    """
    from openapi_tui.config import resolve_config
    from openapi_tui.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)

    config, options = resolve_config(openapi_path, base_url, dry_run)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["options"] = options

    if ctx.invoked_subcommand is None:
        _launch(ctx, log_file)


def _launch(ctx: typer.Context, log_file: Optional[Path]) -> None:
    """Load the document and run the UI until the user quits."""
    from openapi_tui.config import default_log_file
    from openapi_tui.output import get_output
    from openapi_tui.tui import run_tui

    config = ctx.obj["config"]
    options = ctx.obj["options"]
    document = _load(ctx)

    output = get_output()
    output.attach_log_file(log_file or default_log_file())
    try:
        run_tui(document, config, options)
    finally:
        output.detach_log_file()


def _load(ctx: typer.Context) -> ParsedSpec:
    from openapi_tui.output import debug
    from openapi_tui.parser import load_document

    config = ctx.obj["config"]
    options = ctx.obj["options"]
    debug(f"Loading document from {options.spec}")
    return load_document(options.spec, timeout=config.request.timeout)


# ------------------------------------------------------------------ #
# Sub-commands
# ------------------------------------------------------------------ #


@app.command("operations")
def operations_command(
    ctx: typer.Context,
    filter_text: str = typer.Option(
        "", "--filter", "-f", help="Only paths containing this text."
    ),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only this tag."),
) -> None:
    """List the document's operations, as the APIs pane shows them."""
    from openapi_tui.catalog import Catalog
    from openapi_tui.output import print_table

    catalog = Catalog.load(_load(ctx))
    catalog.set_tag(tag)
    catalog.set_filter(filter_text)

    rows = [
        [
            entry.method.value.upper(),
            entry.path,
            entry.operation_id or "",
            ", ".join(entry.tags),
            entry.summary or "",
        ]
        for entry in catalog.visible
    ]
    print_table(
        ["Method", "Path", "Operation ID", "Tags", "Summary"],
        rows,
        title=f"{len(rows)} operations",
    )


@app.command("schema")
def schema_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name under #/components/schemas."),
) -> None:
    """Print a component schema rendered as YAML."""
    from openapi_tui.navigator import SchemaNavigator
    from openapi_tui.output import get_output

    document = _load(ctx)
    navigator = SchemaNavigator(document.raw_spec)
    get_output().print_yaml(navigator.render_component(name))


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly outside the UI."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from openapi_tui.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``openapi-tui`` console script.

    Unhandled :class:`~openapi_tui.exceptions.OpenapiTuiError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from openapi_tui.exceptions import OpenapiTuiError
        from openapi_tui.output import error

        if isinstance(exc, OpenapiTuiError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
