"""openapi-tui -- browse and call OpenAPI 3.x APIs from the terminal.

The interactive UI lists a document's operations, renders request and
response schemas with ``$ref`` drill-down, and opens a *call* per operation
in which parameters and a body are edited, dialed, and the response shown.
Calls that are hung up are kept in a bounded history and resumed later.

Typical usage::

    openapi-tui -o https://petstore3.swagger.io/api/v3/openapi.json
    openapi-tui -o openapi.yaml operations --tag pet

Modules:
    app: Typer application and CLI entry point.
    tui: Terminal adapter hosting the dispatcher.
    dispatcher: Action bus and dispatch loop.
    catalog: Filterable operation list.
    navigator: Schema rendering and ``$ref`` navigation.
    request: Request drafts and construction.
    session: Active call stack and history cache.
    client: Asynchronous request pipeline and response store.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
