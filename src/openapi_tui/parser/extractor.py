"""Flatten an OpenAPI document into a :class:`~openapi_tui.models.ParsedSpec`.

The public entry point is :func:`extract_spec`. It walks ``paths`` and then
``webhooks`` (OpenAPI 3.1) in document order and emits one
:class:`~openapi_tui.models.OperationEntry` per (path, method) pair.

Only the *containers* are dereferenced here: path items, parameter objects,
request bodies and responses that are themselves ``$ref`` pointers are
followed with :func:`~openapi_tui.parser.resolver.resolve_chain`. Schemas are
kept verbatim, pointers included, and resolved lazily by the schema navigator.

Parameter merging follows the OpenAPI rules: path-level parameters provide
defaults and operation-level parameters with the same ``name`` and ``in``
replace them.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import httpx

from openapi_tui.exceptions import SchemaResolutionError, SpecParseError
from openapi_tui.models import (
    APIInfo,
    APIParameter,
    HTTPMethod,
    OperationEntry,
    OperationKind,
    ParameterLocation,
    ParsedSpec,
    RequestBodyInfo,
    ResponseInfo,
    ServerInfo,
)
from openapi_tui.parser.loader import is_url
from openapi_tui.parser.resolver import resolve_chain

_HTTP_METHODS = {m.value: m for m in HTTPMethod}
_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


def extract_spec(
    raw_spec: dict[str, Any],
    openapi_version: str,
    source: Optional[str] = None,
) -> ParsedSpec:
    """Build a :class:`~openapi_tui.models.ParsedSpec` from a decoded document.

    Args:
        raw_spec: The document as returned by
            :func:`~openapi_tui.parser.loader.load_spec`. It is not modified.
        openapi_version: The validated ``openapi`` version string.
        source: Where the document came from. When it is a URL, relative
            server URLs are resolved against it, and its origin becomes the
            server of a document that declares none.

    Returns:
        The parsed document with operations in document order.

    Raises:
        SpecParseError: If a container ``$ref`` (path item, parameter,
            request body, response) cannot be resolved.
    """
    try:
        operations = _extract_operations(raw_spec, source)
    except SchemaResolutionError as exc:
        raise SpecParseError(str(exc)) from exc

    return ParsedSpec(
        info=_extract_info(raw_spec),
        servers=_extract_servers(raw_spec.get("servers"), source, inject_origin=True),
        operations=operations,
        tags=_extract_tags(raw_spec, operations),
        openapi_version=openapi_version,
        source=source,
        raw_spec=raw_spec,
    )


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    info = spec.get("info") or {}
    return APIInfo(
        title=str(info.get("title", "Untitled API")),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


def _extract_servers(
    servers: Any,
    source: Optional[str],
    inject_origin: bool = False,
) -> list[ServerInfo]:
    """Extract a ``servers`` array, applying variable defaults.

    Args:
        servers: The raw ``servers`` value (may be missing).
        source: The document source, used to absolutise relative URLs.
        inject_origin: Add the source URL's origin when no server is declared.
    """
    result: list[ServerInfo] = []
    for server in servers or []:
        if not isinstance(server, dict):
            continue
        url = _apply_server_variables(
            str(server.get("url", "/")), server.get("variables") or {}
        )
        if source is not None and is_url(source) and not is_url(url):
            url = str(httpx.URL(source).join(url))
        result.append(ServerInfo(url=url, description=server.get("description")))

    if not result and inject_origin and source is not None and is_url(source):
        origin = str(httpx.URL(source).join("/")).rstrip("/")
        result.append(ServerInfo(url=origin, description="Document origin"))
    return result


def _apply_server_variables(url: str, variables: dict[str, Any]) -> str:
    """Replace ``{name}`` with the variable's ``default``; unknown names stay."""

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(substitute, url)


def _extract_tags(spec: dict[str, Any], operations: list[OperationEntry]) -> list[str]:
    """Document-level tag names in order, else operation tags in first-seen order."""
    declared = [
        str(tag["name"])
        for tag in spec.get("tags") or []
        if isinstance(tag, dict) and "name" in tag
    ]
    if declared:
        return declared

    seen: dict[str, None] = {}
    for operation in operations:
        for tag in operation.tags:
            seen.setdefault(tag, None)
    return list(seen)


def _extract_operations(spec: dict[str, Any], source: Optional[str]) -> list[OperationEntry]:
    """Walk ``paths`` then ``webhooks``, keeping the document's key order.

    An entry whose path does not start with ``/`` is a webhook.
    """
    operations: list[OperationEntry] = []
    for section in ("paths", "webhooks"):
        for path, path_item in (spec.get(section) or {}).items():
            path_item = resolve_chain(path_item, spec)
            if not isinstance(path_item, dict):
                continue
            operations.extend(_extract_path_item(spec, str(path), path_item, source))
    return operations


def _extract_path_item(
    spec: dict[str, Any],
    path: str,
    path_item: dict[str, Any],
    source: Optional[str],
) -> list[OperationEntry]:
    kind = OperationKind.PATH if path.startswith("/") else OperationKind.WEBHOOK
    path_params = path_item.get("parameters") or []
    path_servers = path_item.get("servers")
    entries: list[OperationEntry] = []

    for key, operation in path_item.items():
        method = _HTTP_METHODS.get(str(key).lower())
        if method is None or not isinstance(operation, dict):
            continue

        servers = operation.get("servers") or path_servers
        merged = _merge_parameters(
            [resolve_chain(p, spec) for p in path_params],
            [resolve_chain(p, spec) for p in operation.get("parameters") or []],
        )
        entries.append(
            OperationEntry(
                path=path,
                method=method,
                operation_id=operation.get("operationId"),
                summary=operation.get("summary"),
                description=operation.get("description"),
                tags=[str(t) for t in operation.get("tags") or []],
                kind=kind,
                parameters=_extract_parameters(spec, merged),
                request_body=_extract_request_body(spec, operation.get("requestBody")),
                responses=_extract_responses(spec, operation.get("responses") or {}),
                servers=_extract_servers(servers, source),
                deprecated=bool(operation.get("deprecated", False)),
            )
        )
    return entries


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    op_keys = {
        (p.get("name", ""), p.get("in", "")) for p in op_params if isinstance(p, dict)
    }
    merged = [
        p
        for p in path_params
        if isinstance(p, dict) and (p.get("name", ""), p.get("in", "")) not in op_keys
    ]
    merged.extend(p for p in op_params if isinstance(p, dict))
    return merged


def _extract_parameters(
    spec: dict[str, Any], params: list[dict[str, Any]]
) -> list[APIParameter]:
    """Convert raw parameter objects, skipping unknown ``in`` locations.

    Path parameters are always required regardless of the document.
    """
    parameters: list[APIParameter] = []
    for param in params:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        parameters.append(
            APIParameter(
                name=str(param.get("name", "")),
                location=location,
                required=location == ParameterLocation.PATH or bool(param.get("required")),
                description=param.get("description"),
                schema=schema if isinstance(schema, dict) else None,
                default=_schema_default(spec, schema),
            )
        )
    return parameters


def _schema_default(spec: dict[str, Any], schema: Any) -> Any:
    """The ``default`` of a (possibly referenced) schema, or ``None``."""
    try:
        resolved = resolve_chain(schema, spec)
    except SchemaResolutionError:
        return None
    if isinstance(resolved, dict):
        return resolved.get("default")
    return None


def _extract_content(content: Any) -> dict[str, Optional[dict[str, Any]]]:
    """Map each media type to its schema (verbatim) or ``None``."""
    result: dict[str, Optional[dict[str, Any]]] = {}
    for media_type, media in (content or {}).items():
        schema = media.get("schema") if isinstance(media, dict) else None
        result[str(media_type)] = schema if isinstance(schema, dict) else None
    return result


def _extract_request_body(spec: dict[str, Any], body: Any) -> Optional[RequestBodyInfo]:
    if body is None:
        return None
    body = resolve_chain(body, spec)
    if not isinstance(body, dict):
        return None
    return RequestBodyInfo(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content=_extract_content(body.get("content")),
    )


def _extract_responses(spec: dict[str, Any], responses: dict[str, Any]) -> list[ResponseInfo]:
    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        response = resolve_chain(response, spec)
        if not isinstance(response, dict):
            continue
        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=response.get("description"),
                content=_extract_content(response.get("content")),
            )
        )
    return result
