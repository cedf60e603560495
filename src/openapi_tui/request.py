"""Turn a :class:`~openapi_tui.models.RequestDraft` into a wire request.

:func:`build_request` is pure: the same draft, operation and base URL always
produce an identical :class:`~openapi_tui.models.BuiltRequest`. Assembly order
is fixed (path substitution, query, headers, cookies, ``accept``, body) so the
result never depends on which pane the user edited first.

Value rules shared by query, header and cookie parameters:

* optional and unset -- omitted;
* required and unset -- sent with an empty value;
* set -- sent verbatim.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

import httpx

from openapi_tui.exceptions import RequestBuildError
from openapi_tui.models import (
    BuiltRequest,
    HTTPMethod,
    OperationEntry,
    OperationKind,
    ParameterLocation,
    ParsedSpec,
    RequestDraft,
)

DEFAULT_BASE_URL = "http://localhost"

_PATH_TOKEN = re.compile(r"\{([^{}]+)\}")


# --- Drafts ---


def draft_from_operation(operation: OperationEntry) -> RequestDraft:
    """Create a fresh draft with schema ``default`` values filled in.

    The first request body content type is selected, as is the first media
    type of the ``200`` response (else of the first declared response).
    """
    draft = RequestDraft()
    for param in operation.parameters:
        default = None if param.default is None else _stringify(param.default)
        draft.values_for(param.location)[param.name] = default

    if operation.request_body is not None:
        draft.body_content_types = operation.request_body.content_types
        if draft.body_content_types:
            draft.body_content_type_index = 0

    draft.accept_content_types = accept_content_types(operation)
    if draft.accept_content_types:
        draft.accept_content_type_index = 0
    return draft


def accept_content_types(operation: OperationEntry) -> list[str]:
    """Media types of the ``200`` response, else of the first response."""
    for response in operation.responses:
        if response.status_code == "200":
            return response.content_types
    if operation.responses:
        return operation.responses[0].content_types
    return []


def missing_required(draft: RequestDraft, operation: OperationEntry) -> list[str]:
    """Names of required parameters that are still unset."""
    return [
        param.name
        for param in operation.parameters
        if param.required and draft.values_for(param.location).get(param.name) is None
    ]


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# --- Base URL ---


def default_base_url(
    document: ParsedSpec,
    operation: Optional[OperationEntry] = None,
    override: Optional[str] = None,
) -> str:
    """Pick the base URL for *operation*.

    Order: explicit *override*, the first document server, the operation's
    first server, then :data:`DEFAULT_BASE_URL`. Trailing slashes are
    trimmed.
    """
    if override:
        return override.rstrip("/")
    if document.servers:
        return document.servers[0].url.rstrip("/")
    if operation is not None and operation.servers:
        return operation.servers[0].url.rstrip("/")
    return DEFAULT_BASE_URL


# --- Assembly ---


def build_request(
    draft: RequestDraft,
    operation: OperationEntry,
    base_url: str,
) -> BuiltRequest:
    """Assemble the wire request for *operation* from *draft*.

    Args:
        draft: The session's editable values.
        operation: The operation being dialed.
        base_url: Scheme, host and optional prefix; a trailing ``/`` is ignored.

    Returns:
        The assembled request.

    Raises:
        RequestBuildError: For webhook entries, methods outside the HTTP
            method set, and URLs that are not absolute http(s) URLs after
            path substitution.
    """
    if operation.kind == OperationKind.WEBHOOK:
        raise RequestBuildError(
            f"'{operation.path}' is a webhook; the server calls it, it cannot be dialed"
        )
    try:
        method = HTTPMethod(str(operation.method.value).lower())
    except ValueError as exc:
        raise RequestBuildError(f"Unknown HTTP method: {operation.method}") from exc

    path = _substitute_path(operation.path, draft.path_params)
    url = base_url.rstrip("/") + path
    _validate_url(url)

    query = _collect(draft, operation, ParameterLocation.QUERY)
    headers = _collect(draft, operation, ParameterLocation.HEADER)

    cookies = _collect(draft, operation, ParameterLocation.COOKIE)
    if cookies:
        headers.append(("cookie", "; ".join(f"{name}={value}" for name, value in cookies)))

    accept = draft.accept_content_type
    if accept is not None:
        headers.append(("accept", accept))

    body: Optional[str] = None
    content_type = draft.body_content_type
    if content_type is not None:
        headers.append(("content-type", content_type))
        body = draft.body

    return BuiltRequest(
        method=method.value.upper(),
        url=url,
        query=query,
        headers=headers,
        body=body,
    )


def _substitute_path(template: str, values: dict[str, Optional[str]]) -> str:
    """Replace ``{name}`` with the percent-encoded value; unset tokens stay literal."""

    def substitute(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        if value is None:
            return match.group(0)
        return quote(value, safe="")

    return _PATH_TOKEN.sub(substitute, template)


def _collect(
    draft: RequestDraft,
    operation: OperationEntry,
    location: ParameterLocation,
) -> list[tuple[str, str]]:
    values = draft.values_for(location)
    pairs: list[tuple[str, str]] = []
    for param in operation.parameters_in(location):
        value = values.get(param.name)
        if value is None:
            if not param.required:
                continue
            value = ""
        pairs.append((param.name, value))
    return pairs


def _validate_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise RequestBuildError(f"Invalid URL '{url}': {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise RequestBuildError(
            f"Invalid URL '{url}': expected an absolute http(s) URL "
            "(set one with --base-url)"
        )
