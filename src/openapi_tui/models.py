"""Canonical Pydantic models shared across all openapi-tui modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`GlobalConfig` and :class:`LaunchOptions`.

**Parser output models** -- produced by the document parser and consumed by the
catalog, the schema panes and the request builder:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`OperationKind`,
    :class:`APIParameter`, :class:`RequestBodyInfo`, :class:`ResponseInfo`,
    :class:`ServerInfo`, :class:`APIInfo`, :class:`OperationEntry` and
    :class:`ParsedSpec`.

**Session models** -- the mutable per-call state and what the pipeline
produces from it:
    :class:`RequestDraft`, :class:`BuiltRequest` and :class:`ResponseRecord`.

Schemas are carried verbatim (``$ref`` pointers included); resolution happens
lazily in :mod:`openapi_tui.navigator`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every dialed request."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow 3xx redirects")
    max_concurrency: int = Field(
        default=4, ge=1, description="Maximum requests executing at the same time"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/openapi-tui/config.json``.

    Loaded by :func:`~openapi_tui.config.load_global_config`. Key bindings
    map a key sequence (``"<ctrl-c>"``, ``"<g><g>"``) to an action name and
    are merged over :data:`~openapi_tui.keymap.DEFAULT_KEYBINDINGS`.
    """

    keybindings: dict[str, str] = Field(default_factory=dict)
    tick_rate: float = Field(default=4.0, gt=0, description="Ticks per second")
    history_limit: int = Field(
        default=32, ge=1, description="Suspended sessions kept before eviction"
    )
    command_history_size: int = Field(
        default=50, ge=1, description="Footer inputs remembered for Up/Down recall"
    )
    status_line_seconds: float = Field(
        default=3.0, gt=0, description="Lifetime of transient status messages"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class LaunchOptions(BaseModel):
    """Where the document comes from and where requests go.

    Produced by :func:`~openapi_tui.config.resolve_config` after applying
    the CLI > environment > project config precedence chain.
    """

    spec: str = Field(default="openapi.json", description="File path, URL or '-'")
    base_url: Optional[str] = Field(
        default=None, description="Override the server URL declared in the document"
    )
    dry_run: bool = False


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class OperationKind(str, enum.Enum):
    """Whether an entry comes from a URL path or from a named webhook."""

    PATH = "path"
    WEBHOOK = "webhook"


class APIParameter(BaseModel):
    """A single parameter of an operation, after ``$ref`` resolution of the
    parameter object itself (its schema is kept verbatim)."""

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    default: Any = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RequestBodyInfo(BaseModel):
    """Request body metadata: one schema per accepted media type."""

    required: bool = False
    description: Optional[str] = None
    content: dict[str, Optional[dict[str, Any]]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def content_types(self) -> list[str]:
        return list(self.content)


class ResponseInfo(BaseModel):
    """Declared response for a single status code (``"200"``, ``"default"``)."""

    status_code: str
    description: Optional[str] = None
    content: dict[str, Optional[dict[str, Any]]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def content_types(self) -> list[str]:
        return list(self.content)


class ServerInfo(BaseModel):
    """A server entry from a ``servers`` array, with variables already applied."""

    url: str
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class OperationEntry(BaseModel):
    """One (path, method) pair or webhook event, derived once at load time.

    Entries are immutable and appear in document order. :attr:`key` is the
    identity used for sessions, history and stored responses.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    kind: OperationKind = OperationKind.PATH
    parameters: list[APIParameter] = Field(default_factory=list)
    request_body: Optional[RequestBodyInfo] = None
    responses: list[ResponseInfo] = Field(default_factory=list)
    servers: list[ServerInfo] = Field(default_factory=list)
    deprecated: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> str:
        """The operation id, or ``"METHOD path"`` when the document omits one."""
        if self.operation_id:
            return self.operation_id
        return f"{self.method.value.upper()} {self.path}"

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def parameters_in(self, location: ParameterLocation) -> list[APIParameter]:
        return [p for p in self.parameters if p.location == location]


class ParsedSpec(BaseModel):
    """Complete parsed representation of an OpenAPI document.

    ``raw_spec`` is the loader's dict, untouched; the navigator resolves
    ``$ref`` pointers against it on demand.
    """

    info: APIInfo
    servers: list[ServerInfo] = Field(default_factory=list)
    operations: list[OperationEntry] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    openapi_version: str
    source: Optional[str] = None
    raw_spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def component_schemas(self) -> dict[str, Any]:
        components = self.raw_spec.get("components") or {}
        return components.get("schemas") or {}


# --- Session Models ---


class RequestDraft(BaseModel):
    """Editable state of one call, owned by exactly one session.

    Parameter values of ``None`` mean *unset*. Content type indexes select
    from the lists alongside them; ``None`` means no body / no ``accept``.
    """

    path_params: dict[str, Optional[str]] = Field(default_factory=dict)
    query_params: dict[str, Optional[str]] = Field(default_factory=dict)
    header_params: dict[str, Optional[str]] = Field(default_factory=dict)
    cookie_params: dict[str, Optional[str]] = Field(default_factory=dict)
    body_content_types: list[str] = Field(default_factory=list)
    body_content_type_index: Optional[int] = None
    body: str = ""
    accept_content_types: list[str] = Field(default_factory=list)
    accept_content_type_index: Optional[int] = None

    def values_for(self, location: ParameterLocation) -> dict[str, Optional[str]]:
        """Return the (mutable) value map for *location*."""
        return {
            ParameterLocation.PATH: self.path_params,
            ParameterLocation.QUERY: self.query_params,
            ParameterLocation.HEADER: self.header_params,
            ParameterLocation.COOKIE: self.cookie_params,
        }[location]

    @property
    def body_content_type(self) -> Optional[str]:
        return _pick(self.body_content_types, self.body_content_type_index)

    @property
    def accept_content_type(self) -> Optional[str]:
        return _pick(self.accept_content_types, self.accept_content_type_index)


class BuiltRequest(BaseModel):
    """A fully assembled wire request. Produced by
    :func:`~openapi_tui.request.build_request`, consumed by the pipeline."""

    method: str
    url: str
    query: list[tuple[str, str]] = Field(default_factory=list)
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def header(self, name: str) -> Optional[str]:
        """Return the first header called *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


class ResponseRecord(BaseModel):
    """Latest outcome of dialing one operation.

    A record with ``error`` set is the *failed* state: the request never
    produced a usable response (transport error, undecodable body).
    """

    status: Optional[int] = None
    reason: str = ""
    protocol_version: str = ""
    headers: list[tuple[str, str]] = Field(default_factory=list)
    content_length: Optional[int] = None
    body: str = ""
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def size(self) -> int:
        """Declared content length, or the encoded body size."""
        if self.content_length is not None:
            return self.content_length
        return len(self.body.encode("utf-8"))


def _pick(items: list[str], index: Optional[int]) -> Optional[str]:
    if index is None or not 0 <= index < len(items):
        return None
    return items[index]
