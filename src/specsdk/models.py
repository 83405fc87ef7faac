"""Canonical Pydantic models shared across all specsdk modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`GenerationConfig`, :class:`OutputConfig`, :class:`GlobalConfig`.

**Parser output models** -- produced by the OpenAPI spec parser and consumed by
the operation compiler:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`APIParameter`,
    :class:`RequestBodyInfo`, :class:`APIOperation`, :class:`APIInfo`,
    :class:`ServerInfo`, and :class:`ApiDescription`.

**Compiler output models** -- the request specification of one operation,
rendered to source text by the module assembler:
    :class:`LiteralSegment`, :class:`ParameterSegment`, :class:`ConstantValue`,
    :class:`ArgumentValue`, :class:`HeaderBinding`, :class:`QueryBinding`,
    :class:`RequiredCheck`, :class:`RequestSpec`, :class:`ParameterDoc`,
    :class:`OperationDoc`, and :class:`CompiledOperation`.

Parser and compiler models are frozen: they are built once per generation run
and never mutated afterwards.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class GenerationConfig(BaseModel):
    """Defaults applied by ``specsdk generate`` when no CLI flag is given."""

    sdk_version: Optional[str] = Field(
        default=None, description="Value of the X-SDK-Version header"
    )
    app_version: Optional[str] = Field(
        default=None, description="Value of the X-APP-Version header"
    )
    output: Optional[str] = Field(
        default=None, description="Path of the generated module ('-' for stdout)"
    )


class OutputConfig(BaseModel):
    """Default output format, applied when no format flag is passed."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specsdk/config.json``.

    Loaded by :func:`~specsdk.config.load_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specsdk.config.resolve_config`
    for the full precedence chain.
    """

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Parser Output Models ---

_FROZEN = ConfigDict(frozen=True)


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations a parameter can be sent in by a generated client.

    Cookie parameters are not supported and are dropped by the extractor.
    """

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


class APIParameter(BaseModel):
    """A single parameter extracted from an OpenAPI operation.

    ``ordered`` marks a multi-valued query parameter whose values are sorted
    into a canonical order before transmission. ``schema_types`` lists the
    primitive types the schema accepts, in declaration order.
    """

    model_config = _FROZEN

    name: str
    location: ParameterLocation
    required: bool = False
    ordered: bool = False
    description: Optional[str] = None
    schema_types: list[str] = Field(default_factory=lambda: ["string"])


class RequestBodyInfo(BaseModel):
    """Parsed request body metadata for an :class:`APIOperation`.

    Its presence makes the generated function accept a ``body`` argument,
    which is never inspected. The first of ``content_types`` decides how
    httpx sends it.
    """

    model_config = _FROZEN

    required: bool = False
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)


class APIOperation(BaseModel):
    """A single parsed API operation (one URL path + HTTP method pair)."""

    model_config = _FROZEN

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[APIParameter] = Field(default_factory=list)
    request_body: Optional[RequestBodyInfo] = None


class APIInfo(BaseModel):
    """API metadata extracted from the OpenAPI spec's *Info Object*."""

    model_config = _FROZEN

    title: str
    version: str
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from the OpenAPI spec's ``servers`` array.

    Generated clients always send requests to the first server.
    """

    model_config = _FROZEN

    url: str
    description: Optional[str] = None


class ApiDescription(BaseModel):
    """Normalised representation of an OpenAPI document.

    Produced by :func:`~specsdk.parser.extractor.extract_spec` with every
    ``$ref`` already inlined, and consumed by the module assembler.
    ``servers`` is guaranteed to be non-empty.
    """

    model_config = _FROZEN

    info: APIInfo
    servers: list[ServerInfo]
    operations: list[APIOperation] = Field(default_factory=list)
    openapi_version: str = Field(
        description="Original OpenAPI version string (e.g., '3.0.3', '3.1.0')"
    )


# --- Compiler Output Models ---


class LiteralSegment(BaseModel):
    """A path segment copied verbatim into the request URL."""

    model_config = _FROZEN

    kind: Literal["literal"] = "literal"
    value: str


class ParameterSegment(BaseModel):
    """A path segment filled from a call-time argument."""

    model_config = _FROZEN

    kind: Literal["parameter"] = "parameter"
    name: str
    argument: str


PathSegment = Annotated[
    Union[LiteralSegment, ParameterSegment], Field(discriminator="kind")
]


class ConstantValue(BaseModel):
    """A header value fixed at generation time (e.g. the API version)."""

    model_config = _FROZEN

    kind: Literal["constant"] = "constant"
    value: str


class ArgumentValue(BaseModel):
    """A header value read from a call-time argument."""

    model_config = _FROZEN

    kind: Literal["argument"] = "argument"
    argument: str


ValueSource = Annotated[
    Union[ConstantValue, ArgumentValue], Field(discriminator="kind")
]


class HeaderBinding(BaseModel):
    """One header assignment; later bindings override earlier ones."""

    model_config = _FROZEN

    key: str
    source: ValueSource


class QueryBinding(BaseModel):
    """One query parameter bound to a call-time argument."""

    model_config = _FROZEN

    key: str
    argument: str
    ordered: bool = False


class RequiredCheck(BaseModel):
    """A call-time presence check for a required argument."""

    model_config = _FROZEN

    argument: str


BodyField = Literal["json", "data", "files", "content"]
"""The :meth:`httpx.AsyncClient.request` keyword carrying the request body."""


class RequestSpec(BaseModel):
    """Deterministic description of the request one operation issues.

    ``header_bindings`` are listed lowest priority first: the caller's
    override headers sit beneath all of them, so on a key collision the
    last binding wins. The body argument is passed unchanged under
    ``body_field``, chosen from ``content_type``, the first media type the
    request body declares.
    """

    model_config = _FROZEN

    method: str
    base_url: str
    path_segments: list[PathSegment] = Field(default_factory=list)
    header_bindings: list[HeaderBinding] = Field(default_factory=list)
    query_bindings: list[QueryBinding] = Field(default_factory=list)
    body_binding: Optional[str] = None
    body_field: BodyField = "json"
    content_type: Optional[str] = None
    validations: list[RequiredCheck] = Field(default_factory=list)

    @property
    def sends_content_type(self) -> bool:
        """Whether the declared media type must be sent as ``Content-Type``.

        httpx already labels ``json``, ``data`` and ``files`` payloads, so
        only raw content and concrete JSON variants other than
        ``application/json`` need it.
        """
        if self.body_binding is None or not self.content_type:
            return False
        if self.body_field == "content":
            return True
        return (
            self.body_field == "json"
            and self.content_type != "application/json"
            and "*" not in self.content_type
        )

    @property
    def url_template(self) -> str:
        """The path as ``segment/{argument}/...``, for display only."""
        parts = []
        for segment in self.path_segments:
            if isinstance(segment, ParameterSegment):
                parts.append("{" + segment.argument + "}")
            else:
                parts.append(segment.value)
        return "/".join(parts)


class ParameterDoc(BaseModel):
    """Documentation entry for one call-time argument."""

    model_config = _FROZEN

    argument: str
    name: str
    location: ParameterLocation
    types: str
    required: bool = False
    description: Optional[str] = None


class OperationDoc(BaseModel):
    """Documentation metadata embedded in the generated function's docstring."""

    model_config = _FROZEN

    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[ParameterDoc] = Field(default_factory=list)
    body_description: Optional[str] = None


class CompiledOperation(BaseModel):
    """Everything the module assembler needs to emit one client function."""

    model_config = _FROZEN

    operation_id: str
    function_name: str
    arguments: list[str] = Field(default_factory=list)
    accepts_body: bool = False
    request: RequestSpec
    doc: OperationDoc

    @property
    def takes_parameters(self) -> bool:
        """Whether the function takes a ``parameters`` mapping at all."""
        return bool(self.arguments) or self.accepts_body
