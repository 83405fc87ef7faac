"""Compile one API operation into a request specification.

This is the core algorithm of the generator. :func:`compile_operation` turns
an :class:`~specsdk.models.APIOperation` into a
:class:`~specsdk.models.CompiledOperation` whose
:class:`~specsdk.models.RequestSpec` fixes, ahead of any text emission:

* **Path segments** -- the path template split on ``/`` with empty segments
  dropped. A segment that is exactly ``{name}`` binds to the path parameter
  ``name``; every other segment is a literal kept verbatim.
* **Required checks** -- one per required argument, in declaration order.
* **Header bindings** -- listed lowest priority first. The caller's override
  headers sit beneath all of them; then ``X-API-Version`` (always),
  ``X-SDK-Version`` and ``X-APP-Version`` (when a value was supplied), and
  finally the operation's own header parameters, which win every collision.
* **Query bindings** -- declared query parameters only, each flagged when
  its values must be sorted into canonical order.
* **Body binding** -- the ``body`` argument, present only when the operation
  declares a request body. It is passed on unchanged; its first declared
  media type only picks the httpx keyword (``json``, ``data``, ``files`` or
  raw ``content``) carrying it.

The reserved version headers are never call-time arguments, whatever
location they were declared in. Compilation is pure: the same inputs always
yield an equal result.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from specsdk.exceptions import PathParameterMismatch, SpecError
from specsdk.generator.naming import function_name, sanitize_param_name
from specsdk.models import (
    APIInfo,
    APIOperation,
    APIParameter,
    ArgumentValue,
    CompiledOperation,
    ConstantValue,
    HeaderBinding,
    LiteralSegment,
    OperationDoc,
    ParameterDoc,
    ParameterLocation,
    ParameterSegment,
    QueryBinding,
    RequestSpec,
    RequiredCheck,
    ServerInfo,
)

logger = logging.getLogger(__name__)

API_VERSION_HEADER = "X-API-Version"
SDK_VERSION_HEADER = "X-SDK-Version"
APP_VERSION_HEADER = "X-APP-Version"

RESERVED_HEADERS = frozenset(
    name.lower() for name in (API_VERSION_HEADER, SDK_VERSION_HEADER, APP_VERSION_HEADER)
)
"""Header names synthesised by the compiler, compared case-insensitively."""

BODY_ARGUMENT = "body"

_PLACEHOLDER_RE = re.compile(r"^\{([^{}]+)\}$")
_ANY_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


def is_reserved(param: APIParameter) -> bool:
    """Whether *param* names one of the synthesised version headers."""
    return param.name.lower() in RESERVED_HEADERS


def compile_operation(
    operation: APIOperation,
    info: APIInfo,
    servers: list[ServerInfo],
    sdk_version: Optional[str] = None,
    app_version: Optional[str] = None,
) -> CompiledOperation:
    """Compile *operation* into the request specification of its client function.

    Args:
        operation: The operation to compile, with every ``$ref`` resolved.
        info: API metadata; ``info.version`` becomes the ``X-API-Version``
            header.
        servers: The API's servers; the first one is the base URL.
        sdk_version: Value of the ``X-SDK-Version`` header, omitted when
            empty.
        app_version: Value of the ``X-APP-Version`` header, omitted when
            empty.

    Returns:
        The compiled operation.

    Raises:
        SpecError: If the operation has no ``operationId``, no server is
            declared, or two arguments share a generated name.
        PathParameterMismatch: If the path template and the declared path
            parameters disagree.

    Example::

        compiled = compile_operation(op, description.info, description.servers)
        compiled.request.url_template   # 'users/{user_id}/orders'
    """
    operation_id = operation.operation_id
    if not operation_id:
        raise SpecError(
            f"{operation.method.value.upper()} {operation.path} has no operationId"
        )
    if not servers:
        raise SpecError("Cannot compile operations without a server URL")

    content_type = None
    if operation.request_body is not None and operation.request_body.content_types:
        content_type = operation.request_body.content_types[0]

    explicit = _assign_arguments(
        operation_id,
        [p for p in operation.parameters if not is_reserved(p)],
        operation.request_body is not None,
    )

    request = RequestSpec(
        method=operation.method.value.upper(),
        base_url=servers[0].url,
        path_segments=_segment_path(operation_id, operation.path, explicit),
        header_bindings=_header_bindings(explicit, info, sdk_version, app_version),
        query_bindings=[
            QueryBinding(key=p.name, argument=argument, ordered=p.ordered)
            for p, argument in explicit
            if p.location == ParameterLocation.QUERY
        ],
        body_binding=BODY_ARGUMENT if operation.request_body is not None else None,
        body_field=_body_field(content_type),
        content_type=content_type,
        validations=[RequiredCheck(argument=argument) for p, argument in explicit if p.required],
    )

    logger.debug(
        "Compiled %s: %s %s (%d arguments)",
        operation_id,
        request.method,
        request.url_template,
        len(explicit),
    )

    return CompiledOperation(
        operation_id=operation_id,
        function_name=function_name(operation_id),
        arguments=[argument for _, argument in explicit],
        accepts_body=operation.request_body is not None,
        request=request,
        doc=_document(operation, explicit),
    )


_Named = list[tuple[APIParameter, str]]


def _assign_arguments(
    operation_id: str, params: list[APIParameter], has_body: bool
) -> _Named:
    """Pair every explicit parameter with its argument name, rejecting collisions."""
    taken: dict[str, str] = {BODY_ARGUMENT: "the request body"} if has_body else {}
    named: _Named = []
    for param in params:
        argument = sanitize_param_name(param.name)
        owner = f"{param.location.value} parameter '{param.name}'"
        if argument in taken:
            raise SpecError(
                f"{operation_id}: {owner} and {taken[argument]} "
                f"both map to the argument name '{argument}'"
            )
        taken[argument] = owner
        named.append((param, argument))
    return named


def _segment_path(
    operation_id: str, path: str, params: _Named
) -> list[LiteralSegment | ParameterSegment]:
    """Split *path* into literal and parameter segments, checking the bijection."""
    path_params = {
        p.name: (p, argument) for p, argument in params if p.location == ParameterLocation.PATH
    }
    segments: list[LiteralSegment | ParameterSegment] = []
    bound: set[str] = set()

    for part in path.split("/"):
        if not part:
            continue
        match = _PLACEHOLDER_RE.match(part)
        if match is None:
            if _ANY_PLACEHOLDER_RE.search(part):
                raise PathParameterMismatch(
                    operation_id, path, f"placeholder embedded in segment '{part}'"
                )
            segments.append(LiteralSegment(value=part))
            continue

        name = match.group(1)
        if name not in path_params:
            raise PathParameterMismatch(
                operation_id, path, f"placeholder '{{{name}}}' has no path parameter"
            )
        if name in bound:
            raise PathParameterMismatch(
                operation_id, path, f"placeholder '{{{name}}}' appears more than once"
            )
        param, argument = path_params[name]
        if not param.required:
            raise PathParameterMismatch(
                operation_id, path, f"path parameter '{name}' must be required"
            )
        bound.add(name)
        segments.append(ParameterSegment(name=name, argument=argument))

    unbound = sorted(name for name in path_params if name not in bound)
    if unbound:
        raise PathParameterMismatch(
            operation_id, path, "path parameters without a placeholder: " + ", ".join(unbound)
        )
    return segments


def _header_bindings(
    params: _Named,
    info: APIInfo,
    sdk_version: Optional[str],
    app_version: Optional[str],
) -> list[HeaderBinding]:
    bindings = [HeaderBinding(key=API_VERSION_HEADER, source=ConstantValue(value=info.version))]
    if sdk_version:
        bindings.append(
            HeaderBinding(key=SDK_VERSION_HEADER, source=ConstantValue(value=sdk_version))
        )
    if app_version:
        bindings.append(
            HeaderBinding(key=APP_VERSION_HEADER, source=ConstantValue(value=app_version))
        )
    bindings.extend(
        HeaderBinding(key=p.name, source=ArgumentValue(argument=argument))
        for p, argument in params
        if p.location == ParameterLocation.HEADER
    )
    return bindings


def _document(operation: APIOperation, params: _Named) -> OperationDoc:
    return OperationDoc(
        summary=operation.summary,
        description=operation.description,
        parameters=[
            ParameterDoc(
                argument=argument,
                name=p.name,
                location=p.location,
                types="|".join(p.schema_types),
                required=p.required,
                description=p.description,
            )
            for p, argument in params
        ],
        body_description=(
            operation.request_body.description if operation.request_body else None
        ),
    )


def _body_field(content_type: Optional[str]) -> str:
    """Pick the httpx keyword sending a body declared as *content_type*.

    JSON media types (``application/json``, ``*+json``), wildcards and an
    undeclared type use ``json``; forms use ``data`` or ``files``; anything
    else (text, XML, binary) is sent as raw ``content``.
    """
    if not content_type:
        return "json"
    media = content_type.split(";")[0].strip().lower()
    if media == "application/json" or media.endswith("+json") or "*" in media:
        return "json"
    if media == "application/x-www-form-urlencoded":
        return "data"
    if media == "multipart/form-data":
        return "files"
    return "content"
