"""Extract the normalised API description from a resolved OpenAPI document.

This module walks a fully ``$ref``-resolved OpenAPI document and builds the
:class:`~specsdk.models.ApiDescription` the operation compiler consumes:
API metadata, the server list, and the ordered operation list.

The single public entry point is :func:`extract_spec`. Ordering is taken from
the document itself -- paths in declaration order, then methods in the order
they appear inside each path item -- so that regenerating a client from an
unchanged document yields identical output.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from specsdk.exceptions import SpecError
from specsdk.models import (
    APIInfo,
    APIOperation,
    APIParameter,
    ApiDescription,
    HTTPMethod,
    ParameterLocation,
    RequestBodyInfo,
    ServerInfo,
)
from specsdk.parser.resolver import resolve_refs

logger = logging.getLogger(__name__)

_HTTP_METHODS = {m.value: m for m in HTTPMethod}

_SERVER_VARIABLE_RE = re.compile(r"\{([^{}]+)\}")


def extract_spec(raw_spec: dict[str, Any], openapi_version: str) -> ApiDescription:
    """Build an :class:`~specsdk.models.ApiDescription` from a raw document.

    Resolves every ``$ref`` via :func:`~specsdk.parser.resolver.resolve_refs`
    first, then checks that the sections a client cannot be generated
    without are present.

    Args:
        raw_spec: The raw document as returned by
            :func:`~specsdk.parser.loader.load_spec`.
        openapi_version: The validated version string, as returned by
            :func:`~specsdk.parser.loader.validate_openapi_version`.

    Returns:
        The normalised description.

    Raises:
        SpecError: If ``info`` (or ``info.version``), a non-empty
            ``servers`` list, or ``paths`` is missing.

    Example::

        raw = load_spec("openapi.json")
        description = extract_spec(raw, validate_openapi_version(raw))
        [op.operation_id for op in description.operations]
    """
    spec = resolve_refs(raw_spec)
    for section in ("info", "servers", "paths"):
        if spec.get(section) is None:
            raise SpecError(f"OpenAPI document has no '{section}' section")
    if not spec["servers"]:
        raise SpecError("OpenAPI 'servers' section must list at least one server")

    return ApiDescription(
        info=_extract_info(spec["info"]),
        servers=_extract_servers(spec["servers"]),
        operations=_extract_operations(spec["paths"]),
        openapi_version=openapi_version,
    )


def _extract_info(info: dict[str, Any]) -> APIInfo:
    if not isinstance(info, dict) or info.get("version") in (None, ""):
        raise SpecError("OpenAPI 'info' section must declare a version")
    return APIInfo(
        title=info.get("title") or "Untitled API",
        version=str(info["version"]),
        description=info.get("description"),
    )


def _extract_servers(servers: Any) -> list[ServerInfo]:
    """Extract server entries, substituting server variables with their defaults.

    Args:
        servers: The raw ``servers`` array.

    Returns:
        One :class:`~specsdk.models.ServerInfo` per entry, in order.
    """
    if not isinstance(servers, list):
        raise SpecError("OpenAPI 'servers' section must be a list")

    result: list[ServerInfo] = []
    for server in servers:
        if not isinstance(server, dict) or "url" not in server:
            raise SpecError(f"Server entry without a url: {server!r}")
        variables = server.get("variables") or {}
        url = _SERVER_VARIABLE_RE.sub(
            lambda m: str(variables.get(m.group(1), {}).get("default", m.group(0))),
            server["url"],
        )
        result.append(ServerInfo(url=url, description=server.get("description")))
    return result


def _extract_operations(paths: dict[str, Any]) -> list[APIOperation]:
    """Extract every operation from the ``paths`` object in document order.

    Args:
        paths: The resolved ``paths`` object.

    Returns:
        A list of :class:`~specsdk.models.APIOperation`, one per path and
        HTTP method combination.
    """
    if not isinstance(paths, dict):
        raise SpecError("OpenAPI 'paths' section must be an object")

    operations: list[APIOperation] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = _parameter_list(path_item.get("parameters"), path)

        # Iterate the path item's own keys so the method order is stable.
        for key, operation in path_item.items():
            method = _HTTP_METHODS.get(key)
            if method is None or not isinstance(operation, dict):
                continue

            op_params = _parameter_list(operation.get("parameters"), f"{key.upper()} {path}")
            merged = _merge_parameters(path_params, op_params)
            operations.append(
                APIOperation(
                    path=path,
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    parameters=_extract_parameters(merged),
                    request_body=_extract_request_body(operation.get("requestBody")),
                )
            )

    return operations


def _parameter_list(value: Any, where: str) -> list[dict[str, Any]]:
    """Return a ``parameters`` array, treating an explicit ``null`` as empty."""
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(p, dict) for p in value):
        raise SpecError(f"'parameters' of {where} must be an array of objects")
    return value


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.

    Args:
        path_params: Parameters defined at the path level.
        op_params: Parameters defined at the operation level.

    Returns:
        Path-level survivors first, then all operation-level parameters.
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[APIParameter]:
    """Convert raw parameter objects into :class:`~specsdk.models.APIParameter` models.

    Path parameters are always required regardless of the ``required`` field.
    Cookie parameters (and any unknown ``in`` value) cannot be sent by a
    generated client and are skipped with a warning.

    Args:
        params_list: Merged raw parameter dictionaries.

    Returns:
        The supported parameters, in order.
    """
    parameters: list[APIParameter] = []

    for param in params_list:
        name = param.get("name", "")
        location_str = param.get("in", "query")
        try:
            location = ParameterLocation(location_str)
        except ValueError:
            logger.warning("Skipping %s parameter %r: location not supported", location_str, name)
            continue

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            APIParameter(
                name=name,
                location=location,
                required=required,
                ordered=bool(param.get("ordered", param.get("x-ordered", False))),
                description=param.get("description"),
                schema_types=_extract_schema_types(param.get("schema")),
            )
        )

    return parameters


def _extract_schema_types(schema: Any) -> list[str]:
    """List the primitive types a parameter schema accepts.

    ``oneOf`` / ``anyOf`` unions contribute each member's types in order,
    an OpenAPI 3.1 type array contributes its non-null entries, and a plain
    ``type`` contributes itself. Duplicates are dropped; ``["string"]`` is
    the fallback when nothing is declared.

    Example::

        >>> _extract_schema_types({"oneOf": [{"type": "number"}, {"type": "string"}]})
        ['number', 'string']
    """
    types: list[str] = []

    def collect(node: Any) -> None:
        if not isinstance(node, dict):
            return
        for key in ("oneOf", "anyOf"):
            for member in node.get(key) or []:
                collect(member)
        declared = node.get("type")
        if isinstance(declared, list):
            candidates = [t for t in declared if t != "null"]
        elif declared is not None:
            candidates = [declared]
        else:
            candidates = []
        for candidate in candidates:
            if str(candidate) not in types:
                types.append(str(candidate))

    collect(schema)
    return types or ["string"]


def _extract_request_body(body: dict[str, Any] | None) -> RequestBodyInfo | None:
    """Extract request body metadata, or ``None`` when no body is declared."""
    if body is None:
        return None

    return RequestBodyInfo(
        required=body.get("required", False),
        description=body.get("description"),
        content_types=list((body.get("content") or {}).keys()),
    )
