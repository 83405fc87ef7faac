"""Assemble a complete client module from an API description.

This module is the last stage of the generation pipeline. It compiles every
operation of an :class:`~specsdk.models.ApiDescription` with
:func:`~specsdk.generator.operation.compile_operation` and renders the result
through the ``client.py.j2`` Jinja2 template into the source text of a single
self-contained Python module:

1. A warning header and a module docstring built from the API info.
2. The call-time helpers of :mod:`specsdk.runtime`, copied in verbatim.
3. ``dispatch`` and ``BASE_URL``.
4. One ``async def`` per operation, in document order.
5. The ``API`` mapping from operationId to function, and ``__all__``.

Rendering is deterministic: the same description and versions always give
byte-identical text, so regenerated clients diff cleanly.

Typical usage::

    from specsdk.generator import generate_sdk_from_openapi

    source = generate_sdk_from_openapi(Path("openapi.json").read_text(), sdk_version="1.0.0")
    Path("client.py").write_text(source)
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from specsdk import runtime
from specsdk.exceptions import SpecError
from specsdk.generator.operation import compile_operation
from specsdk.models import ApiDescription, CompiledOperation
from specsdk.parser import extract_spec, parse_spec_text, validate_openapi_version

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

MODULE_TEMPLATE = "client.py.j2"


def generate_sdk_from_openapi(
    content: str,
    sdk_version: Optional[str] = None,
    app_version: Optional[str] = None,
) -> str:
    """Generate client module source text from an OpenAPI document.

    Args:
        content: The document as JSON or YAML text.
        sdk_version: Value sent as ``X-SDK-Version`` by every function.
        app_version: Value sent as ``X-APP-Version`` by every function.

    Returns:
        The source text of the generated module.

    Raises:
        SpecError: If the document cannot be parsed, is not OpenAPI 3.x,
            or cannot be compiled.
        PathParameterMismatch: If an operation's path and path parameters
            disagree.
    """
    raw = parse_spec_text(content)
    description = extract_spec(raw, validate_openapi_version(raw))
    return assemble_module(description, sdk_version=sdk_version, app_version=app_version)


def assemble_module(
    description: ApiDescription,
    sdk_version: Optional[str] = None,
    app_version: Optional[str] = None,
) -> str:
    """Render the client module for *description*.

    Args:
        description: The normalised API description.
        sdk_version: Value of the ``X-SDK-Version`` header, omitted when
            empty.
        app_version: Value of the ``X-APP-Version`` header, omitted when
            empty.

    Returns:
        The module source text, ending with a newline.

    Raises:
        SpecError: If two operations share an operationId or a generated
            function name, or if any operation fails to compile.
    """
    operations = compile_all(description, sdk_version, app_version)

    env = _create_jinja_env()
    template = env.get_template(MODULE_TEMPLATE)
    source = template.render(
        info=description.info,
        base_url=description.servers[0].url,
        runtime=runtime_source(),
        operations=operations,
    )

    logger.info(
        "Assembled client for %s %s with %d operations",
        description.info.title,
        description.info.version,
        len(operations),
    )
    return source


def compile_all(
    description: ApiDescription,
    sdk_version: Optional[str] = None,
    app_version: Optional[str] = None,
) -> list[CompiledOperation]:
    """Compile every operation of *description*, rejecting duplicate names."""
    compiled: list[CompiledOperation] = []
    ids: set[str] = set()
    functions: dict[str, str] = {}

    for operation in description.operations:
        op = compile_operation(
            operation,
            description.info,
            description.servers,
            sdk_version=sdk_version,
            app_version=app_version,
        )
        if op.operation_id in ids:
            raise SpecError(f"Duplicate operationId: {op.operation_id}")
        if op.function_name in functions:
            raise SpecError(
                f"Operations {functions[op.function_name]} and {op.operation_id} "
                f"both generate the function name '{op.function_name}'"
            )
        ids.add(op.operation_id)
        functions[op.function_name] = op.operation_id
        compiled.append(op)

    return compiled


def runtime_source() -> str:
    """Return the source of :mod:`specsdk.runtime` without its docstring."""
    source = Path(runtime.__file__).read_text(encoding="utf-8")
    tree = ast.parse(source)
    first = tree.body[0] if tree.body else None
    if (
        isinstance(first, ast.Expr)
        and isinstance(first.value, ast.Constant)
        and isinstance(first.value.value, str)
    ):
        source = "\n".join(source.splitlines()[first.end_lineno:])
    return source.strip()


def _docstring_text(value: object) -> str:
    """Make *value* safe to place inside a triple-quoted docstring."""
    text = str(value).strip()
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the module template.

    Autoescape stays off since the output is Python, not HTML. Two filters
    are registered: ``py`` renders a value as a Python literal and ``doc``
    escapes text for a docstring.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["py"] = repr
    env.filters["doc"] = _docstring_text
    return env
