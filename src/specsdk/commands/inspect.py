"""Inspect command -- preview what ``generate`` would emit.

Provides the read-only ``specsdk inspect`` command: it compiles every
operation of an OpenAPI document without rendering any source and lists,
per operation, the generated function name, HTTP method, URL template,
arguments and required checks. Compilation errors surface exactly as they
would during ``generate``.
"""

from __future__ import annotations

from typing import Optional

import typer

from specsdk.output import error, get_output, info


def inspect_command(
    spec: str = typer.Argument(
        ..., help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    sdk_version: Optional[str] = typer.Option(
        None, "--sdk-version", help="Value sent as the X-SDK-Version header."
    ),
    app_version: Optional[str] = typer.Option(
        None, "--app-version", help="Value sent as the X-APP-Version header."
    ),
) -> None:
    """List the operations a generated client would expose.

    With ``--json`` every compiled operation is printed in full, request
    specification included.

    Example::

        specsdk inspect openapi.json
        specsdk --json inspect openapi.json | jq '.[].request.method'
    """
    from specsdk.exceptions import SpecsdkError
    from specsdk.generator.assembler import compile_all
    from specsdk.output import OutputFormat
    from specsdk.parser import extract_spec, load_spec, validate_openapi_version

    try:
        raw = load_spec(spec)
        description = extract_spec(raw, validate_openapi_version(raw))
        operations = compile_all(description, sdk_version, app_version)
    except SpecsdkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json([op.model_dump(mode="json") for op in operations])
        return

    if not operations:
        info("No operations defined in this spec.")
        return

    headers = ["Operation", "Function", "Method", "URL", "Arguments", "Required"]
    rows: list[list[str]] = []
    for op in operations:
        rows.append([
            op.operation_id,
            op.function_name,
            op.request.method,
            "/" + op.request.url_template,
            ", ".join(op.arguments + (["body"] if op.accepts_body else [])) or "-",
            ", ".join(check.argument for check in op.request.validations) or "-",
        ])

    output.print_table(
        headers,
        rows,
        title=f"{description.info.title} {description.info.version} -- "
        f"{description.servers[0].url} ({len(rows)} operations)",
    )
