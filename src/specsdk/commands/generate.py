"""Generate command -- write a client module from an OpenAPI document.

Implements the ``specsdk generate`` top-level command: load the document
(URL, local file, or stdin), compile every operation, and write the
assembled module atomically, or to stdout when no output path is set.

With ``--check`` nothing is written; the command instead fails with
:data:`~specsdk.exit_codes.EXIT_OUTDATED` when the existing file differs
from a fresh generation, which lets CI catch a stale committed client.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specsdk.exit_codes import EXIT_OUTDATED
from specsdk.output import debug, error, info, print_source, success, suggest

STDOUT = "-"


def generate_command(
    spec: str = typer.Argument(
        ..., help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Module path to write ('-' for stdout)."
    ),
    sdk_version: Optional[str] = typer.Option(
        None, "--sdk-version", help="Value sent as the X-SDK-Version header."
    ),
    app_version: Optional[str] = typer.Option(
        None, "--app-version", help="Value sent as the X-APP-Version header."
    ),
    check: bool = typer.Option(
        False, "--check", help="Fail if the output file is not up to date."
    ),
) -> None:
    """Generate an async Python client module from an OpenAPI spec.

    Missing options fall back to the environment, then ``./specsdk.json``,
    then the global config (see :func:`~specsdk.config.resolve_config`).

    Raises:
        typer.Exit: With the error's exit code when the spec cannot be
            loaded or compiled, with code 2 for ``--check`` without an
            output file, and with code 9 when ``--check`` finds a stale file.

    Example::

        specsdk generate openapi.json -o src/api_client.py --sdk-version 1.4.0
        specsdk generate https://api.example.com/openapi.json > client.py
        specsdk generate openapi.yaml -o src/api_client.py --check
    """
    from specsdk.config import atomic_write, resolve_config
    from specsdk.exceptions import InvalidUsageError, SpecsdkError
    from specsdk.generator import assemble_module
    from specsdk.parser import extract_spec, load_spec, validate_openapi_version

    try:
        config = resolve_config(
            cli_sdk_version=sdk_version,
            cli_app_version=app_version,
            cli_output=output,
        )
        generation = config.generation
        target = generation.output or STDOUT
        if check and target == STDOUT:
            raise InvalidUsageError("--check needs an output file (-o PATH)")

        debug(f"Loading spec from: {spec}")
        raw = load_spec(spec)
        description = extract_spec(raw, validate_openapi_version(raw))
        source = assemble_module(
            description,
            sdk_version=generation.sdk_version,
            app_version=generation.app_version,
        )
    except SpecsdkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    count = len(description.operations)

    if check:
        path = Path(target)
        current = path.read_text(encoding="utf-8") if path.is_file() else None
        if current != source:
            error(f"{target} is out of date with {spec}")
            suggest(f"Run: specsdk generate {spec} -o {target}")
            raise typer.Exit(code=EXIT_OUTDATED)
        success(f"{target} is up to date ({count} operations)")
        return

    if target == STDOUT:
        print_source(source)
        return

    atomic_write(Path(target), source)
    info(f"{description.info.title} {description.info.version}")
    success(f"Wrote {count} operations to {target}")
