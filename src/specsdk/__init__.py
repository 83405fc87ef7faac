"""specsdk -- Generate async Python API clients from OpenAPI 3.0/3.1 specs.

This package compiles an OpenAPI description into the source text of a
standalone client module: one ``async def`` per operation, each validating
its required parameters, building the request path, sanitising headers and
query parameters, and dispatching the request through :mod:`httpx`.

Typical workflow::

    specsdk generate openapi.json -o api_client.py --sdk-version 1.2.0
    specsdk inspect openapi.json

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    runtime: Sanitisation helpers embedded in every generated module.
"""

__version__ = "0.1.0"
