"""Client generator -- compile an API description into a Python module.

This sub-package is the second half of the specsdk pipeline: it takes an
:class:`~specsdk.models.ApiDescription` (produced by the parser) and emits
the source text of a self-contained async client module.

Typical usage::

    from specsdk.generator import generate_sdk_from_openapi

    source = generate_sdk_from_openapi(text, sdk_version="2.0.0")

Sub-modules:

* :mod:`~specsdk.generator.naming` -- Turn parameter names and operation ids
  into Python identifiers.
* :mod:`~specsdk.generator.operation` -- The core algorithm compiling one
  operation into a request specification.
* :mod:`~specsdk.generator.assembler` -- Render every compiled operation,
  plus the runtime helpers, into one module.
"""

from specsdk.generator.assembler import assemble_module, generate_sdk_from_openapi
from specsdk.generator.operation import compile_operation

__all__ = ["assemble_module", "compile_operation", "generate_sdk_from_openapi"]
