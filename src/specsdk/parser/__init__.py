"""OpenAPI spec parser -- load, flatten ``$ref`` pointers, and extract operations.

This sub-package plays the role of the spec normaliser: it turns a raw
OpenAPI 3.x document (JSON or YAML, local file, remote URL, or stdin) into an
:class:`~specsdk.models.ApiDescription` whose operations are self-contained.

Typical usage::

    from specsdk.parser import load_spec, validate_openapi_version, extract_spec

    raw = load_spec("openapi.json")
    version = validate_openapi_version(raw)
    description = extract_spec(raw, version)

Sub-modules:

* :mod:`~specsdk.parser.loader` -- I/O layer plus format detection and
  OpenAPI version validation.
* :mod:`~specsdk.parser.resolver` -- ``$ref`` inlining with cycle detection.
* :mod:`~specsdk.parser.extractor` -- Builds the ordered operation list.
"""

from specsdk.parser.extractor import extract_spec
from specsdk.parser.loader import load_spec, parse_spec_text, validate_openapi_version
from specsdk.parser.resolver import resolve_refs

__all__ = [
    "load_spec",
    "parse_spec_text",
    "validate_openapi_version",
    "resolve_refs",
    "extract_spec",
]
