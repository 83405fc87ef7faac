"""Read OpenAPI documents from a file, a URL, stdin, or an in-memory string.

Every entry point ends in :func:`parse_spec_text`, which accepts JSON or
YAML and insists on a top-level mapping. :func:`validate_openapi_version`
then rejects anything that is not an OpenAPI 3.x document, so the extractor
only ever sees shapes it understands.

Public functions:

* :func:`load_spec` -- dispatch on the source string (``-``, URL, or path).
* :func:`parse_spec_text` -- parse a document already held in memory.
* :func:`validate_openapi_version` -- return the ``openapi`` version string.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specsdk.exceptions import SpecError

logger = logging.getLogger(__name__)

_JSON_SUFFIXES = frozenset({".json"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, a file path, or stdin (``-``).

    Args:
        source: ``-`` for stdin, an ``http://`` / ``https://`` URL, or a
            local file path.

    Returns:
        The raw document as a dictionary (``$ref`` pointers untouched).

    Raises:
        SpecError: If the source cannot be read or parsed.
    """
    if source == "-":
        logger.debug("Reading OpenAPI document from stdin")
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        logger.debug("Fetching OpenAPI document from %s", source)
        return _load_from_url(source)
    logger.debug("Reading OpenAPI document from %s", source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecError("No input received from stdin")
    return parse_spec_text(content)


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP, using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    else:
        hint = ""
    return parse_spec_text(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local document, using the file extension as a format hint."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        hint = "json"
    elif suffix in _YAML_SUFFIXES:
        hint = "yaml"
    else:
        hint = ""
    return parse_spec_text(content, hint=hint)


def parse_spec_text(content: str, hint: str = "") -> dict[str, Any]:
    """Parse a JSON or YAML document held in memory.

    JSON is attempted first unless *hint* is ``"yaml"``; since JSON is a
    subset of YAML, a YAML fallback still accepts any document a lenient
    JSON producer may have emitted. A ``"json"`` hint disables the fallback.

    Args:
        content: The document text.
        hint: ``"json"``, ``"yaml"``, or ``""`` when the format is unknown.

    Returns:
        The parsed top-level mapping.

    Raises:
        SpecError: If the text is not a JSON/YAML mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecError(
        "Failed to parse spec as JSON or YAML" + "".join(f"\n  {e}" for e in errors)
    )


def _require_mapping(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise SpecError(f"Spec must be a JSON/YAML object (got {kind})")
    return document


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's OpenAPI version, rejecting non-3.x documents.

    Args:
        spec: The raw document.

    Returns:
        The ``openapi`` field as a string (e.g. ``"3.0.3"``).

    Raises:
        SpecError: For Swagger 2.x documents, a missing ``openapi`` field,
            or any major version other than 3.
    """
    if "swagger" in spec:
        raise SpecError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be compiled. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.x documents can be compiled."
        )
    if not version_str.startswith(("3.0.", "3.1.")):
        logger.warning("OpenAPI %s is newer than 3.1; compiling anyway", version_str)
    return version_str
