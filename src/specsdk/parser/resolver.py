"""Flatten OpenAPI documents by inlining internal ``$ref`` pointers.

Operations compiled into a client must be self-contained: a parameter that
points at ``#/components/parameters/Duration`` has to become the parameter
object itself before the extractor can read its ``name`` and ``in`` fields.
:func:`resolve_refs` returns a deep copy of the document in which every
resolvable reference has been replaced by its target.

Only same-document references (``#/...``) are followed; anything else is a
:class:`~specsdk.exceptions.SpecError`. A reference that leads back to
itself along the current resolution chain is left in place, so recursive
schemas terminate.
"""

from __future__ import annotations

import copy
from typing import Any

from specsdk.exceptions import SpecError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *spec* with all internal ``$ref`` pointers inlined.

    Args:
        spec: The raw document as returned by
            :func:`~specsdk.parser.loader.load_spec`.

    Returns:
        A new dictionary; the input is not modified.

    Raises:
        SpecError: On external references or pointers to missing nodes.

    Example::

        flat = resolve_refs(load_spec("openapi.yaml"))
        flat["paths"]["/delay"]["get"]["parameters"][0]["name"]  # 'duration'
    """
    root = copy.deepcopy(spec)
    return _inline(root, root, frozenset())


def _pointer_target(ref: str, root: dict[str, Any]) -> Any:
    """Follow a JSON pointer such as ``#/components/schemas/Pet`` (RFC 6901)."""
    if not ref.startswith("#/"):
        raise SpecError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    node: Any = root
    for token in ref[2:].split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict):
            if token not in node:
                raise SpecError(
                    f"Cannot resolve $ref '{ref}': key '{token}' not found at path"
                )
            node = node[token]
        elif isinstance(node, list):
            try:
                node = node[int(token)]
            except (ValueError, IndexError) as exc:
                raise SpecError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{token}'"
                ) from exc
        else:
            raise SpecError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(node).__name__}"
            )
    return node


def _inline(node: Any, root: dict[str, Any], chain: frozenset[str]) -> Any:
    """Depth-first replacement of ``$ref`` dicts below *node*.

    *chain* holds the references currently being expanded on this branch;
    siblings get their own copy, so only true cycles are cut short.
    """
    if isinstance(node, list):
        return [_inline(item, root, chain) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in chain:
            return node
        return _inline(_pointer_target(ref, root), root, chain | {ref})

    return {key: _inline(value, root, chain) for key, value in node.items()}
