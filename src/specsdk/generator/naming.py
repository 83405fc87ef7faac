"""Turn OpenAPI names into Python identifiers for generated code.

Two names are derived for every operation:

* **Argument names** -- the keys of the ``parameters`` mapping a generated
  function accepts, via :func:`sanitize_param_name`.
* **Function names** -- the ``def`` name of the generated coroutine, via
  :func:`function_name`. The exported ``API`` mapping is still keyed by the
  original ``operationId``.

Both are pure and deterministic. Neither guarantees uniqueness across a set
of inputs (``petId`` and ``pet_id`` collide); the compiler checks for that.
"""

from __future__ import annotations

import keyword
import re

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_param_name(name: str) -> str:
    """Convert an OpenAPI parameter name to a valid Python identifier.

    Applies the following transformations in order:

    1. CamelCase boundaries are split with underscores (``petId`` becomes
       ``pet_id``).
    2. The string is lowercased.
    3. Hyphens and dots are replaced with underscores.
    4. Any remaining non-alphanumeric/non-underscore characters are replaced.
    5. Consecutive and leading/trailing underscores are collapsed.
    6. An empty result defaults to ``"param"``.
    7. A leading digit gets an underscore prefix.
    8. Python keywords get a trailing underscore per PEP 8 convention
       (e.g., ``"class"`` becomes ``"class_"``).

    Args:
        name: The raw OpenAPI parameter name (e.g., ``"petId"``,
            ``"X-Request-ID"``, ``"filter.status"``).

    Returns:
        A valid Python identifier (e.g., ``"pet_id"``, ``"x_request_id"``,
        ``"filter_status"``).

    Example::

        >>> sanitize_param_name("petId")
        'pet_id'
        >>> sanitize_param_name("X-Request-ID")
        'x_request_id'
        >>> sanitize_param_name("class")
        'class_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = result.replace("-", "_").replace(".", "_")
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def function_name(operation_id: str) -> str:
    """Derive the ``def`` name of a generated function from its operation id.

    Uses the same rules as :func:`sanitize_param_name`, so ``getOpenAPI``
    becomes ``get_open_api`` and ``putEcho`` becomes ``put_echo``. Names the
    generated module defines itself are suffixed to avoid clobbering them.

    Example::

        >>> function_name("getDelay")
        'get_delay'
        >>> function_name("dispatch")
        'dispatch_'
    """
    name = sanitize_param_name(operation_id)
    if name in MODULE_NAMES:
        name = f"{name}_"
    return name


MODULE_NAMES = frozenset(
    {
        "clean_headers",
        "clean_query",
        "dispatch",
        "merge_headers",
        "functools",
        "httpx",
        "ordered_compare",
        "require_parameter",
        "send_request",
        "sort_ordered",
        # builtins called by the generated code
        "dict",
        "isinstance",
        "list",
        "sorted",
        "str",
        "super",
        "tuple",
    }
)
"""Lowercase names a generated function must not shadow."""
