"""Exception hierarchy for specsdk.

All generation-time exceptions inherit from :class:`SpecsdkError`, which
carries an ``exit_code`` attribute mapped to a constant from
:mod:`specsdk.exit_codes`. The top-level error handler in
:func:`specsdk.app.main` catches ``SpecsdkError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecsdkError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ConfigError                (exit 1)
    +-- SpecError                  (exit 7)
        +-- PathParameterMismatch  (exit 8)

The call-time ``MissingParameter`` error is not part of this hierarchy: it
lives in :mod:`specsdk.runtime` so that generated modules carry it without
depending on this package.
"""

from specsdk.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PATH_MISMATCH,
    EXIT_SPEC_ERROR,
)


class SpecsdkError(Exception):
    """Base exception for all specsdk errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specsdk.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecsdkError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecsdkError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecError(SpecsdkError):
    """Raised when the OpenAPI description is malformed or cannot be compiled.

    Covers unreadable documents, unsupported versions, missing ``info`` /
    ``servers`` / ``paths``, unresolvable ``$ref`` pointers, duplicate
    operation ids, and identifier collisions inside one operation.
    """

    exit_code = EXIT_SPEC_ERROR


class PathParameterMismatch(SpecError):
    """Raised when a path template and its path parameters disagree.

    Args:
        operation_id: The operation being compiled.
        path: The offending path template.
        message: What exactly is inconsistent.
    """

    exit_code = EXIT_PATH_MISMATCH

    def __init__(self, operation_id: str, path: str, message: str):
        super().__init__(f"{operation_id} ({path}): {message}")
        self.operation_id = operation_id
        self.path = path
