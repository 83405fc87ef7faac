"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specsdk.exceptions.SpecsdkError` subclass.
CI scripts that regenerate clients can inspect the exit code to tell a
broken spec from a stale generated file without parsing stderr.

Example::

    $ specsdk generate openapi.json --check -o api_client.py
    $ echo $?
    9   # EXIT_OUTDATED -- the committed client no longer matches the spec
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_ERROR = 7
"""The OpenAPI description could not be parsed, validated, or compiled."""

EXIT_PATH_MISMATCH = 8
"""A path template and its declared path parameters disagree."""

EXIT_OUTDATED = 9
"""``--check`` found a generated file that differs from a fresh generation."""
