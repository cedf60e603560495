"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_tui.exceptions.OpenapiTuiError` subclass.

Example::

    $ openapi-tui -o missing.yaml
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the document could not be loaded
"""

EXIT_SUCCESS = 0
"""The program finished successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The program was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed or validated."""

EXIT_INTERNAL_ERROR = 70
"""An internal invariant of the dispatch loop was violated."""

EXIT_CANCELLED = 130
"""The program was interrupted with Ctrl-C."""
