"""Exception hierarchy for openapi-tui.

All exceptions inherit from :class:`OpenapiTuiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`openapi_tui.exit_codes`.
The top-level error handler in :func:`openapi_tui.app.main` catches
``OpenapiTuiError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Two members of the hierarchy never reach the entry point during normal use:
:class:`RequestBuildError` and :class:`SchemaResolutionError` are confined to
the active session and shown on the status line instead.

Subclass hierarchy::

    OpenapiTuiError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- SpecParseError         (exit 7)
    +-- ConfigError            (exit 1)
    +-- RequestBuildError      (exit 1)
    +-- SchemaResolutionError  (exit 1)
    +-- DispatchError          (exit 70)
"""

from openapi_tui.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INTERNAL_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class OpenapiTuiError(Exception):
    """Base exception for all openapi-tui errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OpenapiTuiError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(OpenapiTuiError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or validated."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(OpenapiTuiError):
    """Raised for configuration problems (invalid JSON, unknown key bindings)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestBuildError(OpenapiTuiError):
    """Raised when a draft cannot be assembled into a valid HTTP request.

    Covers unknown HTTP methods, webhook entries (which the server calls, not
    the client) and URLs that no longer parse after path substitution.
    """


class SchemaResolutionError(OpenapiTuiError):
    """Raised when a ``$ref`` pointer cannot be resolved or forms a cycle."""


class DispatchError(OpenapiTuiError):
    """Raised when a handler violates the dispatch loop's termination rule."""

    exit_code = EXIT_INTERNAL_ERROR
