"""Exception hierarchy for promql-cli.

Every error raised while handling a single query derives from PromQLCliError,
so the REPL can report it and move on to the next prompt.
"""


class PromQLCliError(Exception):
    """Base exception for all promql-cli errors."""

    def __init__(self, message: str, *, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class ConfigError(PromQLCliError):
    """Invalid configuration (base URL, header string, ...)."""


class TransportFailure(PromQLCliError):
    """The HTTP request to the backend could not be completed."""

    def __init__(self, message: str, *, status_code: int | None = None, hint: str | None = None):
        super().__init__(message, hint=hint)
        self.status_code = status_code


class MalformedResponse(PromQLCliError):
    """The response body is not valid JSON or lacks required fields."""


class BackendError(PromQLCliError):
    """The backend answered with status=error."""

    def __init__(self, message: str, *, error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type


class UnsupportedResultType(PromQLCliError):
    """The envelope names a resultType this client cannot decode."""

    def __init__(self, result_type: str):
        super().__init__(f"unsupported result type: {result_type!r}")
        self.result_type = result_type
