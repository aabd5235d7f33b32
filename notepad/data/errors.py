"""Errors raised by the note provider.

Storage-engine failures (``sqlite3.Error``) are not wrapped; they reach the
caller unchanged.
"""


class ProviderError(Exception):
    """Base class for every error raised by the data-access layer."""


class UnrecognizedResource(ProviderError, ValueError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Unknown resource path: {path!r}")
        self.path = path


class ValidationError(ProviderError, ValueError):
    pass


class InvalidColumn(ProviderError, ValueError):
    def __init__(self, column: str) -> None:
        super().__init__(f"Invalid column: {column!r}")
        self.column = column


class InsertFailed(ProviderError):
    pass


class UnsupportedOperation(ProviderError):
    pass


class ResourceNotFound(ProviderError, LookupError):
    pass
