"""Structured error types for the gypsum indexer."""

from __future__ import annotations


class IndexerError(Exception):
    """Base error for all indexer errors."""


class ConfigurationError(IndexerError):
    """Raised when credentials or arguments are missing before any remote call."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing configuration: {', '.join(missing)}")


class InvalidParameters(IndexerError):
    """Raised when the job parameters cannot be parsed."""


class PreconditionFailed(IndexerError):
    """Raised when the lock object for a project version is missing."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__("failed to acquire the lock file for this project version")


class RemoteCallFailed(IndexerError):
    """Raised when a storage or issue tracker call returns an error."""

    def __init__(self, operation: str, detail: str, status: int | None = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status = status
        super().__init__(f"Remote call failed during {operation}: {detail}")


class MalformedState(IndexerError):
    """Raised when a stored object does not have the expected shape."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Malformed object at '{key}': {detail}")


class InvalidMetadata(IndexerError):
    """Raised when an uploaded JSON document fails schema validation."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Invalid metadata in '{key}': {detail}")
