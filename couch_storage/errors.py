from __future__ import annotations


class CouchStorageError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(CouchStorageError):
    """The connection descriptor is absent, malformed or incomplete. Never retryable."""


class ConnectivityError(CouchStorageError):
    """The remote server was unreachable or rejected a bootstrap request."""


class NotInitializedError(CouchStorageError):
    """A get/save call happened before a successful init()."""

    def __init__(self, message: str = "storage not initialized; call init() first") -> None:
        super().__init__(message)


class StoreError(CouchStorageError):
    """Any backing-database failure during get/save other than a missing document."""
