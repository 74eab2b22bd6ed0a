from __future__ import annotations

from .connection import ConnectionDescriptor, CouchConnection, initialize
from .errors import ConfigError, ConnectivityError, CouchStorageError, NotInitializedError, StoreError
from .repositories import DocumentResourceStore, ResourceRepository
from .resources import LogicalResource, ResourceLayout
from .storage import CouchStorage

__all__ = [
    "ConnectionDescriptor",
    "CouchConnection",
    "initialize",
    "CouchStorageError",
    "ConfigError",
    "ConnectivityError",
    "NotInitializedError",
    "StoreError",
    "DocumentResourceStore",
    "ResourceRepository",
    "LogicalResource",
    "ResourceLayout",
    "CouchStorage",
]
