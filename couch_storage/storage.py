from __future__ import annotations

import logging
from typing import Any

import httpx

from .connection import CouchConnection, initialize
from .errors import NotInitializedError
from .repositories import DocumentResourceStore
from .resources import LogicalResource
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class CouchStorage:
    """
    Storage module for the host application: flows, credentials and settings
    persisted in a CouchDB/Cloudant database instead of on local disk.

    `init()` must succeed once before any get_*/save_* call.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._connection: CouchConnection | None = None
        self._store: DocumentResourceStore | None = None

    @property
    def initialized(self) -> bool:
        return self._store is not None

    async def init(self, host_settings: Any = None, *, raw_config: str | None = None) -> None:
        """
        `host_settings` is the host's own settings object; it is accepted for
        API compatibility and not read. The connection descriptor comes from
        `raw_config` when given, else from CLOUDANT_CREDENTIALS.
        """
        if self._store is not None:
            logger.debug("COUCH STORAGE: already initialized")
            return

        settings = self._settings or get_settings()
        raw = raw_config if raw_config is not None else settings.credentials
        logger.info("COUCH STORAGE: initializing")
        connection = await initialize(
            raw,
            transport=self._transport,
            debug_log_requests=settings.debug_log_requests,
        )
        self._connection = connection
        self._store = DocumentResourceStore(connection, serialize_writes=settings.serialize_writes)
        logger.info("COUCH STORAGE: initialized")

    async def close(self) -> None:
        """Close the connection; get_*/save_* raise NotInitializedError until the next init()."""
        connection = self._connection
        self._store = None
        self._connection = None
        if connection is not None:
            await connection.aclose()

    def _require_store(self) -> DocumentResourceStore:
        if self._store is None:
            raise NotInitializedError()
        return self._store

    async def get_flows(self) -> list[Any]:
        return await self._require_store().get(LogicalResource.FLOWS)

    async def save_flows(self, flows: list[Any]) -> None:
        await self._require_store().save(LogicalResource.FLOWS, flows)

    async def get_credentials(self) -> dict[str, Any]:
        return await self._require_store().get(LogicalResource.CREDENTIALS)

    async def save_credentials(self, credentials: dict[str, Any]) -> None:
        await self._require_store().save(LogicalResource.CREDENTIALS, credentials)

    async def get_settings(self) -> dict[str, Any]:
        return await self._require_store().get(LogicalResource.SETTINGS)

    async def save_settings(self, settings: dict[str, Any]) -> None:
        await self._require_store().save(LogicalResource.SETTINGS, settings)
