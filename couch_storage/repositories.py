from __future__ import annotations

import contextlib
import logging
from typing import Any, Mapping, Protocol

from .connection import CouchConnection
from .couch_client import CouchRequestError
from .errors import StoreError
from .interfaces import DocumentStore
from .locks import DocumentLockRegistry
from .resources import LogicalResource, ResourceLayout

logger = logging.getLogger(__name__)


class ResourceRepository(Protocol):
    async def get(self, resource: LogicalResource) -> Any: ...
    async def save(self, resource: LogicalResource, value: Any) -> None: ...


class DocumentResourceStore(ResourceRepository):
    """
    Maps each logical resource onto one field of one document.

    Reads normalize a missing document (or a missing/null field) to the
    resource's default. Writes are read-merge-write: only the resource's own
    field is replaced, every other field of the fetched document (including
    `_rev`) goes back to the server untouched, so a stale revision surfaces as
    a 409 instead of a silent lost update.

    The fetch/put pair is not atomic against other processes. With
    `serialize_writes` the window is narrowed to other processes only.
    """

    def __init__(
        self,
        connection: CouchConnection,
        *,
        layouts: Mapping[LogicalResource, ResourceLayout] | None = None,
        serialize_writes: bool = True,
    ) -> None:
        self._docs: DocumentStore = connection.client
        self._database = connection.database
        self._layouts = dict(layouts) if layouts is not None else {r: r.layout for r in LogicalResource}
        self._locks = DocumentLockRegistry() if serialize_writes else None

    def layout_for(self, resource: LogicalResource) -> ResourceLayout:
        return self._layouts[resource]

    async def _fetch(self, doc_id: str) -> dict[str, Any] | None:
        try:
            return await self._docs.get_document(self._database, doc_id)
        except CouchRequestError as e:
            if e.not_found:
                return None
            raise

    async def get(self, resource: LogicalResource) -> Any:
        layout = self.layout_for(resource)
        logger.debug("COUCH GET: %s", layout.document_id)
        try:
            doc = await self._fetch(layout.document_id)
        except CouchRequestError as e:
            logger.error("COUCH GET: error getting %s: %s", layout.document_id, e)
            raise StoreError(f"error getting {layout.document_id}: {e}") from e

        if doc is None:
            logger.debug("COUCH GET: no %s document found, returning default", layout.document_id)
            return layout.default()

        value = doc.get(layout.field_name)
        # Only absence/null means "unset"; a saved [] or {} must round-trip.
        if value is None:
            return layout.default()
        return value

    async def save(self, resource: LogicalResource, value: Any) -> None:
        layout = self.layout_for(resource)
        logger.debug("COUCH SAVE: %s", layout.document_id)
        lock = self._locks.lock_for(layout.document_id) if self._locks is not None else contextlib.nullcontext()
        async with lock:
            try:
                doc = await self._fetch(layout.document_id)
                if doc is None:
                    doc = {"_id": layout.document_id}
                doc[layout.field_name] = value
                rev = await self._docs.put_document(self._database, layout.document_id, doc)
            except CouchRequestError as e:
                logger.error("COUCH SAVE: error saving %s: %s", layout.document_id, e)
                raise StoreError(f"error saving {layout.document_id}: {e}") from e
        logger.debug("COUCH SAVE: %s saved (rev %s)", layout.document_id, rev)
