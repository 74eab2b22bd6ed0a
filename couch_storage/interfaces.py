from __future__ import annotations

from typing import Any, Protocol


class DocumentStore(Protocol):
    """
    Minimal DB-friendly interface: whole JSON documents addressed by id inside one database.
    """

    async def get_document(self, database: str, doc_id: str) -> dict[str, Any]:
        """Fetch the full document. Raises CouchRequestError (404 when absent)."""
        ...

    async def put_document(self, database: str, doc_id: str, doc: dict[str, Any]) -> str:
        """Insert/replace the document, honouring its `_rev`. Returns the new revision."""
        ...


class DatabaseAdmin(Protocol):
    async def list_databases(self) -> list[str]: ...
    async def create_database(self, database: str) -> None: ...
