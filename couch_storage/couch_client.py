"""
Async client for the small CouchDB/Cloudant HTTP surface this package needs:

- GET  /_all_dbs          list databases
- PUT  /{db}              create database (412 when it already exists)
- GET  /{db}/{doc_id}     fetch document (404 when absent)
- PUT  /{db}/{doc_id}     insert/replace document (409 on stale `_rev`)
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

import httpx

logger = logging.getLogger(__name__)


class CouchRequestError(Exception):
    """
    A request to the server failed.

    `status_code` is None when the request never got an HTTP response
    (DNS failure, refused connection, TLS error, ...).
    """

    def __init__(self, message: str, *, status_code: int | None = None, error: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def conflict(self) -> bool:
        return self.status_code == 409

    @property
    def already_exists(self) -> bool:
        return self.status_code == 412 and self.error == "file_exists"


def split_credentials(url: str) -> tuple[str, tuple[str, str] | None]:
    """
    Move `user:pass@` out of the URL so it can be sent as basic auth and never logged.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"not an absolute URL: {redact_url(url)!r}")
    if parts.username is None and parts.password is None:
        return url.rstrip("/"), None
    netloc = parts.hostname
    if ":" in netloc:
        netloc = f"[{netloc}]"
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    bare = urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment)).rstrip("/")
    return bare, (unquote(parts.username or ""), unquote(parts.password or ""))


def redact_url(url: str) -> str:
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, f"***@{host}", parts.path, parts.query, parts.fragment))


class CouchClient:
    """
    Thin wrapper over httpx.AsyncClient. Construction performs no I/O.
    """

    def __init__(
        self,
        url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        debug_log_requests: bool = False,
    ) -> None:
        base_url, auth = split_credentials(url)
        self.base_url = base_url
        self._debug_log_requests = debug_log_requests
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=auth,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        if self._debug_log_requests:
            logger.debug("COUCH REQUEST: %s %s%s", method, self.base_url, path)
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise CouchRequestError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise CouchRequestError(f"{method} {path} returned invalid JSON: {e}") from e

        error: str | None = None
        reason = response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            reason = body.get("reason") or reason
        detail = f"{error}: {reason}" if error else reason
        raise CouchRequestError(
            f"{method} {path} -> {response.status_code} {detail}",
            status_code=response.status_code,
            error=error,
        )

    @staticmethod
    def _db_path(database: str) -> str:
        return "/" + quote(database, safe="")

    @classmethod
    def _doc_path(cls, database: str, doc_id: str) -> str:
        return f"{cls._db_path(database)}/{quote(doc_id, safe='')}"

    async def list_databases(self) -> list[str]:
        names = await self._request("GET", "/_all_dbs")
        if not isinstance(names, list):
            raise CouchRequestError("GET /_all_dbs returned a non-list body")
        return [str(n) for n in names]

    async def create_database(self, database: str) -> None:
        await self._request("PUT", self._db_path(database))

    async def get_document(self, database: str, doc_id: str) -> dict[str, Any]:
        doc = await self._request("GET", self._doc_path(database, doc_id))
        if not isinstance(doc, dict):
            raise CouchRequestError(f"document {doc_id!r} is not a JSON object")
        return doc

    async def put_document(self, database: str, doc_id: str, doc: dict[str, Any]) -> str:
        result = await self._request("PUT", self._doc_path(database, doc_id), json=doc)
        rev = result.get("rev") if isinstance(result, dict) else None
        return str(rev) if rev is not None else ""
