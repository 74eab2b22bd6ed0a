from __future__ import annotations

import copy
import json
from pathlib import Path
import sys
import uuid
from typing import Any

import httpx
import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def _json(status: int, body: Any) -> httpx.Response:
    return httpx.Response(status, json=body)


class FakeCouchServer:
    """
    In-memory stand-in for the CouchDB HTTP subset the client speaks.

    Documents carry `_rev`; a PUT with a missing or stale `_rev` for an
    existing document gets 409, like the real server.
    """

    def __init__(self, databases: list[str] | None = None) -> None:
        self.databases: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in databases or []}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}
        self.unreachable = False
        self.create_race = False

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, path: str, status: int, error: str = "internal_server_error") -> None:
        self.failures[(method, path)] = (status, error)

    def calls(self, method: str) -> list[str]:
        return [r.url.path for r in self.requests if r.method == method]

    def stored(self, database: str, doc_id: str) -> dict[str, Any]:
        return self.databases[database][doc_id]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        failure = self.failures.get((request.method, path))
        if failure is not None:
            status, error = failure
            return _json(status, {"error": error, "reason": "injected failure"})

        parts = [p for p in path.split("/") if p]
        if path == "/_all_dbs" and request.method == "GET":
            return _json(200, sorted(self.databases))
        if len(parts) == 1 and request.method == "PUT":
            return self._create_db(parts[0])
        if len(parts) == 2 and request.method == "GET":
            return self._get_doc(parts[0], parts[1])
        if len(parts) == 2 and request.method == "PUT":
            return self._put_doc(parts[0], parts[1], json.loads(request.content))
        return _json(405, {"error": "method_not_allowed", "reason": "unsupported"})

    def _create_db(self, name: str) -> httpx.Response:
        if self.create_race:
            # Another process created it between list and create.
            self.databases.setdefault(name, {})
        if name in self.databases:
            return _json(412, {"error": "file_exists", "reason": "The database could not be created, the file already exists."})
        self.databases[name] = {}
        return _json(201, {"ok": True})

    def _get_doc(self, db: str, doc_id: str) -> httpx.Response:
        if db not in self.databases:
            return _json(404, {"error": "not_found", "reason": "Database does not exist."})
        doc = self.databases[db].get(doc_id)
        if doc is None:
            return _json(404, {"error": "not_found", "reason": "missing"})
        return _json(200, copy.deepcopy(doc))

    def _put_doc(self, db: str, doc_id: str, body: dict[str, Any]) -> httpx.Response:
        if db not in self.databases:
            return _json(404, {"error": "not_found", "reason": "Database does not exist."})
        current = self.databases[db].get(doc_id)
        current_rev = current.get("_rev") if current is not None else None
        if body.get("_rev") != current_rev:
            return _json(409, {"error": "conflict", "reason": "Document update conflict."})
        generation = int(current_rev.split("-", 1)[0]) + 1 if current_rev else 1
        rev = f"{generation}-{uuid.uuid4().hex}"
        stored = copy.deepcopy(body)
        stored["_id"] = doc_id
        stored["_rev"] = rev
        self.databases[db][doc_id] = stored
        return _json(201, {"ok": True, "id": doc_id, "rev": rev})


APP_CONFIG = json.dumps({"url": "http://db.local", "databaseName": "app"})


@pytest.fixture
def couch_server() -> FakeCouchServer:
    return FakeCouchServer()


@pytest.fixture
def app_server() -> FakeCouchServer:
    """Server where the application database already exists."""
    return FakeCouchServer(databases=["app"])


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Keep the developer's environment (and any local.env) out of settings-driven tests.
    """
    for name in ("CLOUDANT_CREDENTIALS", "COUCH_STORAGE_SERIALIZE_WRITES", "COUCH_STORAGE_DEBUG_LOG_REQUESTS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("couch_storage.settings.load_dotenv", lambda *a, **kw: False)
