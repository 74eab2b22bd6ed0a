from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

CREDENTIALS_ENV_VAR = "CLOUDANT_CREDENTIALS"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Raw JSON connection descriptor: {"url": ..., "databaseName": ...}
    credentials: str | None

    # Serialize same-document read-merge-write cycles inside this process
    serialize_writes: bool

    # Debug
    debug_log_requests: bool


def get_settings(env_file: str | None = "local.env") -> Settings:
    if env_file:
        load_dotenv(env_file)

    credentials = os.getenv(CREDENTIALS_ENV_VAR)

    serialize_writes = _env_bool("COUCH_STORAGE_SERIALIZE_WRITES", True)
    debug_log_requests = _env_bool("COUCH_STORAGE_DEBUG_LOG_REQUESTS", False)

    return Settings(
        credentials=credentials,
        serialize_writes=serialize_writes,
        debug_log_requests=debug_log_requests,
    )
