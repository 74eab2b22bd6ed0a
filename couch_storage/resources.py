from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class ResourceLayout:
    """Where one logical resource lives: a document id and the single payload field inside it."""

    document_id: str
    field_name: str
    default_factory: Callable[[], Any]

    def default(self) -> Any:
        # Fresh per call so callers can mutate what they get back.
        return self.default_factory()


class LogicalResource(enum.Enum):
    FLOWS = ResourceLayout("nodered_flows", "flows", list)
    CREDENTIALS = ResourceLayout("nodered_credentials", "credentials", dict)
    SETTINGS = ResourceLayout("nodered_settings", "settings", dict)

    @property
    def layout(self) -> ResourceLayout:
        return self.value
