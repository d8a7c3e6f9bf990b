"""Change feed event models"""
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class FeedEventKind(str, Enum):
    """Row-level change kinds delivered by the change feed"""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class FeedEvent(BaseModel):
    """One inbound change on the active timer table"""
    kind: FeedEventKind
    row: Dict[str, Any] = Field(default_factory=dict)

    @property
    def row_id(self) -> Optional[str]:
        row_id = self.row.get("id")
        return str(row_id) if row_id is not None else None

    @classmethod
    def from_realtime_payload(cls, payload: Dict[str, Any]) -> "FeedEvent":
        """Build an event from a Supabase realtime postgres_changes payload.

        The payload carries ``data.type`` (INSERT/UPDATE/DELETE), ``data.record``
        and, for deletes, ``data.old_record``.
        """
        data = payload.get("data", payload)
        kind = FeedEventKind(str(data.get("type") or data.get("eventType")).lower())
        if kind == FeedEventKind.DELETE:
            row = data.get("old_record") or data.get("old") or {}
        else:
            row = data.get("record") or data.get("new") or {}
        return cls(kind=kind, row=dict(row))
