"""Realtime envelope shared by the channel manager and the client"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

MESSAGES_TABLE = "conversation_messages"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChangeType(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class ChangeEvent:
    """One committed row change"""
    type: ChangeType
    conversation_id: str
    record: Dict[str, Any]
    table: str = MESSAGES_TABLE
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    commit_timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "table": self.table,
            "conversation_id": self.conversation_id,
            "record": self.record,
            "event_id": self.event_id,
            "commit_timestamp": self.commit_timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChangeEvent":
        return cls(
            type=ChangeType(data["type"]),
            conversation_id=str(data["conversation_id"]),
            record=dict(data.get("record") or {}),
            table=data.get("table", MESSAGES_TABLE),
            event_id=data.get("event_id") or str(uuid.uuid4()),
            commit_timestamp=data.get("commit_timestamp") or _now_iso(),
        )
