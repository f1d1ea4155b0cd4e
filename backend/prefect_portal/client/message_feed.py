"""
Message Feed
============

Client-side merge of a conversation's message snapshot with realtime change
events. Messages are kept ordered by (created_at, id); events may arrive
late, twice or out of order.
"""
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from prefect_portal.core.change_events import ChangeEvent, ChangeType


def _sort_key(message: Dict[str, Any]) -> Tuple[str, str]:
    return (str(message.get("created_at") or ""), str(message.get("id")))


class MessageFeed:
    def __init__(self, conversation_id: Optional[str] = None, messages: Iterable[Dict[str, Any]] = ()):
        self.conversation_id = conversation_id
        self._messages: Dict[str, Dict[str, Any]] = {}
        self._tombstones: Set[str] = set()
        self.load_snapshot(messages)

    @property
    def messages(self) -> List[Dict[str, Any]]:
        return sorted(self._messages.values(), key=_sort_key)

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return str(message_id) in self._messages

    def ids(self) -> List[str]:
        return [str(message["id"]) for message in self.messages]

    def load_snapshot(self, messages: Iterable[Dict[str, Any]]) -> None:
        """Replace the held page; events already applied after the snapshot are re-merged by the caller"""
        self._messages = {}
        for message in messages:
            self.upsert(message)

    def upsert(self, message: Dict[str, Any]) -> bool:
        """Insert or replace by id; returns False when the change was ignored"""
        message_id = str(message.get("id"))
        if message_id in self._tombstones:
            return False
        held = self._messages.get(message_id)
        if held is not None and self._is_stale(message, held):
            return False
        self._messages[message_id] = dict(message)
        return True

    def remove(self, message_id: str) -> bool:
        message_id = str(message_id)
        self._tombstones.add(message_id)
        return self._messages.pop(message_id, None) is not None

    def apply(self, event: ChangeEvent) -> bool:
        if self.conversation_id and str(event.conversation_id) != str(self.conversation_id):
            return False
        if event.type == ChangeType.DELETE:
            return self.remove(event.record.get("id"))
        return self.upsert(event.record)

    @staticmethod
    def _is_stale(incoming: Dict[str, Any], held: Dict[str, Any]) -> bool:
        new, old = incoming.get("updated_at"), held.get("updated_at")
        if not new or not old:
            return False
        return str(new) < str(old)
