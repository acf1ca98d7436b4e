"""Conversation data models."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Role(str, Enum):
    """Who produced a turn."""
    USER = "user"
    ASSISTANT = "assistant"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp back into a datetime.

    Supabase hands back ISO strings, sometimes with a trailing ``Z`` and
    more than six fractional digits; in-memory documents keep datetimes.
    """
    if isinstance(value, datetime):
        return value

    timestamp_str = str(value).replace("Z", "+00:00")

    # Trim fractional seconds to microsecond precision
    if "." in timestamp_str:
        head, tail = timestamp_str.split(".", 1)
        digits = ""
        while tail and tail[0].isdigit():
            digits += tail[0]
            tail = tail[1:]
        timestamp_str = f"{head}.{digits[:6].ljust(6, '0')}{tail}"

    return datetime.fromisoformat(timestamp_str)


@dataclass
class Turn:
    """Represents a single message in a conversation."""
    role: Role
    content: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_message(self) -> Dict[str, str]:
        """Shape expected by chat completion APIs."""
        return {"role": self.role.value, "content": self.content}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        return cls(
            role=Role(data["role"]),
            content=data["content"],
            timestamp=parse_timestamp(data["timestamp"]) if data.get("timestamp") else utc_now(),
        )


@dataclass
class Conversation:
    """Ordered turn history for one session key."""
    session_id: str
    turns: List[Turn] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    def append(self, role: Role, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self.turns.append(turn)
        return turn

    def recent(self, limit: int) -> List[Turn]:
        """The last ``limit`` turns, oldest first."""
        if limit <= 0:
            return []
        return self.turns[-limit:]

    def to_document(self) -> Dict[str, Any]:
        """Wire form returned by ``GET /api/chat/{sessionId}``."""
        return {
            "sessionId": self.session_id,
            "messages": [turn.to_dict() for turn in self.turns],
            "createdAt": self.created_at.isoformat(),
        }

    def to_record(self) -> Dict[str, Any]:
        """Row form written to the ``chats`` table."""
        return {
            "session_id": self.session_id,
            "messages": [turn.to_dict() for turn in self.turns],
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Conversation":
        created_at: Optional[Any] = record.get("created_at")
        return cls(
            session_id=record["session_id"],
            turns=[Turn.from_dict(message) for message in record.get("messages") or []],
            created_at=parse_timestamp(created_at) if created_at else utc_now(),
        )
