"""Data models for log entries and operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

import pytz

LOCAL_DATE_FORMAT = "%d.%m.%Y %H:%M:%S"


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format datetime as ISO 8601 in UTC with microsecond precision."""
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(s: str) -> datetime:
    """Parse ISO 8601 timestamp string.

    Accepts the trailing ``Z`` form as well, for entries written by other clients.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_local(timestamp: str, tz_name: str) -> str:
    """Render a stored timestamp in the given timezone, e.g. ``18.10.2026 12:15:02``."""
    tz = pytz.timezone(tz_name)
    return parse_timestamp(timestamp).astimezone(tz).strftime(LOCAL_DATE_FORMAT)


def parse_tags(text: str) -> list[str]:
    """Split a comma-separated tag string, keeping order and duplicates."""
    if not text.strip():
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


@dataclass
class LogEntry:
    """A single log entry."""
    id: int
    title: str
    created_at: str
    content: str = ""
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        """Build an entry from its wire representation."""
        return cls(
            id=int(data["id"]),
            title=data["title"],
            created_at=data.get("createdAt") or data.get("created_at", ""),
            content=data.get("content") or "",
            tags=list(data.get("tags") or []),
        )


class ErrorKind(Enum):
    """Category of a failed operation."""
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport_error"
    PERSISTENCE = "persistence_error"


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying the resulting data."""
    data: Any
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the error category and a readable message."""
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok, Err]
