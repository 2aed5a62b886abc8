"""Log service - validation and id handling in front of the entry store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import NotFoundError, ValidationError
from .models import LogEntry
from .store import EntryStore

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Log not found"

# Largest value a SQLite INTEGER column holds
MAX_SQLITE_INTEGER = 2**63 - 1


def parse_entry_id(raw: Any) -> int:
    """Parse a path-supplied id.

    Malformed ids are reported exactly like missing ones.

    Raises:
        NotFoundError: If raw is not a positive integer within the SQLite INTEGER range
    """
    if isinstance(raw, bool):
        raise NotFoundError(NOT_FOUND_MESSAGE)
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            raise NotFoundError(NOT_FOUND_MESSAGE)
        value = int(text)
    if value <= 0 or value > MAX_SQLITE_INTEGER:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return value


def _require_title(title: Optional[str]) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


def _normalize_tags(tags: Optional[list]) -> Optional[list[str]]:
    if tags is None:
        return None
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("Tags must be a list of strings")
    return [t.strip() for t in tags if t.strip()]


def _normalize_content(content: Optional[str]) -> Optional[str]:
    if content is None:
        return None
    if not isinstance(content, str):
        raise ValidationError("Content must be a string")
    return content


class LogService:
    """Request handling over one entry store."""

    def __init__(self, store: EntryStore):
        self.store = store

    def close(self) -> None:
        self.store.close()

    def create(
        self,
        title: Optional[str],
        content: Optional[str] = None,
        tags: Optional[list] = None,
    ) -> LogEntry:
        """Create a new entry. Not idempotent: every call inserts a row.

        Raises:
            ValidationError: If title is missing or blank
        """
        clean_title = _require_title(title)
        entry = self.store.insert(
            clean_title,
            content=_normalize_content(content) or "",
            tags=_normalize_tags(tags) or [],
        )
        logger.info("Created log #%d", entry.id)
        return entry

    def list(self, search: Optional[str] = None, limit: Optional[int] = None) -> list[LogEntry]:
        """List entries, optionally filtered by a title substring.

        Raises:
            ValidationError: If limit is not a positive integer
        """
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0):
            raise ValidationError("Limit must be a positive integer")
        if limit is not None and limit > MAX_SQLITE_INTEGER:
            raise ValidationError("Limit is too large")
        return self.store.list_all(search=search or None, limit=limit)

    def search(self, term: str, limit: Optional[int] = None) -> list[LogEntry]:
        """Entries whose title contains term; empty list when nothing matches."""
        return self.list(search=term, limit=limit)

    def get(self, raw_id: Any) -> LogEntry:
        """Get one entry.

        Raises:
            NotFoundError: If the id is malformed or unknown
        """
        entry = self.store.get_by_id(parse_entry_id(raw_id))
        if entry is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return entry

    def update(
        self,
        raw_id: Any,
        title: Optional[str],
        content: Optional[str] = None,
        tags: Optional[list] = None,
    ) -> LogEntry:
        """Replace the title, and content/tags when given. Never touches id or creation time.

        Raises:
            ValidationError: If title is missing or blank
            NotFoundError: If the id is malformed or unknown
        """
        entry_id = parse_entry_id(raw_id)
        clean_title = _require_title(title)
        entry = self.store.update(
            entry_id,
            clean_title,
            content=_normalize_content(content),
            tags=_normalize_tags(tags),
        )
        if entry is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        logger.info("Updated log #%d", entry.id)
        return entry

    def delete(self, raw_id: Any) -> LogEntry:
        """Delete one entry and return it.

        Raises:
            NotFoundError: If the id is malformed or unknown
        """
        entry = self.store.delete(parse_entry_id(raw_id))
        if entry is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        logger.info("Deleted log #%d", entry.id)
        return entry
