"""Export all logs to a single report file."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Generator, Optional

import portalocker

from .client import LogClient
from .errors import ExportError
from .models import Err, LogEntry, format_local, format_timestamp, utc_now

logger = logging.getLogger(__name__)


class ExportStatus(Enum):
    """Outcome of an export that did not fail."""
    EXPORTED = "exported"
    NOTHING_TO_EXPORT = "nothing_to_export"


@dataclass
class ExportResult:
    status: ExportStatus
    count: int = 0
    path: Optional[Path] = None


def render_markdown(entries: list[LogEntry], exported_at: str, tz_name: str) -> str:
    """Render entries as a markdown document."""
    lines = [
        "# Exported Logs",
        "",
        f"Total logs: {len(entries)}",
        f"Exported on: {exported_at}",
        "",
        "---",
        "",
    ]
    for entry in entries:
        lines.extend([f"## #{entry.id} {entry.title}", ""])
        if entry.content:
            lines.extend([entry.content, ""])
        if entry.tags:
            lines.extend([f"**Tags:** {', '.join(entry.tags)}", ""])
        lines.extend([
            f"**Created:** {format_local(entry.created_at, tz_name)}",
            "",
            "---",
            "",
        ])
    return "\n".join(lines)


def render_text(entries: list[LogEntry], exported_at: str, tz_name: str) -> str:
    """Render entries as plain text."""
    rule = "=" * 50
    lines = [
        "EXPORTED LOGS",
        f"Total logs: {len(entries)}",
        f"Exported on: {exported_at}",
        rule,
    ]
    for entry in entries:
        lines.append(f"#{entry.id} {entry.title}")
        if entry.content:
            lines.append(f"  {entry.content}")
        if entry.tags:
            lines.append(f"  Tags: {', '.join(entry.tags)}")
        lines.append(f"  Created: {format_local(entry.created_at, tz_name)}")
        lines.append(rule)
    lines.append("")
    return "\n".join(lines)


RENDERERS = {
    "markdown": render_markdown,
    "text": render_text,
}


def lock_path_for(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".lock")


@contextmanager
def file_lock(path: Path, timeout: float = 10.0) -> Generator[None, None, None]:
    """Hold an exclusive lock on the .lock file beside path.

    The lock file is created on first use and never removed.

    Raises:
        portalocker.LockException: If the lock cannot be acquired in time
    """
    lock_path = lock_path_for(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with portalocker.Lock(lock_path, timeout=timeout):
        yield


def write_report(path: Path, content: str, timeout: float = 10.0) -> None:
    """Write content to path under a lock, via a temp file and rename.

    An existing file at path is replaced.

    Raises:
        portalocker.LockException: If the lock cannot be acquired
        OSError: If the file cannot be written
    """
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    with file_lock(path, timeout=timeout):
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
            # os.replace overwrites on every platform
            os.replace(tmp_path, path)
        except Exception:
            if tmp_path.exists():
                tmp_path.unlink()
            raise


class Exporter:
    """Batch consumer of the log list operation."""

    def __init__(
        self,
        client: LogClient,
        tz_name: str = "Europe/Istanbul",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.tz_name = tz_name
        self.clock = clock

    def export(self, target_path: Path, fmt: str = "markdown") -> ExportResult:
        """Export every log to target_path.

        Returns:
            ExportResult; NOTHING_TO_EXPORT when there are no logs (no file is written)

        Raises:
            ExportError: If the format is unknown, the service fails, or the write fails
        """
        renderer = RENDERERS.get(fmt)
        if renderer is None:
            raise ExportError(f"Unsupported export format: {fmt}")

        logger.info("Fetching logs from server...")
        result = self.client.list()
        if isinstance(result, Err):
            raise ExportError(result.message)

        entries = result.data
        if not entries:
            return ExportResult(ExportStatus.NOTHING_TO_EXPORT)

        logger.info("Exporting %d logs...", len(entries))
        document = renderer(entries, format_timestamp(self.clock()), self.tz_name)

        try:
            write_report(target_path, document)
        except (OSError, portalocker.LockException) as e:
            raise ExportError(f"Cannot write {target_path}: {e}") from e

        return ExportResult(ExportStatus.EXPORTED, count=len(entries), path=target_path)
