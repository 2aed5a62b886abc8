"""Line-prompt flows for viewing, editing and deleting one log.

Each flow prints its outcome and returns True on success. Failures are
reported, never raised, so an interactive session keeps running.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .client import LogClient
from .models import Err, LogEntry, format_local, parse_tags

Ask = Callable[[str], str]
Out = Callable[[str], None]

DEFAULT_TIMEZONE = "Europe/Istanbul"


def _fetch(client: LogClient, raw_id: Any, out: Out):
    result = client.get(raw_id)
    if isinstance(result, Err):
        out(f"❌ {result.message}")
        return None
    return result.data


def show_entry(entry: LogEntry, out: Out = print, tz_name: str = DEFAULT_TIMEZONE) -> None:
    """Print one entry with its local creation time."""
    out(f"\n📖 Log #{entry.id}: {entry.title}\n")
    if entry.content:
        out(entry.content)
    if entry.tags:
        out(f"Tags: {', '.join(entry.tags)}")
    out(f"Created: {format_local(entry.created_at, tz_name)}\n")


def view_entry(
    client: LogClient,
    raw_id: Any,
    ask: Ask = input,
    out: Out = print,
    tz_name: str = DEFAULT_TIMEZONE,
) -> bool:
    """Show one log and offer delete / edit / quit."""
    entry = _fetch(client, raw_id, out)
    if entry is None:
        return False

    show_entry(entry, out, tz_name)
    out("Options:")
    out("  - Press 'd' to delete this log")
    out("  - Press 'e' to edit this log")
    out("  - Press 'q' to quit")

    action = ask("\nAction (d/e/q): ").strip().lower()
    if action == "d":
        return delete_entry(client, entry.id, ask, out)
    elif action == "e":
        return edit_entry(client, entry.id, ask, out, current=entry)
    elif action == "q":
        out("Goodbye!")
        return True
    out("Invalid option")
    return False


def delete_entry(client: LogClient, raw_id: Any, ask: Ask = input, out: Out = print) -> bool:
    """Delete one log after a y/N confirmation."""
    confirm = ask(f"Are you sure you want to delete log #{raw_id}? (y/N): ").strip().lower()
    if confirm not in ("y", "yes"):
        out("Deletion cancelled")
        return False

    result = client.delete(raw_id)
    if isinstance(result, Err):
        out(f"❌ {result.message}")
        return False
    out(f"✅ Log #{result.data.id} deleted successfully")
    return True


def edit_entry(
    client: LogClient,
    raw_id: Any,
    ask: Ask = input,
    out: Out = print,
    current: Optional[LogEntry] = None,
) -> bool:
    """Prompt for a new title, content and tags; blank input keeps the current value."""
    if current is None:
        current = _fetch(client, raw_id, out)
        if current is None:
            return False

    out(f"\n✏️  Edit Log #{current.id}\n")
    out("Press Enter to keep current value\n")

    title = ask(f"Title [{current.title}]: ").strip() or current.title
    content = ask(f"Content [{current.content}]: ").strip() or current.content
    tags_text = ask(f"Tags [{', '.join(current.tags)}]: ").strip()
    tags = parse_tags(tags_text) if tags_text else current.tags

    out("\nUpdating log...")
    result = client.update(current.id, title, content=content, tags=tags)
    if isinstance(result, Err):
        out(f"❌ {result.message}")
        return False
    out(f"✅ Log #{current.id} updated successfully")
    return True
