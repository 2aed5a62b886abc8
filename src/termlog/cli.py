"""termlog - terminal client for the log service."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .client import LogClient
from .config import EXPORT_FORMATS, TermlogConfig, load_config
from .errors import ConfigError, ExportError
from .export import Exporter, ExportStatus
from .models import Err, format_local, parse_tags
from .prompt import FULL_ENTRY, TITLE_ONLY, InputState, run_interactive
from .session import delete_entry, edit_entry, view_entry

LOG_FORMAT = "%(asctime)s [termlog] %(levelname)s %(message)s"

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for --limit."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termlog",
        description="Terminal-based logging application",
        epilog="Run 'termlog <id>' to view, edit or delete a single log.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    parser.add_argument("--config", "-c", type=Path, help="Path to config file")
    parser.add_argument("--api-url", help="Log service URL (default: from config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command")

    new_parser = subparsers.add_parser("new", help="Create a new log entry")
    new_parser.add_argument("text", nargs="*", help="Log title; prompts interactively when omitted")
    new_parser.add_argument("--content", default="", help="Body text for a one-shot log")
    new_parser.add_argument("--tags", default="", help="Comma-separated tags for a one-shot log")
    new_parser.add_argument(
        "--full",
        action="store_true",
        help="Prompt for title, content and tags instead of the title only",
    )

    list_parser = subparsers.add_parser("list", help="List all log entries")
    list_parser.add_argument("-l", "--limit", type=positive_int, help="Limit number of logs to display")
    list_parser.add_argument("-s", "--search", help="Search logs by title")

    delete_parser = subparsers.add_parser("delete", help="Delete a log by ID")
    delete_parser.add_argument("id")

    edit_parser = subparsers.add_parser("edit", help="Edit a log by ID")
    edit_parser.add_argument("id")

    export_parser = subparsers.add_parser("export", help="Export all logs to a file")
    export_parser.add_argument("-o", "--output", type=Path, help="Output file name (default: from config)")
    export_parser.add_argument(
        "-f",
        "--format",
        choices=EXPORT_FORMATS,
        help="Export format (default: from config)",
    )

    view_parser = subparsers.add_parser("view", help="View a log by ID")
    view_parser.add_argument("id")

    return parser


def cmd_new(client: LogClient, config: TermlogConfig, args: argparse.Namespace) -> int:
    """Create a log from the command line or interactively."""
    if args.text:
        title = " ".join(args.text).strip()
        if not title:
            print("Log is required!")
            return 0
        result = client.create(title, content=args.content.strip(), tags=parse_tags(args.tags))
        if isinstance(result, Err):
            print(f"❌ Failed to create log: {result.message}")
        else:
            print(f"✅ Log created successfully! (ID: {result.data.id})")
        return 0

    fields = FULL_ENTRY if args.full else TITLE_ONLY

    def submit(request: dict):
        return client.create(
            request["title"],
            content=request.get("content", ""),
            tags=request.get("tags", []),
        )

    controller = run_interactive(fields, submit, exit_delay=config.client.exit_delay)
    if controller.state != InputState.SUCCEEDED:
        logger.debug("Capture ended in state %s", controller.state.value)
    return 0


def cmd_list(client: LogClient, config: TermlogConfig, search: Optional[str] = None, limit: Optional[int] = None) -> int:
    """Print logs, optionally filtered by title."""
    result = client.list(search=search, limit=limit)
    if isinstance(result, Err):
        print(f"❌ Failed to fetch logs: {result.message}")
        return 0

    entries = result.data
    if not entries:
        print("No logs found.")
        return 0

    if search:
        print(f'\n Found {len(entries)} log(s) matching "{search}":\n')
    else:
        print(f"\n Found {len(entries)} log(s):\n")

    for entry in entries:
        print(f"#{entry.id} {entry.title}")
        if entry.tags:
            print(f"   Tags: {', '.join(entry.tags)}")
        print(f"   {format_local(entry.created_at, config.client.timezone)}\n")
    return 0


def cmd_export(client: LogClient, config: TermlogConfig, args: argparse.Namespace) -> int:
    """Export all logs; any failure ends the process with status 1."""
    output = args.output or Path(config.export.output)
    fmt = args.format or config.export.format

    exporter = Exporter(client, tz_name=config.client.timezone)
    try:
        result = exporter.export(output, fmt)
    except ExportError as e:
        logger.debug("Export to %s failed", output, exc_info=True)
        print(f"❌ Export failed: {e}", file=sys.stderr)
        return 1

    if result.status == ExportStatus.NOTHING_TO_EXPORT:
        print("No logs found to export.")
    else:
        print(f"✅ Successfully exported {result.count} logs to {result.path}")
    return 0


GLOBAL_OPTIONS_WITH_VALUE = ("--config", "-c", "--api-url")


def rewrite_bare_id(argv: list[str]) -> list[str]:
    """Turn 'termlog [options] 12' into 'termlog [options] view 12'."""
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in GLOBAL_OPTIONS_WITH_VALUE:
            i += 2
            continue
        if arg.startswith("-"):
            i += 1
            continue
        if arg.isdigit():
            return [*argv[:i], "view", *argv[i:]]
        break
    return argv


def run(argv: list[str]) -> int:
    """Parse argv and run one command. Returns the exit status."""
    parser = build_parser()
    argv = rewrite_bare_id(argv)
    args = parser.parse_args(argv)

    try:
        config = load_config(config_path=args.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    level = "DEBUG" if args.verbose else (config.log_level or "WARNING")
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    api_url = args.api_url or config.client.api_url
    with LogClient(api_url, timeout=config.client.timeout) as client:
        tz_name = config.client.timezone
        if args.command is None:
            return cmd_list(client, config)
        elif args.command == "new":
            return cmd_new(client, config, args)
        elif args.command == "list":
            return cmd_list(client, config, search=args.search, limit=args.limit)
        elif args.command == "view":
            view_entry(client, args.id, tz_name=tz_name)
        elif args.command == "delete":
            delete_entry(client, args.id)
        elif args.command == "edit":
            edit_entry(client, args.id)
        elif args.command == "export":
            return cmd_export(client, config, args)
    return 0


def main() -> None:
    """Main entry point."""
    try:
        status = run(sys.argv[1:])
    except (KeyboardInterrupt, EOFError):
        print()
        status = 130
    sys.exit(status)


if __name__ == "__main__":  # pragma: no cover
    main()
