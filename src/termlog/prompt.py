"""Interactive log capture.

InputController is a finite-state machine fed one KeyEvent at a time. It
collects an ordered list of fields, then submits exactly one create request.
decode_keys turns raw terminal characters into events and run_interactive
wires both to a real terminal.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generator, Iterable, Iterator, Optional, TextIO

from .models import Ok, Result, parse_tags

logger = logging.getLogger(__name__)


class InputState(Enum):
    """State of the input controller."""
    COLLECTING = "collecting"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class KeyKind(Enum):
    """Kind of input event."""
    CHAR = "char"
    DELETE = "delete"
    COMMIT = "commit"
    CANCEL = "cancel"


@dataclass(frozen=True)
class KeyEvent:
    """One input event; char is set for CHAR events only."""
    kind: KeyKind
    char: str = ""


COMMIT = KeyEvent(KeyKind.COMMIT)
DELETE = KeyEvent(KeyKind.DELETE)
CANCEL = KeyEvent(KeyKind.CANCEL)


def chars(text: str) -> list[KeyEvent]:
    """CHAR events for every character of text."""
    return [KeyEvent(KeyKind.CHAR, c) for c in text]


@dataclass(frozen=True)
class FieldSpec:
    """A field to collect."""
    name: str
    label: str
    hint: str
    required: bool = True


TITLE_FIELD = FieldSpec("title", "Title", "Enter a title for your log, then press Enter")
CONTENT_FIELD = FieldSpec("content", "Content", "Enter the content of your log, then press Enter")
TAGS_FIELD = FieldSpec(
    "tags",
    "Tags (comma-separated)",
    "Enter tags separated by commas (optional), then press Enter to save",
    required=False,
)

TITLE_ONLY = (TITLE_FIELD,)
FULL_ENTRY = (TITLE_FIELD, CONTENT_FIELD, TAGS_FIELD)

Submitter = Callable[[dict], Result]


class InputController:
    """Collects fields keystroke by keystroke and submits one create request.

    Transitions:
        COLLECTING --COMMIT on last field--> SUBMITTING --> SUCCEEDED | FAILED
        any non-terminal state --CANCEL--> CANCELLED

    A COMMIT on a blank required field is ignored. FAILED halts input and only
    accepts CANCEL.
    """

    TERMINAL_STATES = (InputState.SUCCEEDED, InputState.CANCELLED)

    def __init__(self, fields: Iterable[FieldSpec], submit: Submitter):
        self.fields = tuple(fields)
        if not self.fields:
            raise ValueError("InputController needs at least one field")
        self.submit = submit
        self.state = InputState.COLLECTING
        self.field_index = 0
        self.buffers: dict[str, str] = {f.name: "" for f in self.fields}
        self.message = ""
        self.result: Optional[Result] = None

    @property
    def current_field(self) -> Optional[FieldSpec]:
        if self.state != InputState.COLLECTING:
            return None
        return self.fields[self.field_index]

    @property
    def finished(self) -> bool:
        return self.state in self.TERMINAL_STATES

    def handle(self, event: KeyEvent) -> InputState:
        """Apply one event and return the resulting state."""
        if self.finished or self.state == InputState.SUBMITTING:
            return self.state

        if event.kind == KeyKind.CANCEL:
            self._cancel()
            return self.state

        if self.state == InputState.FAILED:
            # Halted: only a cancellation is accepted
            return self.state

        field = self.fields[self.field_index]
        if event.kind == KeyKind.CHAR:
            self.buffers[field.name] += event.char
        elif event.kind == KeyKind.DELETE:
            self.buffers[field.name] = self.buffers[field.name][:-1]
        elif event.kind == KeyKind.COMMIT:
            self._commit(field)
        return self.state

    def run(self, events: Iterable[KeyEvent]) -> InputState:
        """Feed events until the controller halts or the events run out."""
        for event in events:
            self.handle(event)
            if self.finished:
                break
        return self.state

    def build_request(self) -> dict:
        """Create-request payload from the collected buffers."""
        request = {"title": self.buffers.get("title", "").strip()}
        if "content" in self.buffers:
            request["content"] = self.buffers["content"].strip()
        if "tags" in self.buffers:
            request["tags"] = parse_tags(self.buffers["tags"])
        return request

    def _commit(self, field: FieldSpec) -> None:
        if field.required and not self.buffers[field.name].strip():
            return
        if self.field_index + 1 < len(self.fields):
            self.field_index += 1
            return
        self._submit()

    def _submit(self) -> None:
        self.state = InputState.SUBMITTING
        request = self.build_request()
        logger.debug("Submitting %s", request)
        result = self.submit(request)
        self.result = result
        if isinstance(result, Ok):
            self.state = InputState.SUCCEEDED
            self.message = "✅ Log created successfully!"
            if getattr(result.data, "id", None) is not None:
                self.message = f"✅ Log created successfully! (ID: {result.data.id})"
        else:
            self.state = InputState.FAILED
            self.message = f"❌ Error: {result.message}"

    def _cancel(self) -> None:
        self.state = InputState.CANCELLED
        self.buffers = {f.name: "" for f in self.fields}
        self.message = "Cancelled"


# ========== Terminal driver ==========

def decode_keys(stream: TextIO) -> Iterator[KeyEvent]:
    """Translate raw terminal characters into key events.

    End of input is reported as a cancellation.
    """
    prev = ""
    pending = ""
    while True:
        c = pending or stream.read(1)
        pending = ""
        if c == "":
            yield CANCEL
            return
        if c == "\n" and prev == "\r":
            prev = ""
            continue
        prev = c
        if c in ("\r", "\n"):
            yield COMMIT
        elif c in ("\x7f", "\x08"):
            yield DELETE
        elif c in ("\x03", "\x04"):
            yield CANCEL
        elif c == "\x1b":
            # Swallow CSI (ESC [ A, ESC [ 3 ~) and SS3 (ESC O P) sequences; a lone
            # ESC drops only itself
            nxt = stream.read(1)
            if nxt == "[":
                seq = stream.read(1)
                while seq and not seq.isalpha() and seq != "~":
                    seq = stream.read(1)
            elif nxt == "O":
                stream.read(1)
            else:
                pending = nxt
        elif c < " ":
            continue
        else:
            yield KeyEvent(KeyKind.CHAR, c)


@contextmanager
def raw_terminal(stream: TextIO) -> Generator[None, None, None]:
    """Put a TTY into raw mode for the duration, restoring it afterwards."""
    if os.name != "posix" or not stream.isatty():
        yield
        return

    import termios
    import tty

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class TerminalView:
    """Redraws the controller after every event."""

    def __init__(self, out: TextIO):
        self.out = out
        self._last_index = -1

    def _write(self, text: str) -> None:
        # Raw mode needs explicit carriage returns
        self.out.write(text.replace("\n", "\r\n"))
        self.out.flush()

    def header(self) -> None:
        self._write("Create New Log\nPress Ctrl+C to cancel\n\n")

    def draw(self, controller: InputController) -> None:
        field = controller.current_field
        if field is not None:
            if controller.field_index != self._last_index:
                if self._last_index >= 0:
                    self._write("\n")
                self._write(f"\x1b[2m{field.hint}\x1b[0m\n")
                self._last_index = controller.field_index
            buffer = controller.buffers[field.name]
            self._write(f"\r\x1b[2K{field.label}: {buffer}_")
        elif controller.state == InputState.SUBMITTING:
            self._write("\nSaving log...\n")
        elif controller.message:
            self._write(f"\r\x1b[2K{controller.message}\n")


def run_interactive(
    fields: Iterable[FieldSpec],
    submit: Submitter,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    exit_delay: float = 1.0,
) -> InputController:
    """Run one capture session on a terminal.

    Args:
        fields: Fields to collect, in order
        submit: Called once with the create-request payload
        stdin: Input stream (default: sys.stdin)
        stdout: Output stream (default: sys.stdout)
        exit_delay: Seconds to keep the success message on screen

    Returns:
        The controller in its final state
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    view = TerminalView(stdout)

    def submit_and_show(request: dict) -> Result:
        view.draw(controller)
        return submit(request)

    controller = InputController(fields, submit_and_show)
    view.header()
    view.draw(controller)

    with raw_terminal(stdin):
        for event in decode_keys(stdin):
            controller.handle(event)
            view.draw(controller)
            if controller.finished:
                break

    if controller.state == InputState.SUCCEEDED and exit_delay > 0:
        time.sleep(exit_delay)
    return controller

