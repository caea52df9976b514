"""Buffered event log with CSTG export.

``EventLog`` owns the buffer of pending events for a test run. Events are
written out in batches: every ``buffersize`` events the buffer is appended to
the general error log and, when CSTG export is enabled, partitioned by kind
into four category files for call-stack-to-graph tooling.

Output files (all append-only, created on first write):

    <prefix>_error_log.txt     every event, in its string form
    <prefix>_cstg_injects.txt  injected events
    <prefix>_cstg_gen.txt      gen events
    <prefix>_cstg_prop.txt     prop events
    <prefix>_cstg_kill.txt     kill events

Events with an empty stack are skipped in every file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TextIO

from nantrace.config import LogConfig
from nantrace.events import Event, EventKind
from nantrace.frames import CallFrame

logger = logging.getLogger(__name__)

_SIGNATURE_ARGS = re.compile(r"^.+?\((.*?)\)")

_CATEGORY_SUFFIX = {
    EventKind.INJECTED: "cstg_injects",
    EventKind.GEN: "cstg_gen",
    EventKind.PROP: "cstg_prop",
    EventKind.KILL: "cstg_kill",
}


class EventLog:
    """Process-lifetime buffer of NaN events.

    Create one per test run and pass it to the code that reports events.
    Use as a context manager to flush whatever remains on exit::

        with EventLog(LogConfig(filename="out/run", cstg=True)) as log:
            log.log_event(injected_event("add", [1.0, 2.0]))

    Args:
        config: Output and formatting settings. Defaults to ``LogConfig()``.
    """

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        self.events: list[Event] = []

    def __enter__(self) -> EventLog:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.events:
            self.flush()

    def __len__(self) -> int:
        return len(self.events)

    # === Output paths ===

    def _path(self, suffix: str) -> Path:
        return Path(f"{self.config.filename}_{suffix}.txt")

    def errors_file(self) -> Path:
        return self._path("error_log")

    def category_file(self, kind: EventKind) -> Path:
        return self._path(_CATEGORY_SUFFIX[kind])

    def injects_file(self) -> Path:
        return self.category_file(EventKind.INJECTED)

    def gens_file(self) -> Path:
        return self.category_file(EventKind.GEN)

    def props_file(self) -> Path:
        return self.category_file(EventKind.PROP)

    def kills_file(self) -> Path:
        return self.category_file(EventKind.KILL)

    # === Buffering ===

    def log_event(self, event: Event) -> None:
        """Buffer ``event``, flushing once the buffer reaches ``buffersize``."""
        self.events.append(event)
        if self.config.print_to_stdout:
            print(event)
        if len(self.events) >= self.config.buffersize:
            self.flush()

    def print_log(self) -> None:
        """Print every buffered event to stdout."""
        for event in self.events:
            print(event)

    def flush(self) -> None:
        """Write all buffered events to disk and clear the buffer."""
        count = len(self.events)
        self.write_log_to_file()
        if self.config.cstg:
            self.write_logs_for_cstg()
        self.events = []
        logger.debug("Flushed %d event(s) to %s", count, self.errors_file())

    write_out_logs = flush

    def write_log_to_file(self) -> None:
        """Append the string form of each buffered event to the error log."""
        events = [e for e in self.events if e.trace]
        if not events:
            return
        path = self.errors_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as file:
            for event in events:
                file.write(f"{event}\n\n")

    def write_logs_for_cstg(self) -> None:
        """Partition buffered events by kind and append each group to its file."""
        for kind in EventKind:
            events = [e for e in self.events if e.kind is kind and e.trace]
            if not events:
                continue
            path = self.category_file(kind)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as file:
                self.write_events(file, events)
            logger.debug("Wrote %d %s event(s) to %s", len(events), kind.value, path)

    # === CSTG formatting ===

    def write_events(self, file: TextIO, events: Iterable[Event]) -> None:
        """Write events as CSTG blocks, one frame per line.

        The innermost frame is written with the event's captured argument
        values. At most ``max_frames`` further frames follow.
        """
        max_frames = self.config.max_frames
        for event in events:
            if not event.trace:
                continue
            file.write(self.format_cstg_stackframe(event.trace[0], event.args) + "\n")
            rest = event.trace[1:] if max_frames is None else event.trace[1 : max_frames + 1]
            for frame in rest:
                file.write(self.format_cstg_stackframe(frame) + "\n")
            file.write("\n")

    def format_cstg_stackframe(self, frame: CallFrame, args: Sequence[str] = ()) -> str:
        """Render ``frame`` as ``name(args) at file[:line]``."""
        arg_text = ""
        if self.config.cstg_args:
            arg_text = _frame_args(frame, args)
        line_text = f":{frame.line}" if self.config.cstg_line_num else ""
        return f"{frame.func}{arg_text} at {frame.file}{line_text}"


def _frame_args(frame: CallFrame, args: Sequence[str]) -> str:
    if args:
        return f"({', '.join(args)})"
    if frame.params is not None:
        return f"({', '.join(frame.params)})"
    if frame.signature:
        match = _SIGNATURE_ARGS.match(frame.signature)
        if match is not None:
            return f"({match.group(1)})"
    return ""
