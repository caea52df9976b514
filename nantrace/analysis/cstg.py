"""Read CSTG category files back into pandas for inspection.

Each category file is a sequence of blocks separated by blank lines. The
first line of a block is the innermost frame of one event, the following
lines are its callers::

    mul(1.0, nan) at /site-packages/numlib/ops.py:12
    step(x, dt) at /site-packages/numlib/solver.py:40

    ...

``cstg_frames`` flattens all four files into one frame-per-row table.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pandas as pd

from nantrace.events import EventKind

if TYPE_CHECKING:
    from nantrace.event_log import EventLog

logger = logging.getLogger(__name__)

COLUMNS = ["kind", "event", "depth", "function", "args", "file", "line"]

_FRAME_LINE = re.compile(
    r"^(?P<function>.+?)(?:\((?P<args>.*)\))? at (?P<file>.+?)(?::(?P<line>\d+))?$"
)


def read_cstg_file(path: str | Path) -> list[list[str]]:
    """Split a CSTG file into blocks of frame lines.

    Returns an empty list when the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        return []

    blocks: list[list[str]] = []
    current: list[str] = []
    with open(path, encoding="utf-8") as file:
        for raw in file:
            line = raw.rstrip("\n")
            if line:
                current.append(line)
            elif current:
                blocks.append(current)
                current = []
    if current:
        blocks.append(current)
    return blocks


def parse_frame_line(line: str) -> dict[str, Any]:
    """Parse ``name(args) at file[:line]`` into its parts.

    ``args`` is None when the line has no argument list and ``line`` is None
    when it has no line number.
    """
    match = _FRAME_LINE.match(line)
    if match is None:
        return {"function": line, "args": None, "file": "", "line": None}
    lineno = match.group("line")
    return {
        "function": match.group("function"),
        "args": match.group("args"),
        "file": match.group("file"),
        "line": int(lineno) if lineno is not None else None,
    }


def _category_paths(source: EventLog | Mapping[Any, str | Path]) -> dict[EventKind, Path]:
    if isinstance(source, Mapping):
        return {EventKind(kind): Path(path) for kind, path in source.items()}
    return {kind: source.category_file(kind) for kind in EventKind}


def cstg_frames(source: EventLog | Mapping[Any, str | Path]) -> pd.DataFrame:
    """Load CSTG category files into a table with one row per frame.

    Args:
        source: An ``EventLog`` (its category files are read) or a mapping
            from event kind to file path.

    Returns:
        DataFrame with columns kind, event, depth, function, args, file, line.
        ``event`` numbers the blocks within one category file and ``depth``
        is 0 for the innermost frame.
    """
    rows: list[dict[str, Any]] = []
    for kind, path in _category_paths(source).items():
        blocks = read_cstg_file(path)
        logger.debug("Read %d %s block(s) from %s", len(blocks), kind.value, path)
        for event_idx, block in enumerate(blocks):
            for depth, line in enumerate(block):
                rows.append({"kind": kind.value, "event": event_idx, "depth": depth, **parse_frame_line(line)})

    frames = pd.DataFrame(rows, columns=COLUMNS)
    frames["line"] = frames["line"].astype("Int64")
    return frames


def event_counts(frames: pd.DataFrame) -> pd.DataFrame:
    """Count events and frames per kind, including kinds with no events."""
    kinds = [kind.value for kind in EventKind]
    if frames.empty:
        return pd.DataFrame({"events": 0, "frames": 0}, index=pd.Index(kinds, name="kind"))
    counts = frames.groupby("kind").agg(events=("event", "nunique"), frames=("depth", "size"))
    return counts.reindex(kinds, fill_value=0)


def innermost_functions(frames: pd.DataFrame, kind: EventKind | str | None = None) -> pd.Series:
    """How often each function appears as the innermost frame of an event."""
    top = frames[frames["depth"] == 0]
    if kind is not None:
        top = top[top["kind"] == EventKind(kind).value]
    return top["function"].value_counts()


def plot_event_counts(frames: pd.DataFrame, path: str | Path, title: str = "NaN events by kind") -> Path:
    """Save a bar chart of event counts per kind to ``path``."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    counts = event_counts(frames)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(counts.index, counts["events"], color=["tab:red", "tab:orange", "tab:blue", "tab:green"])
    ax.set_xlabel("Event kind")
    ax.set_ylabel("Events")
    ax.set_title(title)
    ax.grid(True, axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
