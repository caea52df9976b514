"""Call-stack snapshots used by the scope matcher and the event log.

``CallFrame`` is an immutable copy of the interesting parts of a live Python
frame. Snapshots are taken eagerly so that events can outlive the frames
they describe.
"""

from __future__ import annotations

import inspect
import sys
from dataclasses import dataclass
from types import CodeType, FrameType


@dataclass(frozen=True)
class FunctionRef:
    """Identifies one function scope by name and source file base name.

    Attributes:
        name: Function name as it appears in ``code.co_name``.
        file: Base name of the containing file, e.g. ``"solver.py"``.
    """

    name: str
    file: str


@dataclass(frozen=True)
class CallFrame:
    """Snapshot of a single stack frame.

    Attributes:
        func: Function name.
        file: Full source path of the frame's code.
        line: Line number being executed when the snapshot was taken.
        params: Parameter names declared by the function, or None when the
            frame carries no code information.
        signature: Optional textual signature, e.g. ``"step(x, dt)"``. Used
            only when ``params`` is unavailable.
    """

    func: str
    file: str
    line: int = 0
    params: tuple[str, ...] | None = None
    signature: str | None = None

    @classmethod
    def from_frame(cls, frame: FrameType) -> CallFrame:
        code = frame.f_code
        return cls(
            func=code.co_name,
            file=code.co_filename,
            line=frame.f_lineno or 0,
            params=_parameter_names(code),
        )

    def __str__(self) -> str:
        return f"{self.func} at {self.file}:{self.line}"


def _parameter_names(code: CodeType) -> tuple[str, ...]:
    """Positional, keyword-only and variadic parameter names of ``code``."""
    count = code.co_argcount + code.co_kwonlyargcount
    if code.co_flags & inspect.CO_VARARGS:
        count += 1
    if code.co_flags & inspect.CO_VARKEYWORDS:
        count += 1
    return tuple(code.co_varnames[:count])


def capture_stack(skip: int = 0, limit: int | None = None) -> list[CallFrame]:
    """Snapshot the caller's stack, innermost frame first.

    Args:
        skip: Number of additional frames to drop above the caller.
        limit: Maximum number of frames to keep. None keeps all.

    Returns:
        Frames starting at the function that called ``capture_stack``.
    """
    frame: FrameType | None = sys._getframe(1 + skip)
    frames: list[CallFrame] = []
    while frame is not None:
        if limit is not None and len(frames) >= limit:
            break
        frames.append(CallFrame.from_frame(frame))
        frame = frame.f_back
    return frames
