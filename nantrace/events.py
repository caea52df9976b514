"""Fault and propagation events.

Every event carries the stack captured when it was created. ``injected``
events record where a NaN was substituted; ``gen``, ``prop`` and ``kill``
events describe a NaN being generated, propagated, or disappearing from a
computation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from nantrace.frames import CallFrame, capture_stack


class EventKind(Enum):
    INJECTED = "injected"
    GEN = "gen"
    PROP = "prop"
    KILL = "kill"


@dataclass(frozen=True)
class Event:
    """A single NaN event.

    Attributes:
        kind: What happened to the NaN.
        op: Name of the operation involved, e.g. ``"mul"``. May be empty.
        args: Argument values of the innermost frame, already rendered.
        trace: Stack at event time, innermost frame first.
    """

    kind: EventKind
    op: str = ""
    args: tuple[str, ...] = ()
    trace: tuple[CallFrame, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EventKind(self.kind))
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "trace", tuple(self.trace))

    def __str__(self) -> str:
        lines = [f"{self.kind.value} {self.op}({', '.join(self.args)})"]
        lines.extend(f"  {frame}" for frame in self.trace)
        return "\n".join(lines)


def _make(
    kind: EventKind,
    op: str,
    args: Iterable[object],
    trace: Sequence[CallFrame] | None,
) -> Event:
    if trace is None:
        # Skip _make and the public constructor.
        trace = capture_stack(skip=2)
    return Event(
        kind=kind,
        op=op,
        args=tuple(a if isinstance(a, str) else repr(a) for a in args),
        trace=tuple(trace),
    )


def injected_event(op: str, args: Iterable[object] = (), trace: Sequence[CallFrame] | None = None) -> Event:
    """Event for a NaN substituted by the injector."""
    return _make(EventKind.INJECTED, op, args, trace)


def gen_event(op: str, args: Iterable[object] = (), trace: Sequence[CallFrame] | None = None) -> Event:
    """Event for a NaN produced from non-NaN inputs."""
    return _make(EventKind.GEN, op, args, trace)


def prop_event(op: str, args: Iterable[object] = (), trace: Sequence[CallFrame] | None = None) -> Event:
    """Event for a NaN carried from inputs to output."""
    return _make(EventKind.PROP, op, args, trace)


def kill_event(op: str, args: Iterable[object] = (), trace: Sequence[CallFrame] | None = None) -> Event:
    """Event for a NaN input that produced a non-NaN output."""
    return _make(EventKind.KILL, op, args, trace)
