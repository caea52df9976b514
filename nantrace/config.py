"""Configuration for the event log.

``LogConfig`` can be built directly or from ``NT_``-prefixed environment
variables:

    NT_LOG_PREFIX: Prefix for output files (default "nantrace")
    NT_LOG_STDOUT: "1" to echo every event to stdout
    NT_LOG_BUFFERSIZE: Events buffered before a flush (default 1000)
    NT_CSTG: "1" to write per-category CSTG files
    NT_CSTG_ARGS: "0" to omit argument lists from CSTG frames
    NT_CSTG_LINENUM: "0" to omit line numbers from CSTG frames
    NT_CSTG_MAX_FRAMES: Frames written after the innermost one, or "unbounded"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

__all__ = ["LogConfig", "UNBOUNDED"]

UNBOUNDED = "unbounded"

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class LogConfig:
    """Settings consumed by ``EventLog``.

    Attributes:
        filename: Path prefix for every output file.
        print_to_stdout: Echo each logged event to stdout.
        buffersize: Number of buffered events that triggers a flush.
        cstg: Also write the four per-category CSTG files on flush.
        cstg_args: Include argument lists in CSTG frame lines.
        cstg_line_num: Include line numbers in CSTG frame lines.
        max_frames: Frames written per event after the innermost one.
            None writes the whole stack.
    """

    filename: str | Path = "nantrace"
    print_to_stdout: bool = False
    buffersize: int = 1000
    cstg: bool = False
    cstg_args: bool = True
    cstg_line_num: bool = True
    max_frames: int | None = None

    def __post_init__(self) -> None:
        if self.buffersize < 1:
            raise ValueError(f"buffersize must be positive, got {self.buffersize}")
        if self.max_frames is not None and self.max_frames < 1:
            raise ValueError(f"max_frames must be positive or None, got {self.max_frames}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LogConfig:
        """Build a config from ``NT_*`` environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        max_frames_raw = env.get("NT_CSTG_MAX_FRAMES", "").strip().lower()
        if not max_frames_raw or max_frames_raw == UNBOUNDED:
            max_frames = defaults.max_frames
        else:
            max_frames = int(max_frames_raw)

        return cls(
            filename=env.get("NT_LOG_PREFIX", defaults.filename),
            print_to_stdout=_flag(env, "NT_LOG_STDOUT", defaults.print_to_stdout),
            buffersize=int(env.get("NT_LOG_BUFFERSIZE", defaults.buffersize)),
            cstg=_flag(env, "NT_CSTG", defaults.cstg),
            cstg_args=_flag(env, "NT_CSTG_ARGS", defaults.cstg_args),
            cstg_line_num=_flag(env, "NT_CSTG_LINENUM", defaults.cstg_line_num),
            max_frames=max_frames,
        )


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE
