"""Scope matching: classify a call stack as injectable or not.

A frame's *library* is recovered from the directory convention used by
installed packages (``site-packages/<lib>/...`` or a top-level
``site-packages/<lib>.py``) and package-manager depots
(``.julia/packages/<lib>/...``, ``.julia/dev/<lib>/...``). A bare ``dev`` or
``packages`` directory elsewhere is not a marker. Frames that do not follow
the convention belong to user scripts or the standard library and resolve
to ``None``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from itertools import takewhile
from pathlib import Path
from typing import TYPE_CHECKING

from nantrace.frames import CallFrame, FunctionRef

if TYPE_CHECKING:
    from nantrace.injector import Injector

logger = logging.getLogger(__name__)

SELF_LIBRARY = "nantrace"

_PACKAGE_DIR = Path(__file__).resolve().parent

_LIBRARY_PATTERN = re.compile(
    r"(?<![^\\/])(?:site-packages|dist-packages|\.julia[\\/](?:packages|dev))[\\/]"
    r"(?:(?P<package>[A-Za-z][A-Za-z0-9_.-]*)(?=[\\/])"
    r"|(?P<module>[A-Za-z][A-Za-z0-9_]*)\.py$)"
)
_SEPARATORS = re.compile(r"[\\/]")


def frame_library(frame: CallFrame) -> str | None:
    """Return the library that ``frame`` belongs to, or None.

    The last matching marker wins, so a virtualenv nested inside another
    package tree resolves to the package actually installed there. A
    single-file module such as ``site-packages/six.py`` is its own library.
    """
    matches = list(_LIBRARY_PATTERN.finditer(frame.file or ""))
    if not matches:
        return None
    last = matches[-1]
    return last.group("package") or last.group("module")


def frame_file(frame: CallFrame) -> str:
    """Return the base name of the frame's source file."""
    return _SEPARATORS.split(frame.file or "")[-1]


def is_self_frame(frame: CallFrame) -> bool:
    """True for frames executing nantrace's own code."""
    return frame_library(frame) == SELF_LIBRARY or _inside_package(frame.file or "")


@lru_cache(maxsize=4096)
def _inside_package(path: str) -> bool:
    # Pseudo-files such as "<string>" never belong to the package.
    if not path or path.startswith("<"):
        return False
    try:
        return Path(path).resolve().is_relative_to(_PACKAGE_DIR)
    except (OSError, ValueError):
        return False


def _in_functions(frames: Iterable[CallFrame], functions: set[FunctionRef]) -> bool:
    # The head of the stack must stay inside the named files, and one of
    # those head frames must be a named function.
    interested_files = {ref.file for ref in functions}
    head = takewhile(lambda f: frame_file(f) in interested_files, frames)
    return any(FunctionRef(f.func, frame_file(f)) in functions for f in head)


def injectable_region(injector: Injector, raw_frames: Sequence[CallFrame]) -> bool:
    """Return whether the stack described by ``raw_frames`` may receive a NaN.

    Args:
        injector: Supplies the ``functions`` and ``libraries`` restrictions.
        raw_frames: Stack snapshot, innermost frame first.

    Returns:
        True when the stack lies inside the restriction. With no restriction,
        True only when the innermost non-nantrace frame belongs to a
        recognized library.
    """
    frames = [f for f in raw_frames if not is_self_frame(f)]
    if not frames:
        return False

    innermost_library = frame_library(frames[0])

    if not injector.functions and not injector.libraries:
        return innermost_library is not None

    in_function = bool(injector.functions) and _in_functions(frames, injector.functions)
    in_library = innermost_library is not None and innermost_library in injector.libraries

    logger.debug(
        "Region check at %s: function=%s library=%s (%s)",
        frames[0],
        in_function,
        in_library,
        innermost_library,
    )
    return in_function or in_library
