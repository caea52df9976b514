"""nantrace: NaN fault injection and provenance logging.

Ask an ``Injector`` whether to substitute a NaN at a call site, then record
what happens to NaNs as they move through a computation in an ``EventLog``.
The log writes a general error log and, optionally, per-category files for
call-stack-to-graph (CSTG) tooling.
"""

import logging

from nantrace.config import UNBOUNDED, LogConfig
from nantrace.event_log import EventLog
from nantrace.events import (
    Event,
    EventKind,
    gen_event,
    injected_event,
    kill_event,
    prop_event,
)
from nantrace.frames import CallFrame, FunctionRef, capture_stack
from nantrace.injector import Injector, decrement_injections, should_inject
from nantrace.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
)
from nantrace.scope import frame_file, frame_library, injectable_region

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "UNBOUNDED",
    "CallFrame",
    "Event",
    "EventKind",
    "EventLog",
    "FunctionRef",
    "Injector",
    "LogConfig",
    "capture_stack",
    "configure_from_env",
    "decrement_injections",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "frame_file",
    "frame_library",
    "gen_event",
    "injectable_region",
    "injected_event",
    "kill_event",
    "prop_event",
    "set_level",
    "should_inject",
]
