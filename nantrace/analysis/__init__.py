"""Offline analysis of CSTG export files."""

from nantrace.analysis.cstg import (
    cstg_frames,
    event_counts,
    innermost_functions,
    parse_frame_line,
    plot_event_counts,
    read_cstg_file,
)

__all__ = [
    "cstg_frames",
    "event_counts",
    "innermost_functions",
    "parse_frame_line",
    "plot_event_counts",
    "read_cstg_file",
]
