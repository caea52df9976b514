"""Unit tests for reading CSTG files back into pandas."""

from __future__ import annotations

import pandas as pd

from nantrace import CallFrame, Event, EventKind, EventLog, LogConfig
from nantrace.analysis import (
    cstg_frames,
    event_counts,
    innermost_functions,
    parse_frame_line,
    plot_event_counts,
    read_cstg_file,
)

TRACE = (
    CallFrame(func="mul", file="/site-packages/numlib/ops.py", line=12, params=("a", "b")),
    CallFrame(func="step", file="/src/solver.py", line=40, params=("x", "dt")),
)


def populated_log(tmp_path) -> EventLog:
    log = EventLog(LogConfig(filename=tmp_path / "run", cstg=True))
    log.log_event(Event(EventKind.INJECTED, "mul", ("2.0", "3.0"), TRACE))
    log.log_event(Event(EventKind.PROP, "mul", ("nan", "3.0"), TRACE))
    log.log_event(Event(EventKind.PROP, "add", ("nan", "1.0"), TRACE[1:]))
    log.flush()
    return log


class TestParseFrameLine:
    def test_full_line(self):
        assert parse_frame_line("mul(2.0, nan) at /a/ops.py:12") == {
            "function": "mul",
            "args": "2.0, nan",
            "file": "/a/ops.py",
            "line": 12,
        }

    def test_without_args_or_line(self):
        assert parse_frame_line("mul at /a/ops.py") == {
            "function": "mul",
            "args": None,
            "file": "/a/ops.py",
            "line": None,
        }

    def test_windows_path(self):
        parsed = parse_frame_line("step(x) at C:\\src\\solver.py:40")

        assert parsed["file"] == "C:\\src\\solver.py"
        assert parsed["line"] == 40

    def test_unparseable_line(self):
        assert parse_frame_line("garbage")["function"] == "garbage"


class TestReadCstgFile:
    def test_missing_file(self, tmp_path):
        assert read_cstg_file(tmp_path / "nope.txt") == []

    def test_blocks(self, tmp_path):
        log = populated_log(tmp_path)

        blocks = read_cstg_file(log.props_file())

        assert len(blocks) == 2
        assert blocks[0][0] == "mul(nan, 3.0) at /site-packages/numlib/ops.py:12"
        assert blocks[1] == ["step(nan, 1.0) at /src/solver.py:40"]


class TestCstgFrames:
    def test_one_row_per_frame(self, tmp_path):
        frames = cstg_frames(populated_log(tmp_path))

        assert list(frames.columns) == ["kind", "event", "depth", "function", "args", "file", "line"]
        assert len(frames) == 5
        assert set(frames["kind"]) == {"injected", "prop"}

    def test_from_path_mapping(self, tmp_path):
        log = populated_log(tmp_path)

        frames = cstg_frames({"injected": log.injects_file()})

        assert frames["function"].tolist() == ["mul", "step"]
        assert frames["depth"].tolist() == [0, 1]
        assert frames["line"].tolist() == [12, 40]

    def test_no_files(self, tmp_path):
        frames = cstg_frames(EventLog(LogConfig(filename=tmp_path / "none")))
        assert frames.empty


class TestSummaries:
    def test_event_counts(self, tmp_path):
        counts = event_counts(cstg_frames(populated_log(tmp_path)))

        assert counts.loc["injected", "events"] == 1
        assert counts.loc["prop", "events"] == 2
        assert counts.loc["prop", "frames"] == 3
        assert counts.loc["gen", "events"] == 0
        assert counts.loc["kill", "events"] == 0

    def test_event_counts_empty(self):
        counts = event_counts(pd.DataFrame(columns=["kind", "event", "depth"]))

        assert counts["events"].sum() == 0
        assert list(counts.index) == ["injected", "gen", "prop", "kill"]

    def test_innermost_functions(self, tmp_path):
        frames = cstg_frames(populated_log(tmp_path))

        assert innermost_functions(frames).to_dict() == {"mul": 2, "step": 1}
        assert innermost_functions(frames, EventKind.PROP).to_dict() == {"mul": 1, "step": 1}

    def test_plot_event_counts(self, tmp_path, test_output_dir):
        frames = cstg_frames(populated_log(tmp_path))

        path = plot_event_counts(frames, test_output_dir / "event_counts.png")

        assert path.exists()
        assert path.stat().st_size > 0
