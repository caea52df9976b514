"""Unit tests for LogConfig."""

from pathlib import Path

import pytest

from nantrace import UNBOUNDED, LogConfig


class TestLogConfig:
    def test_defaults(self):
        config = LogConfig()

        assert config.filename == "nantrace"
        assert not config.print_to_stdout
        assert config.buffersize == 1000
        assert not config.cstg
        assert config.cstg_args
        assert config.cstg_line_num
        assert config.max_frames is None

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_buffersize(self, size):
        with pytest.raises(ValueError, match="buffersize"):
            LogConfig(buffersize=size)

    def test_rejects_non_positive_max_frames(self):
        with pytest.raises(ValueError, match="max_frames"):
            LogConfig(max_frames=0)

    def test_is_frozen(self):
        config = LogConfig()
        with pytest.raises(AttributeError):
            config.cstg = True


class TestFromEnv:
    def test_empty_environment_gives_defaults(self):
        assert LogConfig.from_env({}) == LogConfig()

    def test_reads_every_setting(self, tmp_path):
        env = {
            "NT_LOG_PREFIX": str(tmp_path / "run"),
            "NT_LOG_STDOUT": "1",
            "NT_LOG_BUFFERSIZE": "25",
            "NT_CSTG": "true",
            "NT_CSTG_ARGS": "0",
            "NT_CSTG_LINENUM": "no",
            "NT_CSTG_MAX_FRAMES": "8",
        }

        config = LogConfig.from_env(env)

        assert Path(config.filename) == tmp_path / "run"
        assert config.print_to_stdout
        assert config.buffersize == 25
        assert config.cstg
        assert not config.cstg_args
        assert not config.cstg_line_num
        assert config.max_frames == 8

    def test_unbounded_max_frames(self):
        config = LogConfig.from_env({"NT_CSTG_MAX_FRAMES": UNBOUNDED.upper()})
        assert config.max_frames is None

    def test_invalid_values_raise(self):
        with pytest.raises(ValueError):
            LogConfig.from_env({"NT_LOG_BUFFERSIZE": "lots"})
        with pytest.raises(ValueError):
            LogConfig.from_env({"NT_LOG_BUFFERSIZE": "0"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("NT_CSTG", "1")
        assert LogConfig.from_env().cstg
