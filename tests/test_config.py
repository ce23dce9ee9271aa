"""Tests for SessionConfig validation."""

from pathlib import Path

import pytest

from uci_client.session.config import SessionConfig


class TestSessionConfig:
    def test_defaults(self):
        config = SessionConfig()

        assert config.engine_path is None
        assert config.engine_args == []
        assert config.command_queue_size == 32
        assert config.event_queue_size == 32
        assert config.options == []
        assert config.handshake_timeout is None
        assert config.sync_timeout is None

    def test_values_coerced_to_strings(self):
        """Test that paths and option values are normalised to str."""

        config = SessionConfig(
            engine_path=Path("/usr/bin/stockfish"),
            engine_args=["-u", 3],
            options=[("Threads", 8), ("UCI_ShowWDL", "true")],
        )

        assert config.engine_path == "/usr/bin/stockfish"
        assert config.engine_args == ["-u", "3"]
        assert config.options == [("Threads", "8"), ("UCI_ShowWDL", "true")]

    def test_options_keep_order(self):
        options = [("MultiPV", "2"), ("Threads", "4"), ("Hash", "64")]

        assert [name for name, _ in SessionConfig(options=options).options] == [
            "MultiPV",
            "Threads",
            "Hash",
        ]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"command_queue_size": 0},
            {"event_queue_size": -1},
            {"handshake_timeout": 0},
            {"sync_timeout": -2.5},
            {"shutdown_timeout": 0},
            {"options": [("  ", "1")]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SessionConfig(**kwargs)

    def test_repr(self):
        text = repr(SessionConfig(options=[("Threads", "2")]))

        assert "<auto>" in text
        assert "Threads" in text
