"""Tests for engine discovery and logging setup."""

import logging
import sys

import pytest

from uci_client.utils import find_engine, setup_logger


class TestFindEngine:
    def test_no_candidate_found(self):
        with pytest.raises(FileNotFoundError):
            find_engine(["/nonexistent/stockfish", "no-such-engine-binary"])

    def test_first_executable_wins(self):
        path = find_engine(["/nonexistent/stockfish", sys.executable])

        assert path == sys.executable


class TestSetupLogger:
    def test_writes_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "session.log"

        logger = setup_logger(debug=True, log_file=log_file)
        logging.getLogger("uci_client.session").debug("-> isready")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert "-> isready" in log_file.read_text()
        logger.removeHandler(logger.handlers[0])

    def test_replaces_handlers(self, tmp_path):
        setup_logger(log_file=tmp_path / "a.log")
        logger = setup_logger(log_file=tmp_path / "b.log")

        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
        logger.removeHandler(logger.handlers[0])
