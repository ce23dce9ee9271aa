"""
Unit Tests for PositionAnalyzer

Tests for condensing jobs into evaluations, focusing on:
    - Score/depth/pv taken from the last Info
    - MultiPV: only the first line counts
    - Mate conversion to centipawns
    - Games: one evaluation per position, FEN header honoured
"""

import io

import chess
import chess.pgn
import pytest

from tests.conftest import WAIT, ScriptedHost
from uci_client.analysis import PositionAnalyzer, PositionEvaluation, read_games
from uci_client.protocol.events import Score
from uci_client.session import JobBuilder, SessionController, State

SCHOLARS_MATE = """[Event "Test"]
[White "Alice"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. Bc4 Nc6 3. Qh5 Nf6 4. Qxf7# 1-0
"""

FEN_GAME = """[Event "Endgame"]
[SetUp "1"]
[FEN "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"]

1. e4 Kd7 *
"""


def scripted_session(go_lines):
    """READY session whose engine answers every "go" with go_lines."""

    def reply(command):
        if command == "uci":
            return ["uciok"]
        if command == "isready":
            return ["readyok"]
        if command.startswith("go"):
            return list(go_lines)
        return []

    host = ScriptedHost(reply=reply)
    session = SessionController(host)
    session.initialize(timeout=WAIT)
    session.sync(timeout=WAIT)
    return session


class TestEvaluate:
    """Tests for single-position evaluation."""

    def test_last_info_wins(self):
        session = scripted_session([
            "info depth 1 score cp 10 nodes 20 pv e2e4",
            "info depth 2 score cp -15 nodes 80 pv d2d4 d7d5",
            "bestmove d2d4 ponder d7d5",
        ])
        analyzer = PositionAnalyzer(session, timeout=WAIT)

        evaluation = analyzer.evaluate(JobBuilder().build())

        assert evaluation.score == Score.cp(-15)
        assert evaluation.depth == 2
        assert evaluation.nodes == 80
        assert evaluation.pv == ["d2d4", "d7d5"]
        assert evaluation.best_move == "d2d4"
        assert evaluation.ponder == "d7d5"
        assert evaluation.completed

    def test_multipv_uses_first_line(self):
        session = scripted_session([
            "info depth 8 multipv 1 score cp 30 nodes 500 pv e2e4",
            "info depth 8 multipv 2 score cp 12 nodes 500 pv d2d4",
            "bestmove e2e4",
        ])

        evaluation = PositionAnalyzer(session, timeout=WAIT).evaluate(JobBuilder().build())

        assert evaluation.score == Score.cp(30)
        assert evaluation.pv == ["e2e4"]

    def test_mate_score(self):
        session = scripted_session([
            "info depth 3 score mate -1 nodes 9 pv e8e7",
            "bestmove e8e7",
        ])

        evaluation = PositionAnalyzer(session, timeout=WAIT).evaluate(JobBuilder().build())

        assert evaluation.is_mate
        assert evaluation.to_centipawns() == -10000
        assert evaluation.to_centipawns(clamp=2000) == -2000

    def test_no_info(self):
        """Test a search that reports nothing but a best move."""

        session = scripted_session(["bestmove (none)"])

        evaluation = PositionAnalyzer(session, timeout=WAIT).evaluate(JobBuilder().build())

        assert evaluation.score is None
        assert evaluation.depth == 0
        assert evaluation.to_centipawns() is None
        assert evaluation.best_move == "(none)"

    def test_engine_gone(self):
        session = scripted_session(["info depth 1 score cp 5", None])

        evaluation = PositionAnalyzer(session, timeout=WAIT).evaluate(JobBuilder().build())

        assert not evaluation.completed
        assert evaluation.score == Score.cp(5)

    def test_evaluate_board(self):
        session = scripted_session(["bestmove g1f3"])
        board = chess.Board()
        board.push_san("e4")

        evaluation = PositionAnalyzer(session, depth=6, timeout=WAIT).evaluate_board(board)

        assert evaluation.job.moves == ("e2e4",)
        assert session.host.commands[-2:] == ["position startpos moves e2e4", "go depth 6"]

    def test_timeout_cancels_search(self):
        """Test that a position over its time budget is stopped and still evaluated."""

        def reply(command):
            if command == "uci":
                return ["uciok"]
            if command == "isready":
                return ["readyok"]
            if command.startswith("go"):
                return ["info depth 7 score cp 42 nodes 900 pv g1f3"]
            if command == "stop":
                return ["bestmove g1f3"]
            return []

        host = ScriptedHost(reply=reply)
        session = SessionController(host)
        session.initialize(timeout=WAIT)
        session.sync(timeout=WAIT)

        evaluation = PositionAnalyzer(session, timeout=0.3).evaluate(JobBuilder().build())

        assert "stop" in host.commands
        assert evaluation.completed
        assert evaluation.score == Score.cp(42)
        assert evaluation.best_move == "g1f3"
        assert session.state is State.READY


class TestEvaluateGame:
    """Tests for ply-by-ply game analysis."""

    def test_one_evaluation_per_position(self):
        session = scripted_session(["info depth 4 score cp 20 nodes 1", "bestmove e2e4"])
        game = chess.pgn.read_game(io.StringIO(SCHOLARS_MATE))

        evaluations = PositionAnalyzer(session, depth=4, timeout=WAIT).evaluate_game(game)

        assert len(evaluations) == 8
        assert all(isinstance(e, PositionEvaluation) for e in evaluations)
        assert evaluations[0].job.moves == ()
        assert evaluations[-1].job.moves == (
            "e2e4", "e7e5", "f1c4", "b8c6", "d1h5", "g8f6", "h5f7",
        )

        positions = [c for c in session.host.commands if c.startswith("position")]
        assert positions[0] == "position startpos"
        assert positions[1] == "position startpos moves e2e4"

    def test_fen_header(self):
        session = scripted_session(["bestmove e1d1"])
        game = chess.pgn.read_game(io.StringIO(FEN_GAME))

        evaluations = PositionAnalyzer(session, timeout=WAIT).evaluate_game(game)

        assert len(evaluations) == 3
        assert evaluations[0].job.fen == "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"
        assert evaluations[2].job.moves == ("e2e4", "e8d7")

    def test_against_engine(self, ready_session):
        """Test a full game analysis against the fake engine."""

        session = ready_session()
        game = chess.pgn.read_game(io.StringIO(SCHOLARS_MATE))

        evaluations = PositionAnalyzer(session, depth=2, timeout=WAIT).evaluate_game(game)

        assert len(evaluations) == 8
        assert all(e.completed and e.depth == 2 for e in evaluations)
        assert evaluations[0].to_centipawns() == 20


class TestReadGames:
    """Tests for PGN file reading."""

    def test_read_games(self, tmp_path):
        pgn_file = tmp_path / "games.pgn"
        pgn_file.write_text(SCHOLARS_MATE + "\n" + FEN_GAME)

        games = list(read_games(pgn_file))

        assert len(games) == 2
        assert games[0].headers["White"] == "Alice"

    def test_max_games(self, tmp_path):
        pgn_file = tmp_path / "games.pgn"
        pgn_file.write_text(SCHOLARS_MATE + "\n" + FEN_GAME)

        assert len(list(read_games(pgn_file, max_games=1))) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_games(tmp_path / "missing.pgn"))
