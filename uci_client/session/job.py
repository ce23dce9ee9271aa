"""
Search jobs.

A Job describes one search: where to start (the standard start position or
a FEN), which moves were played since, and how deep to search. Jobs are
immutable and built with JobBuilder:

    job = JobBuilder().moves(["e2e4", "e7e5"]).depth(20).build()
    job.commands()
    # ("position startpos moves e2e4 e7e5", "go depth 20")

Move and FEN tokens are passed to the engine as they are; nothing here
checks that they are legal.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import chess

if TYPE_CHECKING:
    from uci_client.session.controller import SessionController
    from uci_client.session.searcher import Searcher

DEFAULT_DEPTH = 10


@dataclass(frozen=True)
class Job:
    """
    One search request.

    Attributes:
        fen: Starting position as FEN (None = standard start position)
        moves: Moves played from the starting position, as UCI tokens
        depth: Search depth in plies
    """
    fen: Optional[str] = None
    moves: Tuple[str, ...] = ()
    depth: int = DEFAULT_DEPTH

    def position_command(self) -> str:
        """Serialize as a "position" command."""
        command = "position startpos" if self.fen is None else f"position fen {self.fen}"
        if self.moves:
            command += " moves " + " ".join(self.moves)
        return command

    def go_command(self) -> str:
        """Serialize as a "go" command."""
        return f"go depth {self.depth}"

    def commands(self) -> Tuple[str, str]:
        """Commands that start this job, in the order they must be sent."""
        return self.position_command(), self.go_command()


class JobBuilder:
    """Fluent, side-effect free construction of a Job."""

    def __init__(self, job: Optional[Job] = None):
        self._job = job if job is not None else Job()

    @classmethod
    def from_board(cls, board: chess.Board) -> "JobBuilder":
        """
        Start from a python-chess board: its root position plus move stack.

        A board that started from the standard position is sent as
        "startpos", anything else as "fen".

        Args:
            board: Board whose game should be searched

        Returns:
            JobBuilder for the board's current position
        """
        root_fen = board.root().fen()
        builder = cls()
        if root_fen != chess.STARTING_FEN:
            builder = builder.fen(root_fen)
        return builder.moves(move.uci() for move in board.move_stack)

    def fen(self, fen: str) -> "JobBuilder":
        return JobBuilder(replace(self._job, fen=fen))

    def startpos(self) -> "JobBuilder":
        return JobBuilder(replace(self._job, fen=None))

    def moves(self, moves: Iterable[str]) -> "JobBuilder":
        """Append moves to the move list."""
        return JobBuilder(replace(self._job, moves=self._job.moves + tuple(moves)))

    def depth(self, depth: int) -> "JobBuilder":
        return JobBuilder(replace(self._job, depth=depth))

    def build(self) -> Job:
        return self._job

    def execute(self, controller: "SessionController") -> "Searcher":
        """Build the job and submit it to a session."""
        return controller.submit(self.build())

    def __repr__(self) -> str:
        return f"JobBuilder({self._job!r})"
