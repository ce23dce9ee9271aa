"""
Position analysis on top of a UCI session.

Runs jobs to completion and condenses each one into a PositionEvaluation:
the engine's final report (score, depth, nodes, principal variation) and its
chosen move. Games read from PGN are analysed ply by ply.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import chess
import chess.pgn
from tqdm import tqdm

from uci_client.protocol.events import Info, Score
from uci_client.session.controller import SessionController
from uci_client.session.job import DEFAULT_DEPTH, Job, JobBuilder
from uci_client.session.searcher import Searcher

logger = logging.getLogger(__name__)


@dataclass
class PositionEvaluation:
    """Evaluation of one position by the engine."""

    job: Job
    score: Optional[Score]
    depth: int
    nodes: int
    pv: List[str] = field(default_factory=list)
    best_move: Optional[str] = None
    ponder: Optional[str] = None

    @property
    def completed(self) -> bool:
        """False if the engine's output ended before a bestmove."""
        return self.best_move is not None

    @property
    def is_mate(self) -> bool:
        """Check if evaluation is a mate score."""
        return self.score is not None and self.score.is_mate

    def to_centipawns(self, clamp: int = 10000) -> Optional[int]:
        """
        Convert evaluation to centipawns with clamping.

        Mate scores are converted to large values (+/- clamp).

        Args:
            clamp: Maximum absolute centipawn value

        Returns:
            Centipawn evaluation, or None if the engine reported no score
        """
        if self.score is None:
            return None
        return self.score.to_centipawns(clamp)


class PositionAnalyzer:
    """Evaluate positions with a READY session."""

    def __init__(
        self,
        controller: SessionController,
        depth: int = DEFAULT_DEPTH,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            controller: Session in READY state
            depth: Search depth for jobs built by this analyzer
            timeout: Maximum seconds per position; when it runs out the
                search is cancelled and its last report is used (None = no
                limit)
        """
        self.controller = controller
        self.depth = depth
        self.timeout = timeout

    def evaluate(self, job: Job) -> PositionEvaluation:
        """Run a job to completion and summarise it."""
        return self.evaluate_searcher(self.controller.submit(job))

    def evaluate_searcher(self, searcher: Searcher) -> PositionEvaluation:
        """
        Drain a searcher and summarise its job.

        Only Info lines of the first principal variation count when the
        engine reports several (MultiPV).

        Args:
            searcher: Searcher of a submitted job

        Returns:
            PositionEvaluation
        """
        last: Optional[Info] = None
        for event in self._events(searcher):
            if isinstance(event, Info) and event.multipv in (None, 1):
                last = event

        best = searcher.best_move
        if best is None:
            logger.warning(f"No bestmove for {searcher.job}, engine output ended")

        return PositionEvaluation(
            job=searcher.job,
            score=last.score if last else None,
            depth=(last.depth or 0) if last else 0,
            nodes=(last.nodes or 0) if last else 0,
            pv=list(last.pv) if last else [],
            best_move=best.best if best else None,
            ponder=best.ponder if best else None,
        )

    def evaluate_board(self, board: chess.Board) -> PositionEvaluation:
        """Evaluate the current position of a python-chess board."""
        return self.evaluate(JobBuilder.from_board(board).depth(self.depth).build())

    def evaluate_batch(self, jobs: List[Job]) -> List[PositionEvaluation]:
        """
        Evaluate several jobs one after another.

        Args:
            jobs: Jobs to run

        Returns:
            List of evaluations, in job order
        """
        evaluations = []
        for job in tqdm(jobs, desc=f"Evaluating {len(jobs)} positions", leave=False):
            evaluations.append(self.evaluate(job))
        return evaluations

    def evaluate_game(self, game: chess.pgn.Game) -> List[PositionEvaluation]:
        """
        Evaluate every position of a game's mainline.

        The first evaluation is the starting position (or the position of
        the game's FEN header), then one per move played.

        Args:
            game: Parsed PGN game

        Returns:
            List of evaluations, one per position
        """
        base = JobBuilder().depth(self.depth)
        fen = game.headers.get("FEN")
        if fen:
            base = base.fen(fen)

        moves = [move.uci() for move in game.mainline_moves()]
        jobs = [base.moves(moves[:ply]).build() for ply in range(len(moves) + 1)]

        logger.info(
            f"Analysing game {game.headers.get('White', '?')} - "
            f"{game.headers.get('Black', '?')}: {len(jobs)} positions"
        )
        return self.evaluate_batch(jobs)

    def _events(self, searcher: Searcher):
        """Yield the searcher's events, cancelling the job once self.timeout runs out."""
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                event = searcher.next(timeout=remaining)
            except TimeoutError:
                logger.warning(f"No bestmove within {self.timeout}s, stopping: {searcher.job}")
                self.controller.cancel(timeout=self.timeout)
                deadline = None
                continue
            if event is None:
                return
            yield event
