"""
Typed events decoded from engine output.

Engine lines that matter to a session are turned into one of:

    - Info: search progress snapshot ("info depth ...")
    - BestMove: terminal result of a search ("bestmove ...")
    - Token: handshake markers ("uciok", "readyok")

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class Token(Enum):
    """
    Handshake tokens sent by the engine.

        - UCIOK: protocol negotiation finished (reply to "uci")
        - READYOK: synchronization finished (reply to "isready")
    """
    UCIOK = "uciok"
    READYOK = "readyok"


@dataclass(frozen=True)
class Score:
    """
    Engine evaluation, either in centipawns or as mate-in-N.

    Exactly one of the two fields is set. Both are signed, from the point of
    view of the side to move.
    """

    centipawns: Optional[int] = None
    mate_in: Optional[int] = None

    @classmethod
    def cp(cls, value: int) -> "Score":
        """Centipawn score."""
        return cls(centipawns=value)

    @classmethod
    def mate(cls, moves: int) -> "Score":
        """Mate in ``moves`` (negative: side to move gets mated)."""
        return cls(mate_in=moves)

    @property
    def is_mate(self) -> bool:
        """Check if this is a mate score."""
        return self.mate_in is not None

    def to_centipawns(self, clamp: int = 10000) -> int:
        """
        Convert score to centipawns with clamping.

        Mate scores are converted to +/- clamp depending on who mates.

        Args:
            clamp: Maximum absolute centipawn value

        Returns:
            Centipawn evaluation
        """
        if self.is_mate:
            return clamp if self.mate_in > 0 else -clamp
        return max(-clamp, min(clamp, self.centipawns))

    def __str__(self) -> str:
        if self.is_mate:
            return f"mate {self.mate_in}"
        return f"cp {self.centipawns}"


@dataclass
class Info:
    """
    Search progress snapshot reported by an "info depth ..." line.

    Fields the engine did not report are None (pv is then empty).

    Attributes:
        depth: Search depth in plies
        seldepth: Selective search depth in plies
        multipv: Index of the principal variation this line belongs to
        score: Evaluation of the position
        wdl: Win/draw/loss expectation, in permille
        nodes: Nodes searched so far
        nps: Nodes per second
        hashfull: Hash table fill, in permille
        tbhits: Tablebase hits
        time: Time searched, in milliseconds
        pv: Principal variation as move tokens
    """
    depth: Optional[int] = None
    seldepth: Optional[int] = None
    multipv: Optional[int] = None
    score: Optional[Score] = None
    wdl: Optional[Tuple[int, int, int]] = None
    nodes: Optional[int] = None
    nps: Optional[int] = None
    hashfull: Optional[int] = None
    tbhits: Optional[int] = None
    time: Optional[int] = None
    pv: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BestMove:
    """Terminal result of a search: chosen move and optional ponder move."""

    best: str
    ponder: Optional[str] = None


Event = Union[Info, BestMove, Token]
SearchEvent = Union[Info, BestMove]
