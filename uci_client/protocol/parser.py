"""
UCI Line Decoder

Turns a single line of engine output into a typed event. Decoding is
stateless and applied by line prefix:

    info depth ...               -> Info
    bestmove <move> [ponder <m>] -> BestMove
    uciok                        -> Token.UCIOK
    readyok                      -> Token.READYOK
    anything else                -> None

Unknown lines and unknown "info" keywords are never an error. A recognized
keyword whose value is missing or malformed raises DecodeFailure, which only
concerns that one line.
"""

import re
from typing import Callable, Dict, Iterator, Optional

from uci_client.errors import DecodeFailure
from uci_client.protocol.events import BestMove, Event, Info, Score, Token

U32_MAX = 2 ** 32 - 1
U64_MAX = 2 ** 64 - 1

_UNSIGNED = re.compile(r"^\d+$")
_SIGNED = re.compile(r"^[+-]?\d+$")


def _unsigned(limit: int) -> Callable[[str], int]:
    def parse(token: str) -> int:
        if not _UNSIGNED.match(token):
            raise ValueError(f"not an unsigned integer: {token!r}")
        value = int(token)
        if value > limit:
            raise ValueError(f"out of range: {token}")
        return value

    return parse


def _signed(token: str) -> int:
    if not _SIGNED.match(token):
        raise ValueError(f"not an integer: {token!r}")
    return int(token)


_u32 = _unsigned(U32_MAX)
_u64 = _unsigned(U64_MAX)

# Keywords taking one numeric value
_SCALAR_FIELDS: Dict[str, Callable[[str], int]] = {
    "depth": _u32,
    "seldepth": _u32,
    "multipv": _u32,
    "nodes": _u64,
    "nps": _u64,
    "hashfull": _u32,
    "tbhits": _u64,
    "time": _u64,
}


def _value(tokens: Iterator[str], line: str, keyword: str, parse: Callable[[str], int]) -> int:
    token = next(tokens, None)
    if token is None:
        raise DecodeFailure(f"missing value for {keyword!r}", line=line, keyword=keyword)
    try:
        return parse(token)
    except ValueError as e:
        raise DecodeFailure(f"bad value for {keyword!r}: {e}", line=line, keyword=keyword) from e


def parse_info(line: str) -> Info:
    """
    Decode an "info depth ..." line.

    Tokens are scanned left to right. Each recognized keyword consumes its
    value token(s); "pv" consumes every remaining token and ends the scan.

    Args:
        line: Raw engine line

    Returns:
        Info with the reported fields set

    Raises:
        DecodeFailure: If a recognized keyword has a missing/malformed value
    """
    info = Info()
    tokens = iter(line.split())
    if next(tokens, None) != "info":
        raise DecodeFailure("not an info line", line=line)

    for keyword in tokens:
        if keyword in _SCALAR_FIELDS:
            setattr(info, keyword, _value(tokens, line, keyword, _SCALAR_FIELDS[keyword]))
        elif keyword == "score":
            kind = next(tokens, None)
            if kind == "cp":
                info.score = Score.cp(_value(tokens, line, "score", _signed))
            elif kind == "mate":
                info.score = Score.mate(_value(tokens, line, "score", _signed))
            else:
                raise DecodeFailure(f"unknown score kind: {kind!r}", line=line, keyword="score")
        elif keyword == "wdl":
            info.wdl = (
                _value(tokens, line, "wdl", _u64),
                _value(tokens, line, "wdl", _u64),
                _value(tokens, line, "wdl", _u64),
            )
        elif keyword == "pv":
            info.pv = list(tokens)
            break

    return info


def parse_bestmove(line: str) -> BestMove:
    """
    Decode a "bestmove <move> [ponder <move>]" line.

    Raises:
        DecodeFailure: If the move is missing, or "ponder" has no move
    """
    parts = line.split()
    if len(parts) < 2:
        raise DecodeFailure("bestmove without a move", line=line, keyword="bestmove")

    ponder = None
    if len(parts) > 2 and parts[2] == "ponder":
        if len(parts) < 4:
            raise DecodeFailure("ponder without a move", line=line, keyword="ponder")
        ponder = parts[3]

    return BestMove(best=parts[1], ponder=ponder)


def decode(line: str) -> Optional[Event]:
    """
    Decode one line of engine output.

    Args:
        line: Raw engine line (line terminator optional)

    Returns:
        Info, BestMove or Token for lines a session acts on, None otherwise

    Raises:
        DecodeFailure: If a recognized keyword has a missing/malformed value
    """
    parts = line.split(maxsplit=2)
    if not parts:
        return None

    head = parts[0]
    if head == "info" and len(parts) > 1 and parts[1] == "depth":
        return parse_info(line)
    if head == "bestmove":
        return parse_bestmove(line)
    if len(parts) == 1:
        if head == Token.UCIOK.value:
            return Token.UCIOK
        if head == Token.READYOK.value:
            return Token.READYOK
    return None
