"""
Engine binary discovery.
"""

import logging
import shutil
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = (
    "stockfish",
    "/usr/local/bin/stockfish",
    "/usr/bin/stockfish",
    "/usr/games/stockfish",
    "/opt/homebrew/bin/stockfish",
)


def find_engine(candidates: Optional[Sequence[str]] = None) -> str:
    """
    Auto-detect an engine binary location.

    Args:
        candidates: Names or paths to try in order (default: common
            Stockfish locations)

    Returns:
        Path to the first executable candidate

    Raises:
        FileNotFoundError: If no candidate is executable
    """
    candidates = DEFAULT_CANDIDATES if candidates is None else candidates

    for candidate in candidates:
        path = shutil.which(candidate)
        if path:
            logger.debug(f"Found engine: {path}")
            return path

    raise FileNotFoundError(
        "UCI engine not found. Install with: brew install stockfish (macOS) "
        "or apt install stockfish (Linux), or pass an explicit engine path"
    )
