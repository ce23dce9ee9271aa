"""
PGN reading for game analysis.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

import chess.pgn

logger = logging.getLogger(__name__)


def read_games(pgn_path: Path, max_games: Optional[int] = None) -> Iterator[chess.pgn.Game]:
    """
    Stream games from a PGN file without loading it into memory.

    Args:
        pgn_path: Path to PGN file
        max_games: Maximum number of games to read (None = unlimited)

    Yields:
        chess.pgn.Game objects

    Raises:
        FileNotFoundError: If the file does not exist
    """
    pgn_path = Path(pgn_path)
    if not pgn_path.exists():
        raise FileNotFoundError(f"PGN file not found: {pgn_path}")

    logger.info(f"Reading PGN file: {pgn_path}")
    count = 0

    with open(pgn_path, "r", encoding="utf-8", errors="ignore") as pgn_file:
        while max_games is None or count < max_games:
            game = chess.pgn.read_game(pgn_file)
            if game is None:
                break
            if game.errors:
                logger.warning(f"Skipping game with PGN errors: {game.errors[0]}")
                continue
            count += 1
            yield game

    logger.info(f"Read {count} games from {pgn_path}")
