#!/usr/bin/env python3
"""
CLI tool for analysing positions and games with a UCI engine.

Usage:
    python tools/analyze.py position \\
        --moves d2d4 g8f6 c2c4 e7e6 g1f3 d7d5 \\
        --depth 24 \\
        --option Threads=8 --option UCI_ShowWDL=true --option MultiPV=2

    python tools/analyze.py position --moves f2f3 --depth 40 --stop-after 1.0

    python tools/analyze.py pgn games.pgn --depth 12 --max-games 1
"""

import argparse
import logging
import sys
import threading
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from uci_client.analysis import PositionAnalyzer, read_games
from uci_client.errors import UCIError
from uci_client.protocol.events import BestMove, Info
from uci_client.session import JobBuilder, SessionConfig, SessionController
from uci_client.utils import setup_logger


def setup_logging(verbose: bool = False, log_file: str = None):
    """Configure logging."""
    if log_file:
        setup_logger(debug=verbose, log_file=Path(log_file))
        return

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_option(text: str):
    """Parse a NAME=VALUE engine option."""
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {text!r}")
    return name.strip(), value.strip()


def format_info(info: Info) -> str:
    """One-line summary of an Info event."""
    parts = [f"depth {info.depth}"]
    if info.multipv is not None:
        parts.append(f"multipv {info.multipv}")
    if info.score is not None:
        parts.append(f"score {info.score}")
    if info.wdl is not None:
        parts.append("wdl {} {} {}".format(*info.wdl))
    if info.nodes is not None:
        parts.append(f"nodes {info.nodes:,}")
    if info.time is not None:
        parts.append(f"time {info.time}ms")
    if info.pv:
        parts.append("pv " + " ".join(info.pv))
    return "  ".join(parts)


def build_config(args) -> SessionConfig:
    return SessionConfig(
        engine_path=args.engine,
        options=args.option,
        handshake_timeout=args.timeout,
        sync_timeout=args.timeout,
    )


def analyze_position(args):
    """Run one search and print its progress."""
    builder = JobBuilder().depth(args.depth)
    if args.fen:
        builder = builder.fen(args.fen)
    if args.moves:
        builder = builder.moves(args.moves)
    job = builder.build()

    with SessionController.launch(build_config(args)) as session:
        searcher = session.submit(job)

        timer = None
        if args.stop_after:
            timer = threading.Timer(args.stop_after, session.cancel)
            timer.daemon = True
            timer.start()

        try:
            for event in searcher:
                if isinstance(event, Info):
                    print(format_info(event))
                elif isinstance(event, BestMove):
                    ponder = f" (ponder {event.ponder})" if event.ponder else ""
                    print(f"\nbestmove {event.best}{ponder}")
        finally:
            if timer is not None:
                timer.cancel()
                timer.join()

        if not searcher.completed:
            print("Error: engine stopped before reporting a best move")
            sys.exit(1)


def analyze_pgn(args):
    """Evaluate every position of the games in a PGN file."""
    pgn_path = Path(args.pgn)
    if not pgn_path.exists():
        print(f"Error: PGN file not found: {pgn_path}")
        sys.exit(1)

    with SessionController.launch(build_config(args)) as session:
        analyzer = PositionAnalyzer(session, depth=args.depth)

        for game in read_games(pgn_path, max_games=args.max_games):
            print(f"\n{game.headers.get('White', '?')} - {game.headers.get('Black', '?')}")
            moves = ["start"] + [move.uci() for move in game.mainline_moves()]
            for ply, (played, evaluation) in enumerate(zip(moves, analyzer.evaluate_game(game))):
                cp = evaluation.to_centipawns()
                score = str(evaluation.score) if evaluation.score else "?"
                print(
                    f"{ply:3d}. {played:6s} {score:12s} ({cp if cp is not None else '?':>6}) "
                    f"best {evaluation.best_move}"
                )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Analyse chess positions and games with a UCI engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--engine",
        type=str,
        default=None,
        help="Path to engine binary (default: auto-detect Stockfish)",
    )
    parser.add_argument(
        "--option",
        type=parse_option,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Engine option to set, may be repeated",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the engine handshake (default: no limit)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log engine traffic",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Write logs to this file instead of stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Position subcommand
    pos_parser = subparsers.add_parser("position", help="Analyse one position")
    pos_parser.add_argument(
        "--fen",
        type=str,
        default=None,
        help="Starting position (default: standard start position)",
    )
    pos_parser.add_argument(
        "--moves",
        nargs="+",
        default=[],
        help="Moves played from the starting position, in UCI notation",
    )
    pos_parser.add_argument(
        "--depth",
        type=int,
        default=10,
        help="Search depth",
    )
    pos_parser.add_argument(
        "--stop-after",
        type=float,
        default=None,
        help="Cancel the search after this many seconds",
    )

    # PGN subcommand
    pgn_parser = subparsers.add_parser("pgn", help="Analyse every position of PGN games")
    pgn_parser.add_argument(
        "pgn",
        help="PGN file",
    )
    pgn_parser.add_argument(
        "--depth",
        type=int,
        default=10,
        help="Search depth per position",
    )
    pgn_parser.add_argument(
        "--max-games",
        type=int,
        default=None,
        help="Maximum games to analyse (default: unlimited)",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose, args.log_file)

    try:
        if args.command == "position":
            analyze_position(args)
        elif args.command == "pgn":
            analyze_pgn(args)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except UCIError as e:
        print(f"Engine error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
