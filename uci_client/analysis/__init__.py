"""
Analysis module: evaluating positions and whole games with a session.
"""

from uci_client.analysis.analyzer import PositionAnalyzer, PositionEvaluation
from uci_client.analysis.games import read_games

__all__ = [
    "PositionAnalyzer",
    "PositionEvaluation",
    "read_games",
]
