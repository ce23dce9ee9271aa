"""
Protocol Module

Stateless decoding of UCI engine output.

Key Components:
    - decode: Turn one engine line into Info, BestMove, Token or None
    - Info, BestMove, Score, Token: Typed events
    - parse_id, parse_option: Handshake line parsing

"""

from uci_client.protocol.events import BestMove, Event, Info, Score, SearchEvent, Token
from uci_client.protocol.handshake import EngineIdentity, OptionSpec, parse_id, parse_option
from uci_client.protocol.parser import decode, parse_bestmove, parse_info

__all__ = [
    'decode',
    'parse_info',
    'parse_bestmove',
    'parse_id',
    'parse_option',
    'Event',
    'SearchEvent',
    'Info',
    'BestMove',
    'Score',
    'Token',
    'EngineIdentity',
    'OptionSpec',
]
