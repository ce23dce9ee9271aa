"""
uci_client

Client-side session manager for UCI (Universal Chess Interface) engines:
launches an engine such as Stockfish as a subprocess, drives its handshake
and configuration, submits searches, and turns its output into typed events.

## Architecture

1. **process**: Engine subprocess hosting
   - Writer/reader threads around bounded command and line queues
   - Closed pipes surface as end-of-stream, never as a crash

2. **protocol**: Line decoding
   - "info depth ..." -> Info, "bestmove ..." -> BestMove
   - "uciok" / "readyok" handshake tokens
   - id/option lines from the handshake

3. **session**: The session state machine (INIT -> READY <-> SEARCH)
   - Jobs, per-job Searcher streams, cancellation
   - SharedSession for multiple callers

4. **analysis**: Evaluating positions and PGN games

5. **utils**: Engine discovery and logging setup

## Quick Start

```python
from uci_client import JobBuilder, Info, SessionConfig, SessionController

config = SessionConfig(options=[("Threads", "4"), ("UCI_ShowWDL", "true")])
with SessionController.launch(config) as session:
    searcher = JobBuilder().moves(["e2e4", "e7e5"]).depth(18).execute(session)
    for event in searcher:
        if isinstance(event, Info):
            print(event.depth, event.score, " ".join(event.pv))
    print("best:", searcher.best_move)
```

Chess legality is never checked: moves and FENs are passed to the engine as
given.

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from uci_client.errors import (
    BusyRejection,
    ChannelClosed,
    DecodeFailure,
    SessionStateError,
    SpawnFailure,
    UCIError,
)
from uci_client.process import ProcessHost
from uci_client.protocol import BestMove, Info, Score, Token, decode
from uci_client.session import (
    Job,
    JobBuilder,
    Searcher,
    SessionConfig,
    SessionController,
    SharedSession,
    State,
)

__all__ = [
    'ProcessHost',
    'decode',
    'Info',
    'BestMove',
    'Score',
    'Token',
    'SessionController',
    'SessionConfig',
    'State',
    'Job',
    'JobBuilder',
    'Searcher',
    'SharedSession',
    'UCIError',
    'SpawnFailure',
    'ChannelClosed',
    'DecodeFailure',
    'BusyRejection',
    'SessionStateError',
]
