"""
Session Module

The UCI session state machine and the objects a caller uses with it.

Key Components:
    - SessionController: Handshake, configuration, jobs, cancellation
    - Job, JobBuilder: Immutable search requests
    - Searcher: Pull-based stream of one job's events
    - SharedSession: Exclusive access for multiple callers
    - SessionConfig: Launch configuration

"""

from uci_client.session.config import SessionConfig
from uci_client.session.controller import SessionController, State
from uci_client.session.job import DEFAULT_DEPTH, Job, JobBuilder
from uci_client.session.searcher import Searcher
from uci_client.session.shared import SharedSession

__all__ = [
    'SessionController',
    'State',
    'SessionConfig',
    'Job',
    'JobBuilder',
    'DEFAULT_DEPTH',
    'Searcher',
    'SharedSession',
]
