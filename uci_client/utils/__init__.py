"""
Utilities: engine discovery and logging setup.
"""

from uci_client.utils.discovery import find_engine
from uci_client.utils.log import setup_logger

__all__ = ['find_engine', 'setup_logger']
