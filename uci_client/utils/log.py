"""
Logging setup for UCI sessions.

Every module logs through ``logging.getLogger(__name__)`` under the
``uci_client`` namespace; engine traffic is logged at DEBUG as

    -> go depth 20
    <- bestmove e2e4 ponder e7e5
"""

import logging
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = Path.home() / ".uci_client" / "session.log"


def setup_logger(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup file-based logger for the uci_client package.

    Args:
        debug: If True, log at DEBUG level (engine traffic); otherwise INFO
        log_file: Log file path (default: ~/.uci_client/session.log)

    Returns:
        Configured logger instance
    """
    log_file = Path(log_file) if log_file is not None else DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("uci_client")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.info(f"Log file: {log_file}")
    return logger
