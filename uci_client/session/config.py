"""
Session configuration.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class SessionConfig:
    """Configuration for launching an engine session.

    Gathers everything SessionController.launch() needs: which engine to
    run, how much to buffer between threads, which options to set, and the
    caller-side limits on waits.
    """

    # Engine
    engine_path: Optional[str] = None
    """Path to the engine binary (None = auto-detect Stockfish)"""

    engine_args: List[str] = field(default_factory=list)
    """Extra command-line arguments for the engine"""

    # Queues
    command_queue_size: int = 32
    """Capacity of the outbound command queue"""

    event_queue_size: int = 32
    """Capacity of the inbound line queue"""

    # Engine options
    options: List[Tuple[str, str]] = field(default_factory=list)
    """Ordered (name, value) pairs sent with "setoption" after the handshake"""

    # Timeouts
    handshake_timeout: Optional[float] = None
    """Seconds to wait for "uciok" (None = wait forever)"""

    sync_timeout: Optional[float] = None
    """Seconds to wait for "readyok" (None = wait forever)"""

    shutdown_timeout: float = 2.0
    """Seconds to wait at each step of shutting the engine down"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.engine_path is not None:
            self.engine_path = str(self.engine_path)
        self.engine_args = [str(arg) for arg in self.engine_args]
        self.options = [(str(name), str(value)) for name, value in self.options]

        if self.command_queue_size <= 0:
            raise ValueError(
                f"command_queue_size must be positive, got {self.command_queue_size}"
            )

        if self.event_queue_size <= 0:
            raise ValueError(
                f"event_queue_size must be positive, got {self.event_queue_size}"
            )

        for name in ("handshake_timeout", "sync_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or None, got {value}")

        if self.shutdown_timeout <= 0:
            raise ValueError(f"shutdown_timeout must be positive, got {self.shutdown_timeout}")

        for name, _ in self.options:
            if not name.strip():
                raise ValueError("option names must not be empty")

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"SessionConfig(\n"
            f"  Engine: {self.engine_path or '<auto>'} {' '.join(self.engine_args)}\n"
            f"  Queues: commands={self.command_queue_size}, events={self.event_queue_size}\n"
            f"  Options: {self.options}\n"
            f"  Timeouts: handshake={self.handshake_timeout}, sync={self.sync_timeout}, "
            f"shutdown={self.shutdown_timeout}\n"
            f")"
        )
