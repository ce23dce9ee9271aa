"""
Sharing one session between several callers.

A SessionController belongs to one caller at a time. When several threads
need the same engine, they go through a SharedSession:

    shared = SharedSession(controller)
    with shared.acquire() as session:
        searcher = session.submit(job)
        best = searcher.wait()

Holding the lease for the whole job keeps other callers from observing the
session mid-search. The session still rejects a second job by itself even
without this wrapper.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from uci_client.session.controller import SessionController

logger = logging.getLogger(__name__)


class SharedSession:
    """Mutually exclusive access to a single SessionController."""

    def __init__(self, controller: SessionController):
        self._controller = controller
        self._lock = threading.Lock()

    @contextmanager
    def acquire(self, timeout: Optional[float] = None) -> Iterator[SessionController]:
        """
        Borrow the session exclusively.

        Args:
            timeout: Maximum seconds to wait for the lease (None = forever)

        Yields:
            The wrapped SessionController

        Raises:
            TimeoutError: If the lease was not obtained in time
        """
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise TimeoutError(f"Session still in use after {timeout}s")
        try:
            yield self._controller
        finally:
            self._lock.release()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def close(self) -> None:
        """Wait for the current holder, then close the session."""
        with self._lock:
            self._controller.close()
