"""
Per-job event stream.

A Searcher is created by SessionController.submit() and fed by the job's pump
thread. The caller pulls from it:

    searcher = controller.submit(job)
    for event in searcher:
        if isinstance(event, Info):
            ...
    searcher.best_move  # None if the engine went away mid-search

The stream yields zero or more Info events followed by exactly one BestMove,
then stays exhausted. If the engine's output ends before a BestMove, the
stream ends without one and `completed` is False.
"""

import logging
import queue
import time
from typing import Iterator, List, Optional

from uci_client.errors import DecodeFailure
from uci_client.protocol.events import BestMove, Info, SearchEvent
from uci_client.session.job import Job

logger = logging.getLogger(__name__)

_END = object()


class Searcher:
    """
    Pull-based handle on one job's events.

    Attributes:
        job: The job this stream belongs to
        best_move: Terminal result, once received
        last_info: Most recent Info received
        decode_failures: Lines of this job that could not be decoded
    """

    def __init__(self, job: Job):
        self.job = job
        self.best_move: Optional[BestMove] = None
        self.last_info: Optional[Info] = None
        self.decode_failures: List[DecodeFailure] = []
        self._events: queue.Queue = queue.Queue()
        self._exhausted = False

    @property
    def completed(self) -> bool:
        """True if the job ended with a BestMove."""
        return self.best_move is not None

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next(self, timeout: Optional[float] = None) -> Optional[SearchEvent]:
        """
        Take the next event of this job.

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Returns:
            Info or BestMove, or None once the stream is over

        Raises:
            TimeoutError: If no event arrived in time
        """
        if self._exhausted:
            return None

        try:
            event = self._events.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"No search event within {timeout}s") from None

        if event is _END:
            self._exhausted = True
            if self.best_move is None:
                logger.warning(f"Search ended without bestmove: {self.job}")
            return None

        if isinstance(event, BestMove):
            self.best_move = event
            self._exhausted = True
        else:
            self.last_info = event
        return event

    def wait(self, timeout: Optional[float] = None) -> Optional[BestMove]:
        """
        Drain the stream and return the terminal BestMove.

        Args:
            timeout: Maximum seconds for the whole drain (None = forever)

        Returns:
            BestMove, or None if the stream ended abnormally
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._exhausted:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            self.next(timeout=remaining)
        return self.best_move

    def __iter__(self) -> Iterator[SearchEvent]:
        return self

    def __next__(self) -> SearchEvent:
        event = self.next()
        if event is None:
            raise StopIteration
        return event

    # Producer side, used by the session's pump thread

    def _publish(self, event: SearchEvent) -> None:
        self._events.put(event)

    def _close(self) -> None:
        self._events.put(_END)
