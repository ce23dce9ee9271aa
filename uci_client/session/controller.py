"""
UCI Session Controller

Drives one engine process through the UCI session lifecycle.

States:
    INIT   -> just spawned, protocol not yet confirmed ready
    READY  -> idle, accepts jobs
    SEARCH -> one job in flight

Protocol Flow:
    Client -> "uci"
    Engine -> "id name ...", "option name ...", "uciok"
    Client -> "setoption name Threads value 8"     (configure)
    Client -> "isready"
    Engine -> "readyok"                            (INIT -> READY)
    Client -> "position startpos moves e2e4"
    Client -> "go depth 20"                        (READY -> SEARCH)
    Engine -> "info depth 1 ... pv e7e5"
    Engine -> "bestmove e7e5 ponder g1f3"          (SEARCH -> READY)

Threading:
    - Foreground calls (initialize, configure, sync, submit, cancel) come
      from the owning caller
    - Each submitted job gets a pump thread that owns the engine's line
      stream until the job's bestmove, relaying events to the job's Searcher
    - State changes happen under a lock; a second job is rejected with
      BusyRejection, never queued or interleaved

None of the waits time out by default: an unresponsive engine blocks the
caller unless a timeout is passed.

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

import logging
import threading
import time
from collections import deque
from enum import Enum
from typing import Deque, Iterable, Mapping, Optional, Tuple, Union

from uci_client.errors import (
    BusyRejection,
    ChannelClosed,
    DecodeFailure,
    SessionStateError,
)
from uci_client.process.host import ProcessHost
from uci_client.protocol.events import BestMove, Info, Token
from uci_client.protocol.handshake import EngineIdentity, parse_id, parse_option
from uci_client.protocol.parser import decode
from uci_client.session.config import SessionConfig
from uci_client.session.job import Job
from uci_client.session.searcher import Searcher
from uci_client.utils.discovery import find_engine

logger = logging.getLogger(__name__)

Options = Union[Mapping[str, object], Iterable[Tuple[str, object]]]

DIAGNOSTICS_SIZE = 100


def _remaining(deadline: Optional[float]) -> Optional[float]:
    return None if deadline is None else max(0.0, deadline - time.monotonic())


class State(Enum):
    INIT = "init"
    READY = "ready"
    SEARCH = "search"


class SessionController:
    """
    UCI session over a single ProcessHost.

    Attributes:
        host: The engine process host, owned exclusively by this session
        identity: Engine name/author/options from the last handshake
        diagnostics: Recent engine lines no event was decoded from
    """

    def __init__(self, host: ProcessHost, shutdown_timeout: float = 2.0):
        """
        Args:
            host: Running engine process host
            shutdown_timeout: Seconds to wait at each step of close()
        """
        self.host = host
        self.shutdown_timeout = shutdown_timeout
        self.identity: Optional[EngineIdentity] = None
        self.diagnostics: Deque[str] = deque(maxlen=DIAGNOSTICS_SIZE)

        self._state = State.INIT
        self._negotiated = False
        self._cancelling = False
        # "isready" commands whose "readyok" has not been read yet
        self._pending_ready = 0
        self._lock = threading.Lock()
        self._searcher: Optional[Searcher] = None
        self._pump: Optional[threading.Thread] = None

    @classmethod
    def launch(cls, config: Optional[SessionConfig] = None) -> "SessionController":
        """
        Spawn an engine and bring the session to READY.

        Runs initialize(), configure(config.options) and sync().

        Args:
            config: Session configuration (uses defaults if None)

        Returns:
            SessionController in READY state

        Raises:
            SpawnFailure: If the engine cannot be started
            FileNotFoundError: If no engine path is set and none is found
        """
        config = config or SessionConfig()
        engine_path = config.engine_path or find_engine()

        host = ProcessHost.spawn(
            engine_path,
            args=config.engine_args,
            command_queue_size=config.command_queue_size,
            event_queue_size=config.event_queue_size,
        )
        session = cls(host, shutdown_timeout=config.shutdown_timeout)
        try:
            session.initialize(timeout=config.handshake_timeout)
            session.configure(config.options)
            session.sync(timeout=config.sync_timeout)
        except BaseException:
            session.close()
            raise
        return session

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def state(self) -> State:
        return self._state

    @property
    def active_searcher(self) -> Optional[Searcher]:
        return self._searcher

    def initialize(self, timeout: Optional[float] = None) -> EngineIdentity:
        """
        Negotiate the protocol: send "uci" and wait for "uciok".

        Identity and option lines received before "uciok" are collected.
        The session only becomes READY after a following sync().

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Returns:
            EngineIdentity reported by the engine

        Raises:
            SessionStateError: If a job is in flight
            ChannelClosed: If the engine goes away first
            TimeoutError: If "uciok" did not arrive in time
        """
        self._require_idle("initialize")
        logger.info("Handshake: uci")

        identity = EngineIdentity()
        self.host.submit("uci")
        for line in self._lines_until(Token.UCIOK, timeout):
            id_field = parse_id(line)
            if id_field is not None:
                setattr(identity, id_field[0], id_field[1])
                continue
            option = parse_option(line)
            if option is not None:
                identity.options[option.name] = option

        self.identity = identity
        self._negotiated = True
        logger.info(
            f"Engine: {identity.name or '?'} by {identity.author or '?'} "
            f"({len(identity.options)} options)"
        )
        return identity

    def configure(self, options: Options) -> None:
        """
        Send one "setoption" command per option, in order.

        Args:
            options: Mapping or ordered (name, value) pairs

        Raises:
            SessionStateError: If a job is in flight
        """
        self._require_idle("configure")
        pairs = options.items() if isinstance(options, Mapping) else options
        for name, value in pairs:
            if isinstance(value, bool):
                value = "true" if value else "false"
            logger.info(f"Option: {name} = {value}")
            self.host.submit(f"setoption name {name} value {value}")

    def sync(self, timeout: Optional[float] = None) -> None:
        """
        Send "isready" and wait for "readyok".

        A barrier: once it returns, the engine has processed every command
        sent before it. The first successful sync after initialize() moves
        the session from INIT to READY.

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Raises:
            SessionStateError: If a job is in flight
            ChannelClosed: If the engine goes away first
            TimeoutError: If "readyok" did not arrive in time
        """
        self._require_idle("sync")
        self._send_isready()
        self._await_ready(timeout)

        with self._lock:
            if self._state is State.INIT and self._negotiated:
                self._state = State.READY
                logger.info("Session ready")

    def submit(self, job: Job) -> Searcher:
        """
        Start a search.

        Sends the job's "position" and "go" commands and returns the job's
        Searcher. Events are relayed to it until the engine's bestmove, at
        which point the session is READY again.

        Args:
            job: The search to run

        Returns:
            Searcher for this job's events

        Raises:
            BusyRejection: If another job is in flight
            SessionStateError: If the session is not READY yet
            ChannelClosed: If the engine can no longer receive commands
        """
        with self._lock:
            if self.host.commands_closed or self.host.lines_closed:
                raise ChannelClosed("Engine channel is closed")
            if self._state is State.SEARCH:
                raise BusyRejection(f"Engine busy, rejected job: {job}")
            if self._state is not State.READY:
                raise SessionStateError(f"Cannot submit a job in state {self._state.name}")

            logger.debug(f"Submitting {job}")
            searcher = Searcher(job)
            position, go = job.commands()
            self.host.submit(position)
            self.host.submit(go)

            self._state = State.SEARCH
            self._searcher = searcher
            self._pump = threading.Thread(
                target=self._run_job, args=(searcher,), name="uci-job", daemon=True
            )
            self._pump.start()

        return searcher

    def cancel(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the job in flight.

        Sends "stop" then "isready", and returns once the job's pump has
        ended (the engine's bestmove was relayed) and the engine answered
        "readyok". The two may arrive in either order. A no-op when no job
        is in flight.

        If the wait fails but the job did end, the session is READY anyway;
        a late "readyok" is still accounted for by the next sync().

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Returns:
            True if a job was cancelled, False if there was nothing to cancel

        Raises:
            ChannelClosed: If the engine goes away first
            TimeoutError: If the engine did not acknowledge in time
        """
        with self._lock:
            if self._state is not State.SEARCH or self._cancelling:
                return False
            self._cancelling = True
            pump = self._pump

        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            logger.info("Cancelling search")
            self.host.submit("stop")
            self._send_isready()

            pump.join(timeout=_remaining(deadline))
            if pump.is_alive():
                raise TimeoutError(f"Search did not stop within {timeout}s")

            self._await_ready(_remaining(deadline))
        finally:
            with self._lock:
                self._cancelling = False
                if not pump.is_alive() and not self.host.lines_closed:
                    self._state = State.READY
                    self._searcher = None
                    self._pump = None

        logger.info("Search cancelled")
        return True

    def close(self) -> None:
        """Ask the engine to quit and tear down the process."""
        if not self.host.commands_closed:
            try:
                self.host.submit("quit", timeout=self.shutdown_timeout)
            except (ChannelClosed, TimeoutError) as e:
                logger.debug(f"Could not send quit: {e}")
        self.host.close(timeout=self.shutdown_timeout)
        if self._pump is not None:
            self._pump.join(timeout=self.shutdown_timeout)

    def _require_idle(self, operation: str) -> None:
        if self._state is State.SEARCH:
            raise SessionStateError(f"Cannot {operation} while a search is running")

    def _decode(self, line: str):
        try:
            return decode(line)
        except DecodeFailure as e:
            logger.warning(f"Skipping undecodable line ({e}): {line}")
            return None

    def _lines_until(self, token: Token, timeout: Optional[float]):
        """
        Yield engine lines until token is seen.

        The token line itself is consumed but not yielded. Other lines are
        yielded so callers can collect them.

        Raises:
            ChannelClosed: If the engine's output ends first
            TimeoutError: If the token did not arrive in time
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            line = self.host.next_line(timeout=_remaining(deadline))
            if line is None:
                raise ChannelClosed(f"Engine output ended while waiting for {token.value}")
            if self._decode(line) is token:
                return
            yield line

    def _send_isready(self) -> None:
        # Counted before sending, so whichever thread reads the reply sees it
        with self._lock:
            self._pending_ready += 1
        self.host.submit("isready")

    def _take_readyok(self) -> None:
        with self._lock:
            if self._pending_ready > 0:
                self._pending_ready -= 1
            else:
                logger.warning("Unexpected readyok")

    def _await_ready(self, timeout: Optional[float]) -> None:
        """
        Read engine lines until every "isready" sent so far is answered.

        Replies left over from an earlier failed wait are consumed first, so
        the barrier never returns on a stale "readyok".

        Raises:
            ChannelClosed: If the engine's output ends first
            TimeoutError: If "readyok" did not arrive in time
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                if self._pending_ready == 0:
                    return
            line = self.host.next_line(timeout=_remaining(deadline))
            if line is None:
                raise ChannelClosed("Engine output ended while waiting for readyok")
            if self._decode(line) is Token.READYOK:
                self._take_readyok()

    def _run_job(self, searcher: Searcher) -> None:
        """Pump thread: relay engine lines to the searcher until bestmove."""
        try:
            while True:
                line = self.host.next_line()
                if line is None:
                    logger.error("Engine output ended during search")
                    break

                try:
                    event = decode(line)
                except DecodeFailure as e:
                    logger.warning(f"Skipping undecodable line ({e}): {line}")
                    searcher.decode_failures.append(e)
                    continue

                if isinstance(event, Info):
                    searcher._publish(event)
                elif isinstance(event, BestMove):
                    # READY before the caller can see the bestmove, so it may
                    # submit the next job as soon as it has it
                    with self._lock:
                        if not self._cancelling:
                            self._state = State.READY
                            self._searcher = None
                            self._pump = None
                    searcher._publish(event)
                    logger.debug(f"Search finished: {event}")
                    break
                elif event is Token.READYOK:
                    # Engines may answer the cancel's "isready" before "bestmove"
                    self._take_readyok()
                elif event is None:
                    self.diagnostics.append(line)
        finally:
            searcher._close()
