"""
Engine Process Host

Owns the engine subprocess and its two text streams.

Threading:
    - Writer thread: drains the command queue into the engine's stdin,
      newline-terminating and flushing every command
    - Reader thread: reads the engine's stdout line by line into the
      line queue
    - Callers: submit() commands and pull lines with next_line()

Both queues are bounded, so a caller producing commands faster than the
engine consumes them blocks in submit(), and a reader producing lines faster
than the session consumes them blocks the engine's output.

When a thread hits an I/O error (broken pipe, EOF) it ends and closes its
side of the host: submit() then raises ChannelClosed, and next_line()
returns None. The other thread keeps running. Nothing is restarted.
"""

import logging
import queue
import subprocess
import threading
import time
from typing import List, Optional, Sequence

from uci_client.errors import ChannelClosed, SpawnFailure

logger = logging.getLogger(__name__)

# Granularity of blocking waits, so closed channels are noticed
POLL_INTERVAL = 0.05

_STOP = object()
_EOF = object()


def _deadline(timeout: Optional[float]) -> Optional[float]:
    return None if timeout is None else time.monotonic() + timeout


def _expired(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


class ProcessHost:
    """
    Engine subprocess with a command sink and a line source.

    Attributes:
        process: The engine subprocess
        command_queue_size: Capacity of the outbound command queue
        event_queue_size: Capacity of the inbound line queue
    """

    def __init__(
        self,
        process: subprocess.Popen,
        command_queue_size: int = 32,
        event_queue_size: int = 32,
    ):
        """
        Start the writer and reader threads for an already spawned process.

        Args:
            process: Process with piped, text-mode stdin and stdout
            command_queue_size: Outbound queue capacity (default: 32)
            event_queue_size: Inbound queue capacity (default: 32)
        """
        self.process = process
        self.command_queue_size = command_queue_size
        self.event_queue_size = event_queue_size

        self._commands: queue.Queue = queue.Queue(maxsize=command_queue_size)
        self._lines: queue.Queue = queue.Queue(maxsize=event_queue_size)

        self._closing = threading.Event()
        self._writer_done = threading.Event()
        self._reader_done = threading.Event()
        self._eof_seen = False
        self._closed = False
        self._close_lock = threading.Lock()

        self._writer = threading.Thread(
            target=self._write_loop, name=f"uci-writer-{process.pid}", daemon=True
        )
        self._reader = threading.Thread(
            target=self._read_loop, name=f"uci-reader-{process.pid}", daemon=True
        )
        self._writer.start()
        self._reader.start()

    @classmethod
    def spawn(
        cls,
        executable_path: str,
        args: Sequence[str] = (),
        command_queue_size: int = 32,
        event_queue_size: int = 32,
    ) -> "ProcessHost":
        """
        Launch an engine and start its I/O threads.

        Args:
            executable_path: Path to the engine binary
            args: Extra command-line arguments for the engine
            command_queue_size: Outbound queue capacity
            event_queue_size: Inbound queue capacity

        Returns:
            Running ProcessHost

        Raises:
            SpawnFailure: If the engine cannot be started or its standard
                streams cannot be captured
        """
        command: List[str] = [str(executable_path), *args]
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError) as e:
            raise SpawnFailure(f"Failed to start engine {executable_path}: {e}") from e

        if process.stdin is None or process.stdout is None:
            process.kill()
            process.wait()
            raise SpawnFailure(f"Failed to capture standard streams of {executable_path}")

        logger.info(f"Started engine: {' '.join(command)} (pid={process.pid})")
        return cls(
            process,
            command_queue_size=command_queue_size,
            event_queue_size=event_queue_size,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.poll()

    @property
    def commands_closed(self) -> bool:
        """True once no more commands can reach the engine."""
        return self._writer_done.is_set() or self._closing.is_set()

    @property
    def lines_closed(self) -> bool:
        """True once end-of-stream has been observed by next_line()."""
        return self._eof_seen

    def is_alive(self) -> bool:
        return self.process.poll() is None

    def submit(self, command: str, timeout: Optional[float] = None) -> None:
        """
        Queue a command for the engine.

        Blocks only while the command queue is full.

        Args:
            command: Single-line command, without line terminator
            timeout: Maximum seconds to wait for queue space (None = forever)

        Raises:
            ValueError: If the command contains a line break
            ChannelClosed: If the writer has stopped or the host is closed
            TimeoutError: If no queue space became available in time
        """
        if "\n" in command or "\r" in command:
            raise ValueError(f"Command must be a single line: {command!r}")

        deadline = _deadline(timeout)
        while True:
            if self.commands_closed:
                raise ChannelClosed("Command channel to engine is closed")
            try:
                self._commands.put(command, timeout=POLL_INTERVAL)
            except queue.Full:
                if _expired(deadline):
                    raise TimeoutError(f"Command queue still full after {timeout}s")
                continue
            # The writer may have stopped while the command was being queued
            if self.commands_closed:
                raise ChannelClosed(f"Command channel closed, {command!r} may not be delivered")
            return

    def next_line(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Take the next line of engine output.

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Returns:
            The line without its terminator, or None at end-of-stream. Once
            end-of-stream has been returned, every later call returns None.

        Raises:
            TimeoutError: If no line arrived in time
        """
        deadline = _deadline(timeout)
        while not self._eof_seen:
            try:
                item = self._lines.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                if self._reader_done.is_set() and self._lines.empty():
                    self._eof_seen = True
                    break
                if _expired(deadline):
                    raise TimeoutError(f"No engine output within {timeout}s")
                continue

            if item is _EOF:
                self._eof_seen = True
                break
            return item

        return None

    def close(self, timeout: float = 2.0) -> None:
        """
        Stop the I/O threads and reap the engine process.

        The writer is given a chance to flush queued commands (e.g. "quit"),
        then stdin is closed. If the process does not exit within timeout it
        is terminated, then killed.

        Args:
            timeout: Seconds to wait at each shutdown step
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        try:
            self._commands.put_nowait(_STOP)
        except queue.Full:
            pass
        self._writer.join(timeout=timeout)
        self._closing.set()

        try:
            self.process.stdin.close()
        except OSError as e:
            logger.debug(f"Error closing engine stdin: {e}")
        try:
            self._commands.put_nowait(_STOP)
        except queue.Full:
            pass

        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Engine (pid={self.pid}) did not exit, terminating")
            self.process.terminate()
            try:
                self.process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning(f"Engine (pid={self.pid}) did not terminate, killing")
                self.process.kill()
                self.process.wait()

        self._reader.join(timeout=timeout)
        self.process.stdout.close()
        logger.info(f"Engine stopped (pid={self.pid}, returncode={self.process.returncode})")

    def _write_loop(self) -> None:
        stdin = self.process.stdin
        try:
            while True:
                command = self._commands.get()
                if command is _STOP:
                    break
                logger.debug(f"-> {command}")
                stdin.write(command + "\n")
                stdin.flush()
        except (OSError, ValueError) as e:
            # BrokenPipeError is an OSError; ValueError means stdin was closed
            logger.error(f"Writer error: {e}")
        finally:
            self._writer_done.set()
            logger.debug("Writer thread finished")

    def _read_loop(self) -> None:
        try:
            for raw in self.process.stdout:
                line = raw.rstrip("\r\n")
                logger.debug(f"<- {line}")
                if not self._publish(line):
                    break
        except (OSError, ValueError) as e:
            logger.error(f"Reader error: {e}")
        finally:
            self._reader_done.set()
            try:
                self._lines.put_nowait(_EOF)
            except queue.Full:
                # next_line() notices _reader_done once the queue drains
                pass
            logger.debug("Reader thread finished")

    def _publish(self, line: str) -> bool:
        """Put a line on the line queue; False if the host is closing."""
        while not self._closing.is_set():
            try:
                self._lines.put(line, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False
