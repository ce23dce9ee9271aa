"""Shared fixtures: the fake engine subprocess and an in-memory host."""

import queue
import sys
from pathlib import Path

import pytest

from uci_client.process.host import ProcessHost
from uci_client.session.controller import SessionController

FAKE_ENGINE = Path(__file__).parent / "fake_engine.py"

# Upper bound for any single wait in the tests
WAIT = 10.0


def spawn_fake_engine(*flags):
    """Start tests/fake_engine.py under the current interpreter."""
    return ProcessHost.spawn(sys.executable, args=["-u", str(FAKE_ENGINE), *flags])


class ScriptedHost:
    """
    In-memory stand-in for ProcessHost.

    Records every command and answers through a reply function mapping a
    command to the lines the "engine" prints in response.
    """

    def __init__(self, reply=None):
        self.commands = []
        self.reply = reply or default_reply
        self.commands_closed = False
        self.lines_closed = False
        self.closed = False
        self._lines = queue.Queue()

    def submit(self, command, timeout=None):
        self.commands.append(command)
        for line in self.reply(command):
            self._lines.put(line)

    def feed(self, *lines):
        for line in lines:
            self._lines.put(line)

    def end(self):
        self._lines.put(None)

    def next_line(self, timeout=None):
        if self.lines_closed:
            return None
        try:
            line = self._lines.get(timeout=WAIT if timeout is None else timeout)
        except queue.Empty:
            raise TimeoutError("no scripted line") from None
        if line is None:
            self.lines_closed = True
        return line

    def close(self, timeout=2.0):
        self.closed = True
        self.commands_closed = True


def default_reply(command):
    if command == "uci":
        return ["id name Scripted", "id author Tests", "uciok"]
    if command == "isready":
        return ["readyok"]
    if command.startswith("go"):
        return [
            "info depth 1 score cp 10 nodes 20 pv e2e4",
            "info depth 2 score cp 15 nodes 80 pv e2e4 e7e5",
            "bestmove e2e4 ponder e7e5",
        ]
    return []


@pytest.fixture
def fake_host():
    """Factory for fake engine hosts, closed after the test."""
    hosts = []

    def make(*flags):
        host = spawn_fake_engine(*flags)
        hosts.append(host)
        return host

    yield make

    for host in hosts:
        host.close()


@pytest.fixture
def ready_session():
    """Factory for READY sessions on the fake engine, closed after the test."""
    sessions = []

    def make(*flags):
        session = SessionController(spawn_fake_engine(*flags))
        sessions.append(session)
        session.initialize(timeout=WAIT)
        session.sync(timeout=WAIT)
        return session

    yield make

    for session in sessions:
        session.close()
