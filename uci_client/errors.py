"""
Exception hierarchy for UCI sessions.

Every exception raised by this package derives from :class:`UCIError`, and
additionally from the built-in exception a caller would naturally catch for
the same kind of problem (``OSError`` for launch problems, ``EOFError`` for a
closed transport, ``ValueError`` for an undecodable line, ``RuntimeError``
for misuse of a session).

Caller-specified timeouts raise the built-in ``TimeoutError``.
"""

from typing import Optional


class UCIError(Exception):
    """Base class for all UCI session errors."""


class SpawnFailure(UCIError, OSError):
    """The engine executable could not be started or its streams captured."""


class ChannelClosed(UCIError, EOFError):
    """The command or line channel to the engine process has ended."""


class DecodeFailure(UCIError, ValueError):
    """
    A recognized keyword in an engine line had a missing or malformed value.

    Scoped to a single line: the session keeps running after one of these.

    Attributes:
        line: The offending raw line
        keyword: Keyword whose value could not be decoded (None if the line
            itself is malformed)
    """

    def __init__(self, message: str, line: str = "", keyword: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.keyword = keyword


class BusyRejection(UCIError, RuntimeError):
    """A job was submitted while another job is still in flight."""


class SessionStateError(UCIError, RuntimeError):
    """An operation was called in a session state that does not allow it."""
