# file: chunkwise/chunkwise/session/errors.py
"""
Exceptions raised by structured sessions.

None of these leave a session's buffer changed. "No complete element yet" is
not an error; reads report it as an empty result.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from chunkwise.session.mode import Mode


class ChunkwiseError(Exception):
    """Base exception class for chunkwise errors."""
    pass


class InvalidModeError(ChunkwiseError, ValueError):
    """Raised when a session is requested in a mode that does not exist. No session is created."""

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"invalid mode {mode!r}")


class ModeMismatchError(ChunkwiseError):
    """Raised when an operation expects a different mode than the session was started in."""

    def __init__(self, session_mode: 'Mode', expected_mode: 'Mode', operation: str):
        self.session_mode = session_mode
        self.expected_mode = expected_mode
        self.operation = operation
        super().__init__(
            f"In {session_mode.value} mode -- {operation} expects a {expected_mode.value} session"
        )


class DecodeError(ChunkwiseError):
    """
    Raised when a text session's buffer is not valid in the session encoding.

    ``incomplete`` is True when the offending bytes are the truncated start
    of a valid sequence at the end of the buffer, so a later write may
    complete them.
    """

    def __init__(self, encoding: str, position: int, reason: str, fragment: bytes, incomplete: bool):
        self.encoding = encoding
        self.position = position
        self.reason = reason
        self.fragment = fragment
        self.incomplete = incomplete
        kind = "incomplete encoding" if incomplete else "invalid encoding"
        super().__init__(f"{kind} starting at {fragment!r} (byte {position}, {encoding}): {reason}")


class SessionStoppedError(ChunkwiseError, RuntimeError):
    """Raised when an operation is issued to a session that has been stopped."""

    def __init__(self, session_name: str, detail: Optional[str] = None):
        self.session_name = session_name
        message = f"StructuredSession '{session_name}' is stopped"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SessionTimeoutError(ChunkwiseError, TimeoutError):
    """Raised when a reply does not arrive within the caller's timeout. The request itself still runs."""

    def __init__(self, session_name: str, operation: str, timeout: float):
        self.session_name = session_name
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"StructuredSession '{session_name}': {operation} did not complete within {timeout}s")
