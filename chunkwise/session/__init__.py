# file: chunkwise/chunkwise/session/__init__.py
"""
Session: the stateful owner of one accumulating buffer.

Main components:
- StructuredSession: the public handle (write, read_*, snapshot, stop)
- Mode / SessionStatus: the fixed mode and the lifecycle status
- SessionState: an immutable snapshot used to seed or replace a buffer
- SessionWorker / SessionThreadPoolManager: the thread that serves requests
"""
from chunkwise.session.errors import (
    ChunkwiseError,
    DecodeError,
    InvalidModeError,
    ModeMismatchError,
    SessionStoppedError,
    SessionTimeoutError,
)
from chunkwise.session.mode import Mode
from chunkwise.session.status import SessionStatus
from chunkwise.session.state import SessionState
from chunkwise.session.buffer import SessionBuffer
from chunkwise.session.requests import Overlap
from chunkwise.session.thread_pool_manager import SessionThreadPoolManager
from chunkwise.session.session_worker import SessionWorker
from chunkwise.session.structured_session import StructuredSession

__all__ = [
    "StructuredSession",
    "Mode",
    "Overlap",
    "SessionStatus",
    "SessionState",
    "SessionBuffer",
    "SessionWorker",
    "SessionThreadPoolManager",

    # Errors
    "ChunkwiseError",
    "InvalidModeError",
    "ModeMismatchError",
    "DecodeError",
    "SessionStoppedError",
    "SessionTimeoutError",
]
