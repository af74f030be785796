# file: chunkwise/chunkwise/session/requests.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union

from chunkwise.scanner.units import Unit
from chunkwise.session.mode import Mode
from chunkwise.session.state import SessionState


class Overlap(str, Enum):
    """How an enclosed read treats a ``left`` marker found inside the element."""
    NESTED = "nested"
    IGNORE = "ignore"

    def __str__(self) -> str:
        return self.value


@dataclass
class BaseRequest:
    """Base class for all session requests. Requests are pure data containers."""

    @property
    def operation(self) -> str:
        return type(self).__name__


# --- Buffer requests ---

@dataclass
class WriteRequest(BaseRequest):
    """Appends bytes to the buffer. Carries no reply."""
    data: bytes


@dataclass
class ReadRequest(BaseRequest):
    """Base class for requests that try to take one element off the buffer."""
    expected_mode: Optional[Mode]


@dataclass
class ReadMeasuredRequest(ReadRequest):
    unit: Unit
    count: int


@dataclass
class ReadEnclosedRequest(ReadRequest):
    left: Union[bytes, str]
    right: Union[bytes, str]
    inclusive: bool = True
    overlap: Overlap = Overlap.NESTED


@dataclass
class ReadTerminatedRequest(ReadRequest):
    right: Union[bytes, str]
    inclusive: bool = True


# --- State requests ---

@dataclass
class SnapshotRequest(BaseRequest):
    """Asks for a SessionState copy of the current buffer."""


@dataclass
class ReplaceStateRequest(BaseRequest):
    """Swaps the whole buffer for the one in ``state``."""
    state: SessionState


@dataclass
class UpdateStateRequest(BaseRequest):
    """
    Runs ``function`` with the current SessionState while no other request
    is served. ``function`` returns ``(new_state_or_None, reply)``; a new
    state replaces the buffer.
    """
    function: Callable[[SessionState], Tuple[Optional[SessionState], Any]]


# --- Lifecycle requests ---

@dataclass
class StopRequest(BaseRequest):
    """Ends the worker loop once every earlier request has been served."""
