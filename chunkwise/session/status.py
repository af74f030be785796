# file: chunkwise/chunkwise/session/status.py
"""
Defines the lifecycle status of a structured session.
"""
from enum import Enum


class SessionStatus(str, Enum):
    """Enumerates the lifecycle states of a session: CREATED -> RUNNING -> STOPPED."""
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value

    def is_terminal(self) -> bool:
        """Returns True if the status is a final state."""
        return self is SessionStatus.STOPPED

    def accepts_requests(self) -> bool:
        return self is SessionStatus.RUNNING
