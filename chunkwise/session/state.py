# file: chunkwise/chunkwise/session/state.py
from dataclasses import dataclass

from chunkwise.session.mode import Mode


@dataclass(frozen=True)
class SessionState:
    """
    An immutable snapshot of everything a session owns: its mode, its
    encoding and its unconsumed bytes.

    A snapshot can seed a new session or replace the state of a running one.
    """
    mode: Mode
    data: bytes = b""
    encoding: str = "utf-8"

    def __post_init__(self):
        object.__setattr__(self, "mode", Mode.parse(self.mode))
        if not isinstance(self.data, bytes):
            if isinstance(self.data, (bytearray, memoryview)):
                object.__setattr__(self, "data", bytes(self.data))
            else:
                raise TypeError(f"SessionState 'data' must be bytes. Got {type(self.data).__name__}.")
