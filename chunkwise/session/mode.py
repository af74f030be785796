# file: chunkwise/chunkwise/session/mode.py
"""
Defines the fixed interpretation a session applies to its buffer.
"""
from enum import Enum

from chunkwise.session.errors import InvalidModeError


class Mode(str, Enum):
    """Enumerates the modes a session can be started in."""
    BINARY = "binary"
    TEXT = "text"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "Mode":
        """
        Resolves ``value`` to a Mode.

        Accepts a Mode or its string value in any case; ``"unicode"`` is an
        alias of ``TEXT``.

        Raises:
            InvalidModeError: If ``value`` names no mode.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            if name == "unicode":
                return cls.TEXT
            for mode in cls:
                if mode.value == name:
                    return mode
        raise InvalidModeError(value)
