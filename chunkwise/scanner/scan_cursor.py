"""
ScanCursor: a read-only cursor over a byte or character sequence.

Scans never copy the sequence while they walk it. They move a ScanCursor
forward, test for markers at the cursor position, and slice the underlying
sequence once when a complete element has been found.
"""
from typing import Union

Sequence = Union[bytes, str]


class ScanCursor:
    """
    Tracks a position inside an immutable ``bytes`` or ``str`` sequence.
    """

    def __init__(self, data: Sequence, position: int = 0):
        """Initialize the cursor over ``data`` at ``position``."""
        self._data: Sequence = data
        self._pos: int = 0
        self.set_position(position)

    def advance_by(self, count: int) -> None:
        """
        Move the cursor forward by a specified number of units.

        Args:
            count: The number of units to advance.
        """
        self._pos = min(len(self._data), self._pos + count)

    def has_more(self) -> bool:
        """
        Check if there are more units to read.

        Returns:
            True if the cursor is not at the end of the sequence.
        """
        return self._pos < len(self._data)

    def starts_with(self, marker: Sequence) -> bool:
        """
        Check whether the data at the cursor begins with ``marker``.

        Args:
            marker: The byte or character sequence to test for.

        Returns:
            True if the remaining data starts with ``marker``.
        """
        return self._data.startswith(marker, self._pos)

    def find(self, marker: Sequence) -> int:
        """
        Locate the next occurrence of ``marker`` at or after the cursor.

        Returns:
            The absolute index of the occurrence, or -1 if there is none.
        """
        return self._data.find(marker, self._pos)

    def consumed(self, start: int = 0) -> Sequence:
        """Return the units between ``start`` and the cursor."""
        return self._data[start:self._pos]

    def remaining(self) -> Sequence:
        """Return the units from the cursor to the end."""
        return self._data[self._pos:]

    def get_position(self) -> int:
        return self._pos

    def set_position(self, position: int) -> None:
        """
        Set the cursor to a specific position.

        Args:
            position: The new cursor position (clamped to valid range).
        """
        self._pos = max(0, min(len(self._data), position))
