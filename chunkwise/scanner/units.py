"""
Defines the units in which a measured element is counted.
"""
from enum import Enum


class Unit(str, Enum):
    """Enumerates the units of size for a measured data element."""
    BYTES = "bytes"
    GRAPHEMES = "graphemes"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "Unit":
        """Accept a Unit or its string value; raise ValueError for anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(repr(unit.value) for unit in cls)
            raise ValueError(f"Invalid unit {value!r}. Expected one of: {valid}.") from None
