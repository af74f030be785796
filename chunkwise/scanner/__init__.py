# Scanner package
"""
Scanner: stateless functions that split one complete element off the front
of a byte or character sequence.

Every function returns ``(match, remainder)`` when a whole element is
present and None when it is not (yet). None of them ever returns a partial
element.

Main components:
- scan: measured elements (a count of bytes or grapheme clusters)
- scan_through / scan_to: terminated elements
- scan_across / scan_between: enclosed elements, nesting-aware
- scan_across_ignoring_overlap / scan_between_ignoring_overlap: enclosed
  elements closed by the first terminator
"""
from .units import Unit
from .scan_cursor import ScanCursor
from .measured import scan
from .terminated import scan_through, scan_to
from .enclosed import (
    scan_across,
    scan_between,
    scan_across_ignoring_overlap,
    scan_between_ignoring_overlap,
)

__all__ = [
    "Unit",
    "ScanCursor",

    # Measured
    "scan",

    # Terminated
    "scan_through",
    "scan_to",

    # Enclosed
    "scan_across",
    "scan_between",
    "scan_across_ignoring_overlap",
    "scan_between_ignoring_overlap",
]
