"""
Enclosed scans: read an element that opens with ``left`` and closes with ``right``.

Two closing rules are offered and callers choose between them explicitly:

- nesting-aware (``scan_across``, ``scan_between``): every ``left`` met inside
  the element must be closed by its own ``right`` before the element ends.
  Where ``left`` and ``right`` both match at one position, ``left`` wins.
- overlap-ignoring (``scan_across_ignoring_overlap``,
  ``scan_between_ignoring_overlap``): the first ``right`` after the opening
  ``left`` closes the element.
"""
import logging
from typing import Optional, Tuple, Union

from .scan_cursor import ScanCursor
from .sequences import BytesLike, Sequence, normalize_all
from .terminated import _scan_terminated

logger = logging.getLogger(__name__)

ScanResult = Optional[Tuple[Sequence, Sequence]]

_NOT_FOUND = -1


def _opening_cursor(data: Sequence, left: Sequence, right: Sequence) -> Optional[ScanCursor]:
    """Return a cursor positioned just after the opening ``left``, or None if ``data`` does not open with it."""
    if not data or not left or not right:
        return None
    cursor = ScanCursor(data)
    if not cursor.starts_with(left):
        return None
    cursor.advance_by(len(left))
    return cursor


class _MarkerTracker:
    """
    Remembers where the next occurrence of a marker lies.

    A lookup is repeated only once the cursor has moved past the remembered
    occurrence, so a scan over the whole sequence stays linear.
    """

    def __init__(self, cursor: ScanCursor, marker: Sequence):
        self._cursor = cursor
        self._marker = marker
        self._next: Optional[int] = None

    def next_index(self) -> int:
        position = self._cursor.get_position()
        if self._next is None or (self._next != _NOT_FOUND and self._next < position):
            self._next = self._cursor.find(self._marker)
        return self._next


def _scan_nested(cursor: ScanCursor, left: Sequence, right: Sequence) -> Optional[int]:
    """
    Advances ``cursor`` until the ``right`` that closes the opening ``left``.

    Positions where neither marker matches are skipped in one step; at each
    remaining position ``left`` is tested before ``right``.

    Returns:
        The index just past the closing ``right``, or None if the data ends
        with the element still open.
    """
    depth = 1
    lefts = _MarkerTracker(cursor, left)
    rights = _MarkerTracker(cursor, right)
    while depth > 0:
        next_left = lefts.next_index()
        next_right = rights.next_index()
        if next_right == _NOT_FOUND:
            return None
        if next_left != _NOT_FOUND and next_left <= next_right:
            cursor.set_position(next_left)
            cursor.advance_by(len(left))
            depth += 1
        else:
            cursor.set_position(next_right)
            cursor.advance_by(len(right))
            depth -= 1
    return cursor.get_position()


def scan_across(
    data: Union[BytesLike, str],
    left: Union[BytesLike, str],
    right: Union[BytesLike, str],
) -> ScanResult:
    """
    Reads from ``data``, beginning with ``left`` and ending with the
    occurrence of ``right`` that corresponds to it, inclusive.

    If ``data`` does not both begin with ``left`` and contain a corresponding
    ``right``, the result is None.

    Examples:
        >>> scan_across("<elem>foo</elem", "<elem>", "</elem>") is None
        True
        >>> scan_across("<elem>foo<elem>bar</elem></elem>baz", "<elem>", "</elem>")
        ('<elem>foo<elem>bar</elem></elem>', 'baz')
    """
    data, left, right = normalize_all(data, left=left, right=right)
    cursor = _opening_cursor(data, left, right)
    if cursor is None:
        return None
    end = _scan_nested(cursor, left, right)
    if end is None:
        return None
    return data[:end], data[end:]


def scan_between(
    data: Union[BytesLike, str],
    left: Union[BytesLike, str],
    right: Union[BytesLike, str],
) -> ScanResult:
    """
    Reads from ``data``, beginning with ``left`` and ending with the
    occurrence of ``right`` that corresponds to it, exclusive.

    The opening ``left`` and the closing ``right`` are both dropped from the
    match; nested markers inside the element are kept.

    Examples:
        >>> scan_between("<elem>foo</elem><elem>bar</elem>", "<elem>", "</elem>")
        ('foo', '<elem>bar</elem>')
        >>> scan_between("<elem>foo<elem>bar</elem></elem>baz", "<elem>", "</elem>")
        ('foo<elem>bar</elem>', 'baz')
    """
    data, left, right = normalize_all(data, left=left, right=right)
    cursor = _opening_cursor(data, left, right)
    if cursor is None:
        return None
    end = _scan_nested(cursor, left, right)
    if end is None:
        return None
    return data[len(left):end - len(right)], data[end:]


def scan_across_ignoring_overlap(
    data: Union[BytesLike, str],
    left: Union[BytesLike, str],
    right: Union[BytesLike, str],
) -> ScanResult:
    """
    Reads from ``data``, beginning with ``left`` and ending with the first
    occurrence of ``right``, inclusive.

    Examples:
        >>> scan_across_ignoring_overlap("<elem>foo<elem>bar</elem></elem>baz", "<elem>", "</elem>")
        ('<elem>foo<elem>bar</elem>', '</elem>baz')
    """
    data, left, right = normalize_all(data, left=left, right=right)
    cursor = _opening_cursor(data, left, right)
    if cursor is None:
        return None
    result = _scan_terminated(cursor.remaining(), right)
    if result is None:
        return None
    before, after = result
    return data[:len(left) + len(before) + len(right)], after


def scan_between_ignoring_overlap(
    data: Union[BytesLike, str],
    left: Union[BytesLike, str],
    right: Union[BytesLike, str],
) -> ScanResult:
    """
    Reads from ``data``, beginning with ``left`` and ending with the first
    occurrence of ``right``, exclusive.

    Examples:
        >>> scan_between_ignoring_overlap("<elem>foo<elem>bar</elem></elem>baz", "<elem>", "</elem>")
        ('foo<elem>bar', '</elem>baz')
    """
    data, left, right = normalize_all(data, left=left, right=right)
    cursor = _opening_cursor(data, left, right)
    if cursor is None:
        return None
    return _scan_terminated(cursor.remaining(), right)
