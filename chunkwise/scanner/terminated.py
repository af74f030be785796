"""
Terminated scans: read up to and including (or excluding) a terminator.
"""
from typing import Optional, Tuple, Union

from .scan_cursor import ScanCursor
from .sequences import BytesLike, Sequence, normalize_all

ScanResult = Optional[Tuple[Sequence, Sequence]]


def _scan_terminated(data: Sequence, right: Sequence) -> ScanResult:
    """
    Walks ``data`` until it reaches ``right``.

    Returns:
        ``(before, after)`` where ``before`` excludes ``right`` and ``after``
        follows it, or None if ``right`` does not occur.
    """
    if not data or not right:
        return None
    cursor = ScanCursor(data)
    index = cursor.find(right)
    if index < 0:
        return None
    cursor.set_position(index)
    before = cursor.consumed()
    cursor.advance_by(len(right))
    return before, cursor.remaining()


def scan_through(data: Union[BytesLike, str], right: Union[BytesLike, str]) -> ScanResult:
    """
    Reads from ``data`` if and until ``right`` is encountered, including ``right``.

    If ``data`` does not contain ``right``, the result is None.

    Examples:
        >>> scan_through("foo<br /", "<br/>") is None
        True
        >>> scan_through("foo<br/>bar<br/>", "<br/>")
        ('foo<br/>', 'bar<br/>')
    """
    data, right = normalize_all(data, right=right)
    result = _scan_terminated(data, right)
    if result is None:
        return None
    before, after = result
    return data[:len(before) + len(right)], after


def scan_to(data: Union[BytesLike, str], right: Union[BytesLike, str]) -> ScanResult:
    """
    Reads from ``data`` if and until ``right`` is encountered, excluding ``right``.

    ``right`` stays at the front of the remainder.

    Examples:
        >>> scan_to("foo<br/>bar<br/>", "<br/>")
        ('foo', '<br/>bar<br/>')
        >>> scan_to(bytes([1, 2, 3, 255, 255]), bytes([255, 255, 255])) is None
        True
    """
    data, right = normalize_all(data, right=right)
    result = _scan_terminated(data, right)
    if result is None:
        return None
    before = result[0]
    return before, data[len(before):]
