"""
Measured scans: read a fixed quantity of bytes or grapheme clusters.
"""
import logging
from typing import Optional, Tuple, Union

import regex

from .scan_cursor import ScanCursor
from .sequences import BytesLike, Sequence, check_encoding, normalize
from .units import Unit

logger = logging.getLogger(__name__)

_GRAPHEME_RE = regex.compile(r"\X")

ScanResult = Optional[Tuple[Sequence, Sequence]]


def scan(data: Union[BytesLike, str], unit: Union[Unit, str], count: int, *, encoding: str = "utf-8") -> ScanResult:
    """
    Reads ``count`` units from the front of ``data``.

    If ``data`` does not contain at least ``count`` complete units, the result
    is None.

    Args:
        data: The bytes or text to read from.
        unit: ``Unit.BYTES`` or ``Unit.GRAPHEMES``.
        count: How many units make up the element.
        encoding: The encoding used to relate bytes and characters. Bytes
            measured over text are counted in this encoding; graphemes
            measured over bytes are decoded from it.

    Returns:
        ``(match, remainder)`` of the same kind as ``data``, or None.

    Raises:
        ValueError: If ``unit`` is unknown, ``count`` is negative, or
            ``encoding`` writes a byte-order mark.

    Examples:
        >>> scan(bytes([23, 45, 67, 89]), Unit.BYTES, 3)
        (b'\\x17-C', b'Y')
        >>> scan("\\r\\nfoo\\tbar", Unit.GRAPHEMES, 5)
        ('\\r\\nfoo\\t', 'bar')
        >>> scan("\\r\\nfoo", Unit.GRAPHEMES, 5) is None
        True
    """
    unit = Unit.parse(unit)
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError(f"'count' must be an int. Got {type(count).__name__}.")
    if count < 0:
        raise ValueError(f"'count' must be non-negative. Got {count}.")

    data = normalize(data, "data")
    if count == 0 or not data:
        return None

    if unit is Unit.BYTES:
        if isinstance(data, str):
            check_encoding(encoding)
            return _scan_bytes_of_text(data, count, encoding)
        return _scan_bytes(data, count)

    if isinstance(data, str):
        return _scan_graphemes(data, count)
    check_encoding(encoding)
    return _scan_graphemes_of_bytes(data, count, encoding)


def _scan_bytes(data: bytes, count: int) -> ScanResult:
    if count > len(data):
        return None
    return data[:count], data[count:]


def _scan_bytes_of_text(data: str, count: int, encoding: str) -> ScanResult:
    encoded = data.encode(encoding)
    if count > len(encoded):
        return None
    try:
        match = encoded[:count].decode(encoding)
    except UnicodeDecodeError:
        logger.debug(f"Measured read of {count} bytes would split a character; no match.")
        return None
    return match, data[len(match):]


def _grapheme_end(text: str, count: int) -> Optional[int]:
    """Return the index just past the ``count``-th grapheme cluster, or None if there are fewer."""
    cursor = ScanCursor(text)
    taken = 0
    while taken < count:
        if not cursor.has_more():
            return None
        cluster = _GRAPHEME_RE.match(text, cursor.get_position())
        cursor.set_position(cluster.end())
        taken += 1
    return cursor.get_position()


def _scan_graphemes(data: str, count: int) -> ScanResult:
    end = _grapheme_end(data, count)
    if end is None:
        return None
    return data[:end], data[end:]


def _decodable_prefix(data: bytes, encoding: str) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        # Only the bytes before the first undecodable unit can be measured.
        return data[:e.start].decode(encoding)


def _scan_graphemes_of_bytes(data: bytes, count: int, encoding: str) -> ScanResult:
    text = _decodable_prefix(data, encoding)
    end = _grapheme_end(text, count)
    if end is None:
        return None
    match_size = len(text[:end].encode(encoding))
    return data[:match_size], data[match_size:]
