"""
Helpers shared by the scan functions for normalizing their arguments.
"""
import codecs
from typing import Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]
Sequence = Union[bytes, str]


def normalize(value: Union[BytesLike, str], argument: str) -> Sequence:
    """Return ``value`` as ``bytes`` or ``str``; raise TypeError for anything else."""
    if isinstance(value, (str, bytes)):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"'{argument}' must be bytes-like or str. Got {type(value).__name__}.")


def normalize_all(data, **markers) -> Tuple[Sequence, ...]:
    """
    Normalize ``data`` and every marker, requiring them to share one kind.

    Returns:
        A tuple of ``data`` followed by the markers in keyword order.

    Raises:
        TypeError: If a marker is ``str`` while ``data`` is bytes, or vice versa.
    """
    normalized_data = normalize(data, "data")
    result = [normalized_data]
    for name, marker in markers.items():
        normalized_marker = normalize(marker, name)
        if type(normalized_marker) is not type(normalized_data):
            raise TypeError(
                f"'{name}' must be the same kind as 'data' "
                f"({type(normalized_data).__name__}). Got {type(normalized_marker).__name__}."
            )
        result.append(normalized_marker)
    return tuple(result)

def check_encoding(encoding: str) -> str:
    """
    Checks that ``encoding`` can encode a stream one piece at a time.

    Codecs that start every encoded piece with a byte-order mark (``utf-16``,
    ``utf-32``, ``utf-8-sig``) would put a mark in the middle of the data on
    each write. Use an explicit byte order instead (``utf-16-le``).

    Returns:
        The canonical codec name.

    Raises:
        LookupError: If no codec is registered under ``encoding``.
        ValueError: If the codec writes a byte-order mark.
    """
    name = codecs.lookup(encoding).name
    if "".encode(encoding):
        raise ValueError(
            f"Encoding {encoding!r} writes a byte-order mark on every encode and cannot be used for "
            f"streamed text. Use a variant with an explicit byte order, e.g. 'utf-16-le'."
        )
    return name
