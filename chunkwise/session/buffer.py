# file: chunkwise/chunkwise/session/buffer.py
import codecs
import logging
from typing import List, Union

from chunkwise.session.errors import DecodeError
from chunkwise.session.mode import Mode

logger = logging.getLogger(__name__)


class SessionBuffer:
    """
    The bytes written to a session and not yet consumed.

    Writes are kept as separate chunks and joined only when the buffer is
    materialized for a read. Only the owning session worker touches a buffer.
    """

    def __init__(self, data: bytes = b""):
        self._chunks: List[bytes] = [data] if data else []
        self._size: int = len(data)

    def append(self, chunk: bytes) -> None:
        """Append ``chunk`` after everything already buffered."""
        if not chunk:
            return
        self._chunks.append(bytes(chunk))
        self._size += len(chunk)

    def to_bytes(self) -> bytes:
        """Join the buffered chunks into one sequence; keeps the joined form for the next read."""
        if len(self._chunks) > 1:
            self._chunks = [b"".join(self._chunks)]
        return self._chunks[0] if self._chunks else b""

    def materialize(self, mode: Mode, encoding: str) -> Union[bytes, str]:
        """
        Return the buffered data as ``bytes`` (binary mode) or ``str`` (text mode).

        Raises:
            DecodeError: In text mode, if the data is not (yet) valid in ``encoding``.
        """
        data = self.to_bytes()
        if mode is Mode.BINARY:
            return data
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            fragment = data[e.start:]
            incomplete = _is_truncated(fragment, encoding)
            logger.debug(
                f"SessionBuffer: {len(data)} buffered bytes are not valid {encoding} at byte {e.start} "
                f"(incomplete={incomplete})."
            )
            raise DecodeError(
                encoding=encoding,
                position=e.start,
                reason=e.reason,
                fragment=fragment,
                incomplete=incomplete,
            ) from e

    def replace(self, remainder: Union[bytes, str], encoding: str) -> None:
        """Replace the whole buffer with ``remainder``, encoding it first if it is text."""
        if isinstance(remainder, str):
            remainder = remainder.encode(encoding)
        self._chunks = [remainder] if remainder else []
        self._size = len(remainder)

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"<SessionBuffer size={self._size} chunks={len(self._chunks)}>"


def _is_truncated(fragment: bytes, encoding: str) -> bool:
    """True if ``fragment`` is the start of a valid sequence that more bytes could complete."""
    decoder = codecs.getincrementaldecoder(encoding)()
    try:
        decoder.decode(fragment, final=False)
    except UnicodeDecodeError:
        return False
    return True
