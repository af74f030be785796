# file: chunkwise/chunkwise/adapters/collector.py
import logging
from typing import Iterable, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from chunkwise.session.structured_session import StructuredSession

logger = logging.getLogger(__name__)

Fragment = Union[bytes, bytearray, memoryview, str]


class SessionCollector:
    """
    Feeds fragments into a session, in order.

    Usable directly (``collector.collect(chunks)``) or as a sink with
    ``collector.send(chunk)``.
    """

    def __init__(self, session: 'StructuredSession'):
        self.session = session
        self.written = 0

    def send(self, fragment: Fragment) -> None:
        self.session.write(fragment)
        self.written += 1

    def collect(self, fragments: Iterable[Fragment]) -> 'StructuredSession':
        """Writes every fragment of ``fragments`` and returns the session."""
        for fragment in fragments:
            self.send(fragment)
        logger.debug(f"SessionCollector: wrote {self.written} fragments to session '{self.session.name}'.")
        return self.session


def write_all(session: 'StructuredSession', fragments: Iterable[Fragment]) -> 'StructuredSession':
    """Writes each fragment of ``fragments`` to ``session``, in order."""
    return SessionCollector(session).collect(fragments)
