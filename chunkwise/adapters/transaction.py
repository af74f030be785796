# file: chunkwise/chunkwise/adapters/transaction.py
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, TYPE_CHECKING

from chunkwise.session.state import SessionState

if TYPE_CHECKING:
    from chunkwise.session.structured_session import StructuredSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commit:
    """Returned by a transaction operation to keep the changes it made."""
    value: Any = None


def transaction(session: 'StructuredSession',
                operation: Callable[['StructuredSession'], Any],
                timeout: Optional[float] = None) -> Any:
    """
    Runs ``operation`` against a scratch copy of ``session`` and commits or discards its effects.

    The scratch session starts from a snapshot of ``session``'s buffer.
    While ``operation`` runs, ``session`` serves no other request, so no
    other caller observes an intermediate buffer.

    Args:
        session: The session to operate on.
        operation: Called with the scratch session. Returning ``Commit(value)``
            replaces ``session``'s buffer with the scratch buffer and makes the
            transaction return ``value``. Any other return value leaves
            ``session`` untouched and is returned as is.
        timeout: Seconds to wait for the whole transaction.

    Returns:
        The committed value, or the operation's plain return value.

    Raises:
        Any exception raised by ``operation``; ``session`` is left untouched.
    """
    def run(state: SessionState) -> Tuple[Optional[SessionState], Any]:
        from chunkwise.session.structured_session import StructuredSession

        scratch = StructuredSession.from_state(state, name=f"{session.name}_transaction")
        try:
            outcome = operation(scratch)
            if isinstance(outcome, Commit):
                committed = scratch.snapshot()
                logger.debug(f"Transaction on session '{session.name}' committed ({len(committed.data)} bytes remain).")
                return committed, outcome.value
            logger.debug(f"Transaction on session '{session.name}' discarded.")
            return None, outcome
        finally:
            scratch.stop()

    return session.update_state(run, timeout)
