"""
chunkwise: read whole elements out of data that arrives in arbitrary fragments.
"""
from chunkwise.scanner import (
    Unit,
    scan,
    scan_through,
    scan_to,
    scan_across,
    scan_between,
    scan_across_ignoring_overlap,
    scan_between_ignoring_overlap,
)
from chunkwise.session import (
    StructuredSession,
    Mode,
    Overlap,
    SessionState,
    SessionStatus,
    ChunkwiseError,
    InvalidModeError,
    ModeMismatchError,
    DecodeError,
    SessionStoppedError,
    SessionTimeoutError,
)
from chunkwise.adapters import (
    SessionCollector,
    write_all,
    SessionEnumerator,
    iter_elements,
    Commit,
    transaction,
)
from chunkwise.config import ChunkwiseConfig, get_config

__version__ = "0.1.0"

__all__ = [
    "Unit",
    "scan",
    "scan_through",
    "scan_to",
    "scan_across",
    "scan_between",
    "scan_across_ignoring_overlap",
    "scan_between_ignoring_overlap",
    "StructuredSession",
    "Mode",
    "Overlap",
    "SessionState",
    "SessionStatus",
    "ChunkwiseError",
    "InvalidModeError",
    "ModeMismatchError",
    "DecodeError",
    "SessionStoppedError",
    "SessionTimeoutError",
    "SessionCollector",
    "write_all",
    "SessionEnumerator",
    "iter_elements",
    "Commit",
    "transaction",
    "ChunkwiseConfig",
    "get_config",
]
