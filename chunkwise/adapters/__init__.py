# file: chunkwise/chunkwise/adapters/__init__.py
"""
Helpers that plug a StructuredSession into ordinary Python iteration and
give it all-or-nothing multi-step operations.
"""
from chunkwise.adapters.collector import SessionCollector, write_all
from chunkwise.adapters.enumerator import SessionEnumerator, iter_elements
from chunkwise.adapters.transaction import Commit, transaction

__all__ = [
    "SessionCollector",
    "write_all",
    "SessionEnumerator",
    "iter_elements",
    "Commit",
    "transaction",
]
