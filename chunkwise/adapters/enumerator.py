# file: chunkwise/chunkwise/adapters/enumerator.py
import logging
from typing import Any, Callable, Iterator, Union

logger = logging.getLogger(__name__)

Element = Union[bytes, str]


class SessionEnumerator:
    """
    Iterates the elements a session can currently produce.

    Each step calls ``read`` (a bound ``read_*`` method of a session) with
    the stored arguments. Iteration ends at the first empty result. An error
    raised by ``read`` propagates to the caller and also ends iteration.

    Iterating consumes elements from the session; a second pass only sees
    elements written since the first one ended.

    Example:
        >>> elements = SessionEnumerator(session.read_between, "<elem>", "</elem>")
        >>> [element.upper() for element in elements]
        ['FOO', 'BAR', 'BAZ']
    """

    def __init__(self, read: Callable[..., Element], *args: Any, **kwargs: Any):
        if not callable(read):
            raise TypeError(f"SessionEnumerator requires a callable read function. Got {type(read).__name__}.")
        self._read = read
        self._args = args
        self._kwargs = kwargs

    def __iter__(self) -> Iterator[Element]:
        count = 0
        while True:
            element = self._read(*self._args, **self._kwargs)
            if not element:
                logger.debug(f"SessionEnumerator: stopped after {count} elements.")
                return
            count += 1
            yield element


def iter_elements(read: Callable[..., Element], *args: Any, **kwargs: Any) -> Iterator[Element]:
    """Shortcut for ``iter(SessionEnumerator(read, *args, **kwargs))``."""
    return iter(SessionEnumerator(read, *args, **kwargs))
