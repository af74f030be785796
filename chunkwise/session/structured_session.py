# file: chunkwise/chunkwise/session/structured_session.py
import concurrent.futures
import functools
import logging
import threading
import uuid
import weakref
from typing import Any, Callable, Optional, Tuple, Union

from chunkwise.config import get_config
from chunkwise.scanner.sequences import check_encoding, normalize
from chunkwise.scanner.units import Unit
from chunkwise.session.buffer import SessionBuffer
from chunkwise.session.dispatcher import SessionRequestDispatcher
from chunkwise.session.errors import ModeMismatchError, SessionStoppedError, SessionTimeoutError
from chunkwise.session.mode import Mode
from chunkwise.session.requests import (
    BaseRequest,
    Overlap,
    ReadEnclosedRequest,
    ReadMeasuredRequest,
    ReadTerminatedRequest,
    ReplaceStateRequest,
    SnapshotRequest,
    UpdateStateRequest,
    WriteRequest,
)
from chunkwise.session.session_worker import SessionWorker
from chunkwise.session.state import SessionState
from chunkwise.session.status import SessionStatus

logger = logging.getLogger(__name__)

Element = Union[bytes, str]
Marker = Union[bytes, bytearray, memoryview, str]


class StructuredSession:
    """
    User-facing handle to one buffer of streamed data.

    Callers write fragments as they arrive and read back whole elements. A
    read either returns a complete element and removes it from the buffer,
    or returns an empty result (``b""`` in binary mode, ``""`` in text mode)
    and leaves the buffer exactly as it was.

    All requests to one session are served one at a time, in the order they
    were issued, by the session's worker thread.
    """

    def __init__(self,
                 mode: Union[Mode, str],
                 encoding: Optional[str] = None,
                 name: Optional[str] = None,
                 data: bytes = b""):
        self._mode: Mode = Mode.parse(mode)
        self._encoding: str = encoding or get_config().text_encoding
        self.name: str = name or f"session_{uuid.uuid4().hex[:8]}"

        # Fail on an unknown or byte-order-marked codec now rather than on the first read.
        check_encoding(self._encoding)

        self._status: SessionStatus = SessionStatus.CREATED
        self._status_lock = threading.Lock()
        self._dispatcher = SessionRequestDispatcher(
            session_name=self.name,
            mode=self._mode,
            encoding=self._encoding,
            buffer=SessionBuffer(data),
        )
        self._worker = SessionWorker(self.name, self._dispatcher)
        # Stops the worker if the session is garbage-collected while running.
        self._finalizer = weakref.finalize(self, SessionWorker.request_stop, self._worker)
        self._finalizer.atexit = False
        logger.info(f"StructuredSession '{self.name}' created in {self._mode.value} mode.")

    # --- Lifecycle ---

    @classmethod
    def start(cls,
              mode: Union[Mode, str],
              *,
              encoding: Optional[str] = None,
              name: Optional[str] = None) -> "StructuredSession":
        """
        Creates a session in ``mode`` and starts serving requests.

        Raises:
            InvalidModeError: If ``mode`` is not a known mode. No session is created.
        """
        session = cls(mode, encoding=encoding, name=name)
        session.run()
        return session

    @classmethod
    def from_state(cls, state: SessionState, *, name: Optional[str] = None) -> "StructuredSession":
        """Starts a new session whose mode, encoding and buffer are copied from ``state``."""
        session = cls(state.mode, encoding=state.encoding, name=name, data=state.data)
        session.run()
        return session

    def run(self) -> None:
        """Moves a CREATED session to RUNNING."""
        with self._status_lock:
            if self._status is not SessionStatus.CREATED:
                if self._status is SessionStatus.STOPPED:
                    raise SessionStoppedError(self.name, "a stopped session cannot be restarted")
                logger.warning(f"StructuredSession '{self.name}': run() called, but session is already running.")
                return
            self._worker.start()
            self._status = SessionStatus.RUNNING
        logger.info(f"StructuredSession '{self.name}' is running.")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stops the session once every request issued before this call has been served.

        Later operations raise SessionStoppedError.
        """
        with self._status_lock:
            if self._status is SessionStatus.STOPPED:
                logger.warning(f"StructuredSession '{self.name}': stop() called, but session is already stopped.")
                return
            previous = self._status
            self._status = SessionStatus.STOPPED
        if previous is SessionStatus.RUNNING:
            self._worker.stop(timeout=self._resolve_timeout(timeout))
        logger.info(f"StructuredSession '{self.name}' stopped.")

    def __enter__(self) -> "StructuredSession":
        if self._status is SessionStatus.CREATED:
            self.run()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # --- Properties ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is SessionStatus.RUNNING

    # --- Writing ---

    def write(self, data: Marker) -> None:
        """
        Appends ``data`` to the buffer without waiting for the worker.

        Bytes are accepted in either mode and are not validated until a read.
        Text is accepted only by a text session, which encodes it first.

        Raises:
            ModeMismatchError: If ``data`` is ``str`` and the session is binary.
            SessionStoppedError: If the session is stopped.
        """
        if isinstance(data, str):
            if self._mode is not Mode.TEXT:
                raise ModeMismatchError(self._mode, Mode.TEXT, "write")
            payload = data.encode(self._encoding)
        else:
            payload = normalize(data, "data")
        future = self._submit(WriteRequest(data=payload))
        # Bound to the name only, so a pending write does not keep the session alive.
        future.add_done_callback(functools.partial(_log_write_failure, self.name))

    # --- Reading ---

    def read_measured(self,
                      unit: Union[Unit, str],
                      count: int,
                      timeout: Optional[float] = None) -> Element:
        """
        Reads exactly ``count`` bytes or grapheme clusters.

        Grapheme reads need a text session. Byte reads work in either mode;
        in text mode the bytes are counted in the session encoding.
        """
        unit = Unit.parse(unit)
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(f"'count' must be an int. Got {type(count).__name__}.")
        if count < 0:
            raise ValueError(f"'count' must be non-negative. Got {count}.")
        expected_mode = Mode.TEXT if unit is Unit.GRAPHEMES else None
        request = ReadMeasuredRequest(expected_mode=expected_mode, unit=unit, count=count)
        return self._call(request, timeout)

    def read_enclosed(self,
                      left: Marker,
                      right: Marker,
                      timeout: Optional[float] = None,
                      *,
                      inclusive: bool = True,
                      overlap: Union[Overlap, str] = Overlap.NESTED) -> Element:
        """
        Reads an element that opens with ``left`` and closes with ``right``.

        Args:
            left: Marker the buffer must begin with.
            right: Marker that closes the element.
            timeout: Seconds to wait for the reply; defaults to the configured timeout.
            inclusive: Keep both markers in the match (True) or strip them (False).
            overlap: ``Overlap.NESTED`` pairs every inner ``left`` with its own
                ``right``; ``Overlap.IGNORE`` closes at the first ``right``.
        """
        left, right, expected_mode = self._markers(left=left, right=right)
        request = ReadEnclosedRequest(
            expected_mode=expected_mode,
            left=left,
            right=right,
            inclusive=inclusive,
            overlap=Overlap(overlap),
        )
        return self._call(request, timeout)

    def read_terminated(self,
                        terminator: Marker,
                        timeout: Optional[float] = None,
                        *,
                        inclusive: bool = True) -> Element:
        """Reads up to ``terminator``, keeping it in the match (inclusive) or at the front of the buffer (exclusive)."""
        terminator, expected_mode = self._markers(terminator=terminator)
        request = ReadTerminatedRequest(expected_mode=expected_mode, right=terminator, inclusive=inclusive)
        return self._call(request, timeout)

    def read_across(self, left: Marker, right: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_enclosed(left, right, timeout, inclusive=True, overlap=Overlap.NESTED)

    def read_between(self, left: Marker, right: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_enclosed(left, right, timeout, inclusive=False, overlap=Overlap.NESTED)

    def read_across_ignoring_overlap(self, left: Marker, right: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_enclosed(left, right, timeout, inclusive=True, overlap=Overlap.IGNORE)

    def read_between_ignoring_overlap(self, left: Marker, right: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_enclosed(left, right, timeout, inclusive=False, overlap=Overlap.IGNORE)

    def read_through(self, terminator: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_terminated(terminator, timeout, inclusive=True)

    def read_to(self, terminator: Marker, timeout: Optional[float] = None) -> Element:
        return self.read_terminated(terminator, timeout, inclusive=False)

    def _markers(self, **markers: Marker) -> Tuple[Any, ...]:
        """
        Normalizes the markers of a read and derives the mode they expect.

        Returns:
            The normalized markers in keyword order, followed by the expected Mode.
        """
        normalized = [normalize(marker, name) for name, marker in markers.items()]
        kinds = {type(marker) for marker in normalized}
        if len(kinds) > 1:
            raise TypeError(f"Markers {list(markers)} must all be bytes-like or all be str.")
        expected_mode = Mode.TEXT if kinds == {str} else Mode.BINARY
        return (*normalized, expected_mode)

    # --- State ---

    def snapshot(self, timeout: Optional[float] = None) -> SessionState:
        """Returns a copy of the session's mode, encoding and unconsumed bytes."""
        return self._call(SnapshotRequest(), timeout)

    def replace_state(self, state: SessionState, timeout: Optional[float] = None) -> None:
        """Replaces the unconsumed bytes with those of ``state``, which must have this session's mode and encoding."""
        if not isinstance(state, SessionState):
            raise TypeError(f"replace_state expects a SessionState. Got {type(state).__name__}.")
        self._call(ReplaceStateRequest(state=state), timeout)

    def update_state(self,
                     function: Callable[[SessionState], Tuple[Optional[SessionState], Any]],
                     timeout: Optional[float] = None) -> Any:
        """
        Runs ``function`` on the current state while the session serves nothing else.

        ``function`` returns ``(new_state, reply)``. A ``new_state`` that is
        not None replaces the buffer; ``reply`` is returned. ``function`` must
        not call this session.
        """
        return self._call(UpdateStateRequest(function=function), timeout)

    def transaction(self, operation: Callable[["StructuredSession"], Any], timeout: Optional[float] = None) -> Any:
        """Shortcut for ``chunkwise.adapters.transaction(self, operation, timeout)``."""
        from chunkwise.adapters.transaction import transaction
        return transaction(self, operation, timeout)

    # --- Internals ---

    def _resolve_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return get_config().default_timeout if timeout is None else timeout

    def _submit(self, request: BaseRequest) -> concurrent.futures.Future:
        if not self._status.accepts_requests():
            raise SessionStoppedError(self.name, f"cannot accept {request.operation} while {self._status.value}")
        return self._worker.submit(request)

    def _call(self, request: BaseRequest, timeout: Optional[float]) -> Any:
        future = self._submit(request)
        effective_timeout = self._resolve_timeout(timeout)
        try:
            return future.result(timeout=effective_timeout)
        except concurrent.futures.TimeoutError:
            if future.done():
                raise
            raise SessionTimeoutError(self.name, request.operation, effective_timeout) from None

    def __repr__(self) -> str:
        return f"<StructuredSession name='{self.name}' mode={self._mode.value} status={self._status.value}>"


def _log_write_failure(session_name: str, future: concurrent.futures.Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error(f"StructuredSession '{session_name}': write failed: {error}")
