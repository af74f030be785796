# file: chunkwise/chunkwise/session/dispatcher.py
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from chunkwise.scanner import (
    scan,
    scan_across,
    scan_across_ignoring_overlap,
    scan_between,
    scan_between_ignoring_overlap,
    scan_through,
    scan_to,
)
from chunkwise.session.buffer import SessionBuffer
from chunkwise.session.errors import ModeMismatchError
from chunkwise.session.mode import Mode
from chunkwise.session.requests import (
    BaseRequest,
    Overlap,
    ReadEnclosedRequest,
    ReadMeasuredRequest,
    ReadRequest,
    ReadTerminatedRequest,
    ReplaceStateRequest,
    SnapshotRequest,
    UpdateStateRequest,
    WriteRequest,
)
from chunkwise.session.state import SessionState

logger = logging.getLogger(__name__)

ScanResult = Optional[Tuple[Union[bytes, str], Union[bytes, str]]]

_ENCLOSED_SCANS: Dict[Tuple[bool, Overlap], Callable[..., ScanResult]] = {
    (True, Overlap.NESTED): scan_across,
    (False, Overlap.NESTED): scan_between,
    (True, Overlap.IGNORE): scan_across_ignoring_overlap,
    (False, Overlap.IGNORE): scan_between_ignoring_overlap,
}


class SessionRequestDispatcher:
    """
    Applies session requests to one SessionBuffer.

    Every handler runs to completion before the next request is dispatched,
    and a read changes the buffer only when its scan found a whole element.
    """

    def __init__(self, session_name: str, mode: Mode, encoding: str, buffer: Optional[SessionBuffer] = None):
        self.session_name = session_name
        self.mode = mode
        self.encoding = encoding
        self.buffer = buffer if buffer is not None else SessionBuffer()
        self._handlers: Dict[Type[BaseRequest], Callable[[Any], Any]] = {
            WriteRequest: self._handle_write,
            ReadMeasuredRequest: self._handle_read_measured,
            ReadEnclosedRequest: self._handle_read_enclosed,
            ReadTerminatedRequest: self._handle_read_terminated,
            SnapshotRequest: self._handle_snapshot,
            ReplaceStateRequest: self._handle_replace_state,
            UpdateStateRequest: self._handle_update_state,
        }

    def dispatch(self, request: BaseRequest) -> Any:
        handler = self._handlers.get(type(request))
        if handler is None:
            raise TypeError(f"StructuredSession '{self.session_name}': no handler for request type {type(request).__name__}.")
        return handler(request)

    # --- Buffer handlers ---

    def _handle_write(self, request: WriteRequest) -> None:
        self.buffer.append(request.data)
        logger.debug(f"StructuredSession '{self.session_name}': appended {len(request.data)} bytes (buffer now {self.buffer.size}).")

    def _handle_read_measured(self, request: ReadMeasuredRequest) -> Union[bytes, str]:
        data = self._materialize(request)
        result = scan(data, request.unit, request.count, encoding=self.encoding)
        return self._commit(request, result)

    def _handle_read_enclosed(self, request: ReadEnclosedRequest) -> Union[bytes, str]:
        data = self._materialize(request)
        scan_function = _ENCLOSED_SCANS[(request.inclusive, request.overlap)]
        result = scan_function(data, request.left, request.right)
        return self._commit(request, result)

    def _handle_read_terminated(self, request: ReadTerminatedRequest) -> Union[bytes, str]:
        data = self._materialize(request)
        scan_function = scan_through if request.inclusive else scan_to
        result = scan_function(data, request.right)
        return self._commit(request, result)

    def _materialize(self, request: ReadRequest) -> Union[bytes, str]:
        if request.expected_mode is not None and request.expected_mode is not self.mode:
            raise ModeMismatchError(self.mode, request.expected_mode, request.operation)
        return self.buffer.materialize(self.mode, self.encoding)

    def _commit(self, request: ReadRequest, result: ScanResult) -> Union[bytes, str]:
        if result is None:
            logger.debug(f"StructuredSession '{self.session_name}': {request.operation} found no complete element.")
            return b"" if self.mode is Mode.BINARY else ""
        match, remainder = result
        self.buffer.replace(remainder, self.encoding)
        logger.debug(
            f"StructuredSession '{self.session_name}': {request.operation} matched {len(match)} units; "
            f"{self.buffer.size} bytes remain."
        )
        return match

    # --- State handlers ---

    def snapshot(self) -> SessionState:
        return SessionState(mode=self.mode, data=self.buffer.to_bytes(), encoding=self.encoding)

    def _handle_snapshot(self, request: SnapshotRequest) -> SessionState:
        return self.snapshot()

    def _handle_replace_state(self, request: ReplaceStateRequest) -> None:
        self._replace(request.state)

    def _handle_update_state(self, request: UpdateStateRequest) -> Any:
        new_state, reply = request.function(self.snapshot())
        if new_state is not None:
            self._replace(new_state)
        return reply

    def _replace(self, state: SessionState) -> None:
        if state.mode is not self.mode:
            raise ModeMismatchError(self.mode, state.mode, "replace_state")
        if state.encoding != self.encoding:
            raise ValueError(
                f"StructuredSession '{self.session_name}': cannot replace a {self.encoding} buffer "
                f"with a {state.encoding} state."
            )
        self.buffer = SessionBuffer(state.data)
        logger.debug(f"StructuredSession '{self.session_name}': state replaced ({self.buffer.size} bytes).")
