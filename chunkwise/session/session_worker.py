# file: chunkwise/chunkwise/session/session_worker.py
import asyncio
import concurrent.futures
import logging
import threading
from typing import Optional, Tuple

from chunkwise.config import get_config
from chunkwise.session.dispatcher import SessionRequestDispatcher
from chunkwise.session.errors import ChunkwiseError, SessionStoppedError
from chunkwise.session.requests import BaseRequest, StopRequest
from chunkwise.session.thread_pool_manager import SessionThreadPoolManager

logger = logging.getLogger(__name__)

QueueItem = Tuple[BaseRequest, concurrent.futures.Future]


class SessionWorker:
    """
    Serves one session's requests, one at a time, in arrival order.

    The worker runs in a dedicated thread obtained from the
    SessionThreadPoolManager, with its own asyncio event loop. Callers in any
    thread hand requests over with ``submit``; each request is paired with a
    ``concurrent.futures.Future`` that carries its reply or its exception
    back to the caller.
    """

    def __init__(self, session_name: str, dispatcher: SessionRequestDispatcher):
        self.session_name = session_name
        self.dispatcher = dispatcher

        configured_workers = get_config().max_workers
        self._thread_pool_manager: SessionThreadPoolManager = SessionThreadPoolManager(max_workers=configured_workers)
        if configured_workers is not None and configured_workers != self._thread_pool_manager.max_workers:
            # The pool is sized once, by the first session started in the process.
            logger.warning(
                f"SessionWorker '{session_name}': max_workers is configured as {configured_workers}, but the "
                f"session thread pool already runs with {self._thread_pool_manager.max_workers} threads. "
                f"The new value takes effect only in a new process."
            )
        self._thread_future: Optional[concurrent.futures.Future] = None
        self._worker_loop: Optional[asyncio.AbstractEventLoop] = None
        self._request_queue: Optional["asyncio.Queue[QueueItem]"] = None

        self._ready = threading.Event()
        self._intake_lock = threading.Lock()
        self._accepting: bool = False
        self._stop_initiated: bool = False

        logger.debug(f"SessionWorker initialized for session '{self.session_name}'.")

    def get_worker_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """
        Returns a reference to the worker's asyncio event loop.
        Returns None if the loop is not running or not yet initialized.
        """
        if self._worker_loop and self._worker_loop.is_running():
            return self._worker_loop
        return None

    def start(self, ready_timeout: Optional[float] = 5.0) -> None:
        """
        Starts the worker thread and waits until it accepts requests.

        Raises:
            RuntimeError: If no pool thread picked the worker up within
                ``ready_timeout`` seconds.
        """
        if self.is_alive():
            logger.warning(f"SessionWorker '{self.session_name}': Start called, but worker is already active.")
            return

        logger.info(f"SessionWorker '{self.session_name}': Starting...")
        if not self._thread_pool_manager.has_capacity():
            logger.warning(f"SessionWorker '{self.session_name}': all session threads are busy; start will wait for one to free up.")
        self._thread_pool_manager.track_worker(self)
        self._thread_future = self._thread_pool_manager.submit_task(self._run_managed_thread_loop)

        if not self._ready.wait(timeout=ready_timeout):
            self._thread_future.cancel()
            raise RuntimeError(
                f"SessionWorker '{self.session_name}': worker did not start within {ready_timeout}s. "
                f"All {self._thread_pool_manager.max_workers} session threads may be in use."
            )
        if not self._accepting:
            raise RuntimeError(f"SessionWorker '{self.session_name}': worker thread exited during startup.")
        logger.info(f"SessionWorker '{self.session_name}': Accepting requests.")

    def _run_managed_thread_loop(self) -> None:
        thread_name = threading.current_thread().name
        logger.debug(f"SessionWorker '{self.session_name}': Thread '{thread_name}' started. Setting up asyncio event loop.")

        try:
            self._worker_loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._worker_loop)
            self._request_queue = asyncio.Queue()
            self._worker_loop.run_until_complete(self.async_run())
        except Exception as e: # pragma: no cover
            logger.error(f"SessionWorker '{self.session_name}': Unhandled exception in thread '{thread_name}': {e}", exc_info=True)
        finally:
            self._close_intake()
            if self._worker_loop:
                try:
                    self._worker_loop.run_until_complete(self._fail_pending_requests())
                    self._worker_loop.run_until_complete(self._worker_loop.shutdown_asyncgens())
                except Exception as e_shutdown: # pragma: no cover
                    logger.error(f"SessionWorker '{self.session_name}': Error during worker loop shutdown: {e_shutdown}", exc_info=True)
                finally:
                    self._worker_loop.close()
                    self._worker_loop = None
            self._thread_pool_manager.untrack_worker(self)
            self._ready.set()
            logger.info(f"SessionWorker '{self.session_name}': Thread '{thread_name}' finished.")

    async def async_run(self) -> None:
        with self._intake_lock:
            self._accepting = True
        self._ready.set()

        while True:
            request, future = await self._request_queue.get()
            if not future.set_running_or_notify_cancel():
                logger.debug(f"SessionWorker '{self.session_name}': {request.operation} was cancelled before it ran; skipping.")
                continue

            if isinstance(request, StopRequest):
                self._close_intake()
                future.set_result(None)
                logger.debug(f"SessionWorker '{self.session_name}': StopRequest reached; leaving request loop.")
                break

            try:
                result = self.dispatcher.dispatch(request)
            except ChunkwiseError as e:
                logger.debug(f"SessionWorker '{self.session_name}': {request.operation} failed: {e}")
                future.set_exception(e)
            except Exception as e:
                logger.error(f"SessionWorker '{self.session_name}': Unexpected error handling {request.operation}: {e}", exc_info=True)
                future.set_exception(e)
            else:
                future.set_result(result)

    async def _fail_pending_requests(self) -> None:
        # One loop iteration runs any hand-over callbacks scheduled before intake closed.
        await asyncio.sleep(0)
        if self._request_queue is None:
            return
        while not self._request_queue.empty():
            request, future = self._request_queue.get_nowait()
            if future.set_running_or_notify_cancel():
                future.set_exception(SessionStoppedError(self.session_name, f"{request.operation} arrived after stop"))

    def _close_intake(self) -> None:
        with self._intake_lock:
            self._accepting = False

    def submit(self, request: BaseRequest) -> concurrent.futures.Future:
        """
        Hands ``request`` to the worker; safe to call from any thread.

        Raises:
            SessionStoppedError: If the worker no longer accepts requests.
        """
        future: concurrent.futures.Future = concurrent.futures.Future()
        with self._intake_lock:
            loop = self.get_worker_loop()
            if not self._accepting or loop is None:
                raise SessionStoppedError(self.session_name, f"cannot accept {request.operation}")
            try:
                loop.call_soon_threadsafe(self._request_queue.put_nowait, (request, future))
            except RuntimeError as e: # pragma: no cover
                raise SessionStoppedError(self.session_name, str(e)) from e
        return future

    def stop(self, timeout: Optional[float] = 10.0) -> bool:
        """
        Serves every request submitted so far, then ends the worker thread.

        Returns:
            True if the thread finished within ``timeout``.
        """
        logger.info(f"SessionWorker '{self.session_name}': Stop requested (timeout: {timeout}s).")
        if not self.request_stop():
            logger.warning(f"SessionWorker '{self.session_name}': Stop called, but stop is already in progress or done.")
        return self._wait_for_thread(timeout)

    def request_stop(self) -> bool:
        """
        Queues the stop behind every request submitted so far, without waiting.

        Returns:
            False if a stop had already been requested.
        """
        if self._stop_initiated:
            return False
        self._stop_initiated = True
        try:
            self.submit(StopRequest())
        except SessionStoppedError:
            logger.debug(f"SessionWorker '{self.session_name}': worker already closed its intake.")
        return True

    def _wait_for_thread(self, timeout: Optional[float]) -> bool:
        if not self._thread_future:
            return True
        try:
            self._thread_future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(f"SessionWorker '{self.session_name}': Timeout waiting for worker thread to complete. A long scan may still be running.")
            return False
        except concurrent.futures.CancelledError:
            logger.debug(f"SessionWorker '{self.session_name}': worker thread was cancelled before it started.")
        logger.info(f"SessionWorker '{self.session_name}': Worker thread completed.")
        return True

    def is_alive(self) -> bool:
        """Checks if the worker's thread is currently active."""
        return self._thread_future is not None and not self._thread_future.done()
