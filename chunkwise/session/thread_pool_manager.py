# file: chunkwise/chunkwise/session/thread_pool_manager.py
import concurrent.futures
import inspect
import logging
import threading
import weakref
from typing import Any, Callable, Optional

from chunkwise.utils.singleton import SingletonMeta

logger = logging.getLogger(__name__)

_tracked_workers: "weakref.WeakSet" = weakref.WeakSet()
_exit_hook_lock = threading.Lock()
_exit_hook_registered = False


def _stop_tracked_workers() -> None:
    """Asks every worker still running at interpreter exit to stop, so the pool threads can be joined."""
    workers = list(_tracked_workers)
    if workers:
        logger.warning(f"Interpreter exiting with {len(workers)} session worker(s) still running; stopping them.")
    for worker in workers:
        worker.request_stop()


def _register_exit_hook() -> None:
    global _exit_hook_registered
    with _exit_hook_lock:
        if _exit_hook_registered:
            return
        # Threading exit hooks run last-registered first, so this one runs
        # before the hook concurrent.futures uses to join the pool threads.
        # atexit callbacks would only run after that join.
        threading._register_atexit(_stop_tracked_workers)
        _exit_hook_registered = True


class SessionThreadPoolManager(metaclass=SingletonMeta):
    """
    Owns the thread pool that session workers run on.

    Each running session holds one pool thread for its whole lifetime, so
    ``max_workers`` bounds how many sessions can run at once.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self._thread_pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="SessionThreadPool"
        )
        self._is_shutdown = False
        self._lock = threading.Lock()
        self._active_tasks = 0
        _register_exit_hook()
        logger.info(f"SessionThreadPoolManager initialized with max_workers={max_workers}.")

    @property
    def max_workers(self) -> int:
        return self._thread_pool._max_workers

    @property
    def active_tasks(self) -> int:
        return self._active_tasks

    def has_capacity(self) -> bool:
        with self._lock:
            return self._active_tasks < self.max_workers

    def track_worker(self, worker: Any) -> None:
        """Stops ``worker`` at interpreter exit unless it has finished by then."""
        _tracked_workers.add(worker)

    def untrack_worker(self, worker: Any) -> None:
        _tracked_workers.discard(worker)

    def submit_task(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> concurrent.futures.Future:
        """Runs ``func`` on a pool thread; the returned future completes when it returns."""
        if self._is_shutdown:
            raise RuntimeError("SessionThreadPoolManager is shutdown. Cannot submit new tasks.")

        def _tracked():
            try:
                return func(*args, **kwargs)
            finally:
                with self._lock:
                    self._active_tasks -= 1

        with self._lock:
            self._active_tasks += 1
        try:
            future = self._thread_pool.submit(_tracked)
        except RuntimeError:
            with self._lock:
                self._active_tasks -= 1
            raise
        logger.debug(f"SessionThreadPoolManager: submitted task '{getattr(func, '__name__', func)}'.")
        return future

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        if self._is_shutdown:
            logger.debug("SessionThreadPoolManager: shutdown already called.")
            return
        self._is_shutdown = True
        logger.info(f"SessionThreadPoolManager: shutting down thread pool (wait={wait}, cancel_futures={cancel_futures}).")
        if "cancel_futures" in inspect.signature(self._thread_pool.shutdown).parameters:
            self._thread_pool.shutdown(wait=wait, cancel_futures=cancel_futures)
        else: # pragma: no cover
            self._thread_pool.shutdown(wait=wait)

    def __del__(self):
        if not getattr(self, "_is_shutdown", True): # pragma: no cover
            try:
                self.shutdown(wait=False)
            except Exception:
                pass
