import contextvars
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

logger = logging.getLogger(__name__)


class Worker:
    """Runs one job on a dedicated background thread.

    The job observes cancellation cooperatively through ``cancelled``; the
    worker never interrupts it. The caller's context variables are copied
    into the job so log records keep their trace id.
    """

    def __init__(self, name: str):
        self.name = name
        self._cancelled = threading.Event()
        self._future: Future | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self, job: Callable[..., Any], *args: Any) -> None:
        if self._future is not None:
            raise RuntimeError(f"Worker {self.name} was already started")
        context = contextvars.copy_context()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self.name)
        try:
            self._future = executor.submit(context.run, job, *args)
        finally:
            # the submitted job keeps running; the thread exits once it returns
            executor.shutdown(wait=False)
        logger.debug(f"Worker {self.name} started")

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the job to finish. Returns False on timeout."""
        if self._future is None:
            return True
        try:
            self._future.exception(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True
