"""
Deadline enforcement for blocking collaborator calls.

Certificate authority calls, wallet I/O and ledger network operations run on a
shared thread pool so the caller can stop waiting once a deadline passes. A
late result can be handed to a cleanup callback, which is how a connection
that finishes opening after its deadline still gets closed.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Callable, TypeVar

import httpx

from ledgergate.core.exceptions import OperationTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMEOUT_ERRORS = (TimeoutError, FuturesTimeoutError, httpx.TimeoutException)

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()
_max_workers = 32


def configure_executor(max_workers: int) -> None:
    """Set the pool size used for deadline-bound calls; takes effect on next use"""
    global _executor, _max_workers
    with _executor_lock:
        _max_workers = max_workers
        if _executor is not None:
            _executor.shutdown(wait=False)
            _executor = None


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=_max_workers, thread_name_prefix="ledgergate-io")
        return _executor


def _release_late_result(future: Future, on_late_result: Callable[[Any], None], operation: str) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    try:
        on_late_result(future.result())
    except Exception as e:
        logger.warning(f"Cleanup after timed out {operation} failed: {e}")


def call_with_deadline(operation: str, timeout: float | None, func: Callable[..., T], *args: Any,
                       on_late_result: Callable[[Any], None] | None = None, **kwargs: Any) -> T:
    """
    Run func under a deadline.

    Args:
        operation: Name used in the OperationTimeout raised on expiry
        timeout: Seconds to wait, or None to call func inline without a deadline
        func: Blocking callable
        on_late_result: Called with func's result if it completes after the deadline

    Returns:
        Whatever func returns

    Raises:
        OperationTimeout: The deadline passed, or func itself reported a timeout
    """
    if timeout is None:
        try:
            return func(*args, **kwargs)
        except TIMEOUT_ERRORS as e:
            raise OperationTimeout(operation, timeout) from e

    future = _get_executor().submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except TIMEOUT_ERRORS as e:
        if not future.done():
            # Still running; it may finish later
            if not future.cancel() and on_late_result is not None:
                future.add_done_callback(
                    lambda f: _release_late_result(f, on_late_result, operation))
            logger.warning(f"{operation} exceeded deadline of {timeout}s")
        raise OperationTimeout(operation, timeout) from e
