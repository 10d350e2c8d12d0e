"""
Single-flight execution keyed by arbitrary hashable values.

At most one call per key is in flight. Callers arriving while a call for the
same key is running block until it finishes and receive the same result or
the same exception. Once the call completes the key is released, so a later
caller starts a fresh call.
"""

import threading
import logging
from typing import Any, Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Call:
    """In-flight call shared by the leader and its waiters"""

    def __init__(self):
        self.done = threading.Event()
        self.result: Any = None
        self.error: BaseException | None = None


class SingleFlight:
    """Deduplicate concurrent calls that share a key"""

    def __init__(self, name: str = "single-flight"):
        self.name = name
        self._lock = threading.Lock()
        self._calls: dict[Hashable, _Call] = {}

    def do(self, key: Hashable, func: Callable[[], T]) -> tuple[T, bool]:
        """
        Run func for key unless a call for key is already running.

        Args:
            key: Deduplication key
            func: Zero-argument callable executed by the first caller only

        Returns:
            (result, shared) where shared is True for callers that waited on
            another caller's execution instead of running func themselves

        Raises:
            Whatever the leader's func raised
        """
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call

        if not leader:
            logger.debug(f"{self.name}: waiting on in-flight call for {key!r}")
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result, True

        try:
            call.result = func()
        except BaseException as e:
            call.error = e
            raise
        finally:
            with self._lock:
                del self._calls[key]
            call.done.set()
        return call.result, False

    def in_flight(self, key: Hashable) -> bool:
        """Check whether a call for key is currently running"""
        with self._lock:
            return key in self._calls
