"""
Cancellation and deadlines for remote calls.

A Context is shared by everything a single get/put does. Remote calls are
routed through ``Context.call`` so that a cancelled or expired context
returns control to the caller promptly, even while the underlying request
is still blocked in the network.
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from threading import Event, Lock
from typing import Any, Callable, TypeVar

from s3stream.errors import DeadlineExceededError, OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_CALL_THREADS = 32
_EXECUTOR: ThreadPoolExecutor | None = None
_EXECUTOR_LOCK = Lock()


def _get_executor() -> ThreadPoolExecutor:
    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(
                max_workers=_MAX_CALL_THREADS, thread_name_prefix="s3stream-call"
            )
        return _EXECUTOR


class Context:
    def __init__(
        self,
        deadline: float | None = None,
        parent: "Context | None" = None,
        cancellable: bool = True,
    ) -> None:
        self._event = Event()
        self._deadline = deadline  # time.monotonic() based
        self._parent = parent
        self._cancellable = cancellable
        self._reason: str | None = None
        if parent is not None and parent._deadline is not None:
            if self._deadline is None or parent._deadline < self._deadline:
                self._deadline = parent._deadline

    @staticmethod
    def background() -> "Context":
        """A context that is never cancelled and has no deadline."""
        return Context(cancellable=False)

    @staticmethod
    def with_timeout(seconds: float, parent: "Context | None" = None) -> "Context":
        return Context(deadline=time.monotonic() + seconds, parent=parent)

    def child(self) -> "Context":
        return Context(parent=self)

    def cancel(self, reason: str = "context cancelled") -> None:
        if not self._cancellable:
            raise ValueError("background context cannot be cancelled")
        self._reason = reason
        self._event.set()

    def can_fire(self) -> bool:
        if self._cancellable or self._deadline is not None:
            return True
        return self._parent is not None and self._parent.can_fire()

    def err(self) -> OperationCancelledError | None:
        if self._event.is_set():
            return OperationCancelledError(self._reason or "context cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError("context deadline exceeded")
        if self._parent is not None:
            return self._parent.err()
        return None

    def cancelled(self) -> bool:
        return self.err() is not None

    def check(self) -> None:
        err = self.err()
        if err is not None:
            raise err

    def _time_left(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float, poll: float = 0.05) -> None:
        """Sleep for ``seconds`` or raise as soon as the context fires."""
        end = time.monotonic() + seconds
        while True:
            self.check()
            remaining = end - time.monotonic()
            if remaining <= 0:
                return
            self._event.wait(min(poll, remaining))

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        self.check()
        if not self.can_fire():
            return fn(*args, **kwargs)
        fut: Future[T] = _get_executor().submit(fn, *args, **kwargs)
        while True:
            timeout = 0.05
            left = self._time_left()
            if left is not None:
                timeout = min(timeout, left)
            done, _ = wait([fut], timeout=timeout, return_when=FIRST_COMPLETED)
            if done:
                return fut.result()
            err = self.err()
            if err is not None:
                fut.cancel()
                logger.debug(f"Abandoning in-flight call {fn!r}: {err}")
                raise err
