"""
Request-scoped cancellation.

A Context is a thread-safe token shared between the caller and an in-flight
request. Cancelling it (explicitly or when its deadline passes) wakes anything
waiting on it and runs registered callbacks, which the transport uses to
abandon a pending send and close a response body.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

import structlog

logger = structlog.get_logger()


class Cancelled(Exception):
    """The context was cancelled."""


class DeadlineExceeded(Cancelled):
    """The context deadline passed."""


class Context:
    """Cancellation token with optional deadline and parent propagation."""

    def __init__(
        self,
        parent: Context | None = None,
        *,
        timeout: float | None = None,
        cancellable: bool = True,
    ) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._cancellable = cancellable
        self._err: Cancelled | None = None
        self._cause: BaseException | None = None
        self._callbacks: list[Callable[[], None]] = []
        self._timer: threading.Timer | None = None
        self._detach: Callable[[], None] | None = None

        deadline = parent.deadline if parent is not None else None
        if timeout is not None:
            own = time.monotonic() + timeout
            deadline = own if deadline is None else min(deadline, own)
        self._deadline = deadline

        if parent is not None and parent._cancellable:
            self._detach = parent.add_done_callback(self._cancel_from_parent(parent))

        if self._deadline is not None and not self._event.is_set():
            delay = self._deadline - time.monotonic()
            if delay <= 0:
                self._cancel(DeadlineExceeded("context deadline exceeded"), None)
            else:
                self._timer = threading.Timer(delay, self._expire)
                self._timer.daemon = True
                self._timer.start()

    @classmethod
    def background(cls) -> Context:
        """Root context: never done, never cancelled."""
        return BACKGROUND

    def with_cancel(self) -> Context:
        return Context(self)

    def with_timeout(self, seconds: float) -> Context:
        return Context(self, timeout=seconds)

    @property
    def deadline(self) -> float | None:
        """Deadline on the time.monotonic() clock, if any."""
        return self._deadline

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, cause: BaseException | None = None) -> None:
        if not self._cancellable:
            raise RuntimeError("background context cannot be cancelled")
        self._cancel(Cancelled("context canceled"), cause)

    def done(self) -> bool:
        return self._event.is_set()

    def err(self) -> Cancelled | None:
        with self._lock:
            return self._err

    def cause(self) -> BaseException | None:
        with self._lock:
            return self._cause if self._cause is not None else self._err

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or timeout elapses."""
        if not self._cancellable and self._deadline is None:
            if timeout is not None:
                time.sleep(timeout)
            return False
        return self._event.wait(timeout)

    def add_done_callback(self, fn: Callable[[], None]) -> Callable[[], None]:
        """Run fn once the context is done; returns a function that unregisters it.

        If the context is already done, fn runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)

                def remove() -> None:
                    with self._lock:
                        if fn in self._callbacks:
                            self._callbacks.remove(fn)

                return remove
        fn()
        return lambda: None

    def _cancel_from_parent(self, parent: Context) -> Callable[[], None]:
        def propagate() -> None:
            err = parent.err() or Cancelled("context canceled")
            self._cancel(err, parent.cause())

        return propagate

    def _expire(self) -> None:
        self._cancel(DeadlineExceeded("context deadline exceeded"), None)

    def _cancel(self, err: Cancelled, cause: BaseException | None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._err = err
            self._cause = cause
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
            timer, self._timer = self._timer, None
            detach, self._detach = self._detach, None

        if timer is not None:
            timer.cancel()
        if detach is not None:
            detach()
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                logger.warning("context_callback_failed", error=str(exc))

    def __repr__(self) -> str:
        state = "done" if self.done() else "active"
        return f"Context({state}, deadline={self._deadline!r})"


BACKGROUND = Context(cancellable=False)
