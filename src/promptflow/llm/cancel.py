from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from .errors import ErrorCode, LLMError


class CancelToken:
    """Thread-safe cancellation handle shared between a caller and one request.

    The UI thread calls ``cancel()``; the worker observes it while sleeping
    between attempts and through callbacks registered for the in-flight attempt.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self.reason: Optional[str] = None
        self.code: ErrorCode = ErrorCode.ABORTED

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(
        self, reason: str = "Request aborted", *, code: ErrorCode = ErrorCode.ABORTED
    ) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self.code = code
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for cb in callbacks:
            cb()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancel; returns a function that unregisters it.

        If the token is already cancelled the callback runs immediately.
        """

        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister

        callback()
        return lambda: None

    def wait(self, timeout_s: float) -> bool:
        """Sleep up to ``timeout_s``; True when woken by cancellation."""
        return self._event.wait(timeout=max(0.0, timeout_s))

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise LLMError(self.reason or "Request aborted", code=self.code)


@contextmanager
def abort_scope(
    upstream: Optional[CancelToken], timeout_s: Optional[float]
) -> Iterator[Optional[CancelToken]]:
    """One signal for a whole call: fires on ``upstream`` cancel (ABORTED) or
    when ``timeout_s`` elapses (TIMEOUT), whichever comes first.

    Yields None when there is neither a token nor a timeout.
    """

    if upstream is None and not timeout_s:
        yield None
        return

    signal = CancelToken()
    timer: Optional[threading.Timer] = None
    unregister: Optional[Callable[[], None]] = None

    if timeout_s and timeout_s > 0:
        timer = threading.Timer(
            timeout_s,
            signal.cancel,
            kwargs={"reason": "Request timed out", "code": ErrorCode.TIMEOUT},
        )
        timer.daemon = True
        timer.start()

    if upstream is not None:
        unregister = upstream.register(
            lambda: signal.cancel(upstream.reason or "Request aborted", code=upstream.code)
        )

    try:
        yield signal
    finally:
        if timer is not None:
            timer.cancel()
        if unregister is not None:
            unregister()
