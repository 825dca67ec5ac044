"""Cancellable handles for real-time listeners."""

import logging
import queue
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_CLOSED = object()


class SubscriptionClosed(Exception):
    """Raised by ``Subscription.next`` once the subscription is cancelled and drained."""


class Subscription:
    """A live listener registration.

    Events go to ``callback`` when one is given; otherwise they are queued for
    ``next()``. The caller owns the handle and must call ``cancel()`` (or the
    handle itself) to stop it; nothing cancels it automatically.

    If ``callback`` raises, the error is kept on ``error`` and the subscription
    is cancelled. Reconnecting after transport failures is left to the SDK.
    """

    def __init__(self, callback: Optional[Callable[[Any], None]] = None, name: str = 'subscription'):
        self.name = name
        self._callback = callback
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._events: queue.Queue = queue.Queue()
        self._lock = threading.RLock()
        self._cancelled = False
        self.error: Optional[BaseException] = None

    def attach(self, unsubscribe: Callable[[], None]):
        """Bind the SDK's unsubscribe function. Cancels right away if already cancelled."""
        with self._lock:
            if not self._cancelled:
                self._unsubscribe = unsubscribe
                return
        unsubscribe()

    @property
    def active(self) -> bool:
        return not self._cancelled

    def deliver(self, event: Any):
        """Hand one event to the caller. Called from listener threads."""
        unsubscribe = None
        with self._lock:
            if self._cancelled:
                return
            if self._callback is None:
                self._events.put(event)
                return
            try:
                self._callback(event)
            except Exception as e:
                logger.exception(f"Callback for {self.name} raised, cancelling")
                self.error = e
                unsubscribe = self._close()
        if unsubscribe is not None:
            unsubscribe()

    def cancel(self):
        """Stop receiving events. Safe to call more than once."""
        with self._lock:
            unsubscribe = self._close()
        if unsubscribe is not None:
            unsubscribe()

    __call__ = cancel

    def _close(self) -> Optional[Callable[[], None]]:
        if self._cancelled:
            return None
        self._cancelled = True
        self._events.put(_CLOSED)
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        return unsubscribe

    def next(self, timeout: Optional[float] = None) -> Any:
        """Block until the next event arrives."""
        try:
            event = self._events.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"No event on {self.name} within {timeout}s")
        if event is _CLOSED:
            # Keep the marker so later calls fail the same way
            self._events.put(_CLOSED)
            raise SubscriptionClosed(f"{self.name} is cancelled") from self.error
        return event

    def __iter__(self):
        while True:
            try:
                yield self.next()
            except SubscriptionClosed:
                return

    def __repr__(self):
        state = 'active' if self.active else 'cancelled'
        return f"<Subscription {self.name} {state}>"
