import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def publish(self, snapshot: Any) -> None:
        ...


class ObserverList:
    """Synchronous subscriber list.

    Every subscriber receives the full snapshot. A subscriber that raises is
    logged and skipped; the remaining subscribers still run and the caller
    never sees the failure.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscribers: List[Callable[[Any], None]] = []

    def subscribe(self, handler: Callable[[Any], None]) -> None:
        with self._lock:
            self._subscribers.append(handler)

    def unsubscribe(self, handler: Callable[[Any], None]) -> None:
        with self._lock:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

    def __len__(self) -> int:
        return len(self._subscribers)

    def publish(self, snapshot: Any) -> None:
        with self._lock:
            handlers = list(self._subscribers)
        for handler in handlers:
            try:
                handler(snapshot)
            except Exception:
                logger.exception("Subscriber %r failed while handling %s", handler, type(snapshot).__name__)


class FanoutNotifier:
    """Delivers the same snapshot object to several sinks."""

    def __init__(self, *sinks: Notifier) -> None:
        self._sinks = list(sinks)

    def add(self, sink: Notifier) -> None:
        self._sinks.append(sink)

    def publish(self, snapshot: Any) -> None:
        for sink in self._sinks:
            try:
                sink.publish(snapshot)
            except Exception:
                logger.exception("Notification sink %r failed", sink)


class RecentEvents:
    """Bounded log of published snapshots, newest last."""

    def __init__(self, maxlen: Optional[int] = 100) -> None:
        self._events: Deque[Any] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def publish(self, snapshot: Any) -> None:
        with self._lock:
            self._events.append(snapshot)

    def snapshot(self, limit: Optional[int] = None) -> List[Any]:
        with self._lock:
            events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
