"""An in-process publish/subscribe hub with named channels."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)

Channel = str

CHAN_NOTE_CREATED: Channel = "ChanNoteCreated"

MAX_QUEUE = 10000

_CLOSED = object()
_STOP = object()


class SubscriptionClosed(Exception):
    """Raised when reading from a subscription that has been closed."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Message:
    """An event carried through the hub."""

    data: Any = None
    channel: Channel = ""
    created_at: datetime = field(default_factory=_utc_now)
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = str(time.time_ns() % 1_000_000_000)

    def __str__(self) -> str:
        return f"Message {self.channel}"


class Subscription:
    """A subscriber's private inbox on one channel."""

    def __init__(self, channel: Channel, on_close: Callable[["Subscription"], None]) -> None:
        self.channel = channel
        self._inbox: queue.Queue = queue.Queue()
        self._on_close = on_close
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, message: Message) -> None:
        with self._lock:
            if not self._closed:
                self._inbox.put(message)

    def get(self, timeout: Optional[float] = None) -> Message:
        """Wait for the next message; raise TimeoutError or SubscriptionClosed."""
        try:
            item = self._inbox.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no message on {self.channel!r}") from None
        if item is _CLOSED:
            self._inbox.put(_CLOSED)
            raise SubscriptionClosed(self.channel)
        return item

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._inbox.put(_CLOSED)
        logger.info("Unsubscribe")
        self._on_close(self)

    def __iter__(self) -> Iterator[Message]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class LocalPubSub:
    """Fans every published message out to all subscribers of its channel."""

    def __init__(self, maxsize: int = MAX_QUEUE) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize)
        self._subscribers: dict[Channel, list[Subscription]] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="pubsub", daemon=True)
        self._worker.start()

    def publish(self, channel: Channel, message: Message) -> None:
        if self._closed:
            raise RuntimeError("pubsub is closed")
        message.channel = channel
        self._queue.put(message)
        logger.info("New event published: %s", message)

    def subscribe(self, channel: Channel) -> Subscription:
        subscription = Subscription(channel, self._unsubscribe)
        with self._lock:
            self._subscribers.setdefault(channel, []).append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.channel, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def _run(self) -> None:
        logger.info("Pubsub started")
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            logger.info("Message dequeue: %s", message)
            with self._lock:
                subscribers = list(self._subscribers.get(message.channel, ()))
            for subscription in subscribers:
                subscription._deliver(message)

    def close(self) -> None:
        """Stop dispatching once the messages already queued are delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._worker.join()

    def __enter__(self) -> "LocalPubSub":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()