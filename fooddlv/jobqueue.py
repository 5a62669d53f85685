"""A bounded in-memory queue of named messages."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Optional

MAX_QUEUE = 10000


@dataclass
class QueueMessage:
    name: str
    data: Any = None


class JobQueue:
    """Emitting never blocks; a full queue is drained before late messages land."""

    def __init__(self, maxsize: int = MAX_QUEUE) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize)

    def emit(self, message: QueueMessage) -> None:
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            threading.Thread(target=self._queue.put, args=(message,), daemon=True).start()

    def get(self, timeout: Optional[float] = None) -> QueueMessage:
        """Wait for the next message; raise TimeoutError if none arrives."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("no message in queue") from None