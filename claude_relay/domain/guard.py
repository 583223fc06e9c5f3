"""Single-flight guard — at most one concurrent run per message id."""

import threading
from typing import Hashable, Set


class SingleFlightGuard:
    """Tracks message ids currently being handled.

    Owned by one pipeline instance. Operations are atomic under a lock that
    is only held for the set mutation itself, never across an await.
    """

    def __init__(self):
        self._in_flight: Set[Hashable] = set()
        self._lock = threading.Lock()

    def try_acquire(self, message_id: Hashable) -> bool:
        """Claim ``message_id``. Returns False, changing nothing, if already held."""
        with self._lock:
            if message_id in self._in_flight:
                return False
            self._in_flight.add(message_id)
            return True

    def release(self, message_id: Hashable) -> None:
        with self._lock:
            self._in_flight.discard(message_id)

    def __contains__(self, message_id: Hashable) -> bool:
        with self._lock:
            return message_id in self._in_flight

    def __len__(self) -> int:
        with self._lock:
            return len(self._in_flight)
