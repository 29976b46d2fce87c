# backend/src/honeyward/services/log_store.py
#
# Bounded local logs. One instance per process, built by the composition
# root and handed to whoever needs it.
#
# Appends come from request threads and the anomaly scanner thread, so
# every buffer is a deque(maxlen=N) behind a lock: FIFO eviction, no lost
# updates.

import threading
from collections import deque
from typing import Dict, Generic, List, TypeVar

T = TypeVar("T")

ACTIVITY = "activity"
ATTACK   = "attack"
HONEYPOT = "honeypot"

DEFAULT_CAPACITIES = {
    ACTIVITY: 100,
    ATTACK:   100,
    HONEYPOT: 200,
}


class RingBuffer(Generic[T]):
    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"Ring buffer capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items   = deque(maxlen=capacity)
        self._lock    = threading.Lock()
        self.evicted  = 0

    def append(self, item: T) -> None:
        with self._lock:
            if len(self._items) == self.capacity:
                self.evicted += 1
            self._items.append(item)

    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._items)

    def recent(self, n: int) -> List[T]:
        with self._lock:
            if n <= 0:
                return []
            return list(self._items)[-n:]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class LogStore:
    """Activity, attack and honeypot ring buffers."""

    def __init__(
        self,
        activity_capacity: int = DEFAULT_CAPACITIES[ACTIVITY],
        attack_capacity:   int = DEFAULT_CAPACITIES[ATTACK],
        honeypot_capacity: int = DEFAULT_CAPACITIES[HONEYPOT],
    ):
        self._buffers: Dict[str, RingBuffer] = {
            ACTIVITY: RingBuffer(activity_capacity),
            ATTACK:   RingBuffer(attack_capacity),
            HONEYPOT: RingBuffer(honeypot_capacity),
        }

    def buffer(self, name: str) -> RingBuffer:
        try:
            return self._buffers[name]
        except KeyError:
            raise ValueError(
                f"Unknown log '{name}', expected one of {sorted(self._buffers)}"
            ) from None

    def append(self, name: str, item) -> None:
        self.buffer(name).append(item)

    @property
    def activity(self) -> RingBuffer:
        return self._buffers[ACTIVITY]

    @property
    def attacks(self) -> RingBuffer:
        return self._buffers[ATTACK]

    @property
    def honeypot(self) -> RingBuffer:
        return self._buffers[HONEYPOT]

    def sizes(self) -> Dict[str, int]:
        return {name: len(buf) for name, buf in self._buffers.items()}
