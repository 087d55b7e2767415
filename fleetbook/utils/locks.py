from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable, Iterator


class KeyedLock:
    """
    One mutex per key, created on first use.

    Serializes check-then-act sequences that touch the same key (a vehicle id)
    while letting unrelated keys proceed in parallel. Process-local only.
    """

    def __init__(self):
        self._guard = Lock()
        self._locks: Dict[Hashable, Lock] = {}

    def _lock_for(self, key: Hashable) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
