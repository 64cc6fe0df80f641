"""Memoising lookup with per-key locking.

Note
----
This is an internal API not covered by versioning policy.
"""

from __future__ import annotations

import logging
import threading
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Callable, Hashable

logger = logging.getLogger(__name__)

K = t.TypeVar("K", bound="Hashable")
V = t.TypeVar("V")


class KeyedCache(t.Generic[K, V]):
    """Compute each key's value at most once, even under concurrent access.

    The lock guarding the table is held only to find or create the lock for a
    single key, so computations for different keys run in parallel.

    Examples
    --------
    >>> calls = []
    >>> cache = KeyedCache()
    >>> cache.get_or_compute("ls", lambda: calls.append("ls") or "/bin/ls")
    '/bin/ls'
    >>> cache.get_or_compute("ls", lambda: calls.append("ls") or "/usr/bin/ls")
    '/bin/ls'
    >>> calls
    ['ls']
    >>> "ls" in cache, len(cache)
    (True, 1)
    """

    def __init__(self) -> None:
        self._values: dict[K, V] = {}
        self._key_locks: dict[K, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def _lock_for(self, key: K) -> threading.Lock:
        with self._table_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for *key*, calling *compute* on first use.

        Nothing is stored when *compute* raises; the next caller retries.
        """
        try:
            return self._values[key]
        except KeyError:
            pass

        with self._lock_for(key):
            if key in self._values:
                return self._values[key]
            logger.debug("computing cache entry for %r", key)
            value = compute()
            self._values[key] = value
            return value

    def forget(self, key: K) -> None:
        """Drop the value for *key*, if present.

        The key's lock is kept, so a computation already running for *key*
        still excludes any caller that arrives after this.
        """
        with self._table_lock:
            self._values.pop(key, None)

    def clear(self) -> None:
        with self._table_lock:
            self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
