"""Per-storage-key write locks shared by short-lived stores.

Stores are built per request, so they cannot own the lock that serialises
writes to their key. Instead every store bound to a key takes the same
`KeyLock` from a weak-valued registry: the entry lives exactly as long as some
store still holds it, and the registry never outgrows the set of keys in use.
"""

import threading
import weakref


class KeyLock:
    """Non-reentrant mutex for one storage key, usable as a context manager."""

    __slots__ = ("key", "_lock", "__weakref__")

    def __init__(self, key: str):
        self.key = key
        self._lock = threading.Lock()

    def __enter__(self) -> "KeyLock":
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


_key_locks: "weakref.WeakValueDictionary[str, KeyLock]" = weakref.WeakValueDictionary()
_registry_lock = threading.Lock()


def lock_for(key: str) -> KeyLock:
    """Get the lock for a storage key, creating it if no store holds one."""
    with _registry_lock:
        lock = _key_locks.get(key)
        if lock is None:
            lock = KeyLock(key)
            _key_locks[key] = lock
        return lock


def active_lock_count() -> int:
    """Number of keys currently held by at least one store."""
    with _registry_lock:
        return len(_key_locks)


def reset_locks() -> None:
    """Forget all registered locks (for testing)."""
    with _registry_lock:
        _key_locks.clear()
