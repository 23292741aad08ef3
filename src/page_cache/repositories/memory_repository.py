"""In-memory implementation of ResponseStore.

Suitable for tests and single-process deployments. Does NOT persist
across restarts and is not shared between worker processes.
"""

import threading


class InMemoryResponseStore:
    """Dict-backed response store, thread-safe via a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def health_check(self) -> bool:
        return True

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "backend": "memory",
                "total_entries": len(self._entries),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
