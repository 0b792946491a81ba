from __future__ import annotations

import threading

from fs_analyzer.models.filesystem import FilesystemRecord


class RecordCache:
    """Completed records keyed by the exact requested path.

    No expiry: an entry lives until ``invalidate`` drops it.
    """

    def __init__(self) -> None:
        self._records: dict[str, FilesystemRecord] = {}
        self._lock = threading.Lock()
        self._path_locks: dict[str, threading.Lock] = {}

    def get(self, path: str) -> FilesystemRecord | None:
        return self._records.get(path)

    def put(self, path: str, record: FilesystemRecord) -> None:
        with self._lock:
            self._records[path] = record

    def invalidate(self, path: str | None = None) -> None:
        with self._lock:
            if path is None:
                self._records.clear()
            else:
                self._records.pop(path, None)

    def lock_for(self, path: str) -> threading.Lock:
        """Per-path writer lock; holders probe and store that key only."""
        with self._lock:
            return self._path_locks.setdefault(path, threading.Lock())

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __len__(self) -> int:
        return len(self._records)
