"""Deduplication cache (core domain)."""

from __future__ import annotations

import threading


class DedupCache:
    """In-memory map of message identities that were delivered.

    Entries are marked before delivery and rolled back when delivery fails,
    so a slow send cannot be repeated by an overlapping enumeration while a
    failed one stays eligible for the next cycle. Nothing is ever evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._delivered: dict[str, bool] = {}

    def mark_if_absent(self, entry_id: str) -> bool:
        """Mark ``entry_id`` delivered; False if it already was."""

        with self._lock:
            if self._delivered.get(entry_id):
                return False
            self._delivered[entry_id] = True
            return True

    def rollback(self, entry_id: str) -> None:
        with self._lock:
            self._delivered[entry_id] = False

    def is_delivered(self, entry_id: str) -> bool:
        with self._lock:
            return self._delivered.get(entry_id, False)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for delivered in self._delivered.values() if delivered)
