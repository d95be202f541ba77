"""
store.py - In-memory world state

A dict-backed StateStore for demos and tests. Keys are scanned in plain
lexicographic order, which is the order a ledger world state returns them.
Each cursor is a snapshot taken when the scan opens; later writes are not
visible to it.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence

from .core import StateEntry, LedgerError
from .keys import encode_partial_key

logger = logging.getLogger(__name__)


class InMemoryCursor:
    """Snapshot cursor. Reports its release back to the owning store."""

    def __init__(self, store: InMemoryStateStore, entries: List[StateEntry]):
        self._store = store
        self._entries = entries
        self._position = 0
        self.closed = False

    def has_next(self) -> bool:
        return not self.closed and self._position < len(self._entries)

    def next(self) -> StateEntry:
        if self.closed:
            raise LedgerError("Cursor is closed")
        if self._position >= len(self._entries):
            raise LedgerError("Cursor is exhausted")
        entry = self._entries[self._position]
        self._position += 1
        return entry

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._store._release(self)


class InMemoryStateStore:
    """
    StateStore over a plain dict.

    Attributes:
        open_cursors: Number of cursors handed out and not yet closed.
        writes: Number of put() calls served.

    Example:
        store = InMemoryStateStore()
        store.put(key, b'{"...": 1}')
        cursor = store.scan_by_partial_key("org.bondnet.commercialbondlist", ["MagnetoCorp"])
    """

    def __init__(self, data: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(data or {})
        self.open_cursors = 0
        self.writes = 0

    def put(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value must be bytes, got {type(value).__name__}")
        self._data[key] = bytes(value)
        self.writes += 1

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def scan_by_partial_key(self, namespace: str, prefix_parts: Sequence[str]) -> InMemoryCursor:
        prefix = encode_partial_key(namespace, prefix_parts)
        entries = [
            StateEntry(key, self._data[key])
            for key in sorted(self._data)
            if key.startswith(prefix)
        ]
        self.open_cursors += 1
        logger.debug("Cursor over %d entries (%d open)", len(entries), self.open_cursors)
        return InMemoryCursor(self, entries)

    def _release(self, cursor: InMemoryCursor) -> None:
        self.open_cursors -= 1

    def keys(self) -> List[str]:
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f"InMemoryStateStore({len(self._data)} keys, {self.open_cursors} open cursors)"
