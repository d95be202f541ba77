"""
test_store.py - Unit tests for the in-memory world state
"""

import pytest

from bondledger import (
    InMemoryStateStore,
    StateStore,
    StateCursor,
    LedgerError,
    encode_key,
)

NS = "org.bondnet.commercialbondlist"


class TestInMemoryStateStore:

    def test_satisfies_protocol(self):
        store = InMemoryStateStore()
        assert isinstance(store, StateStore)
        assert isinstance(store.scan_by_partial_key(NS, []), StateCursor)

    def test_put_get(self):
        store = InMemoryStateStore()
        store.put("k", b"v")
        assert store.get("k") == b"v"
        assert store.get("missing") is None

    def test_put_requires_bytes(self):
        with pytest.raises(TypeError):
            InMemoryStateStore().put("k", "v")

    def test_scan_lexicographic(self):
        store = InMemoryStateStore()
        for number in ["3", "1", "2"]:
            store.put(encode_key(NS, ["Acme", number]), number.encode())
        cursor = store.scan_by_partial_key(NS, ["Acme"])
        values = []
        while cursor.has_next():
            values.append(cursor.next().value)
        cursor.close()
        assert values == [b"1", b"2", b"3"]

    def test_scan_is_snapshot(self):
        store = InMemoryStateStore()
        store.put(encode_key(NS, ["Acme", "1"]), b"1")
        cursor = store.scan_by_partial_key(NS, ["Acme"])
        store.put(encode_key(NS, ["Acme", "2"]), b"2")
        cursor.next()
        assert not cursor.has_next()

    def test_open_cursor_count(self):
        store = InMemoryStateStore()
        a = store.scan_by_partial_key(NS, [])
        b = store.scan_by_partial_key(NS, [])
        assert store.open_cursors == 2
        a.close()
        a.close()
        assert store.open_cursors == 1
        b.close()
        assert store.open_cursors == 0

    def test_next_after_close(self):
        store = InMemoryStateStore({encode_key(NS, ["a"]): b"x"})
        cursor = store.scan_by_partial_key(NS, [])
        cursor.close()
        assert not cursor.has_next()
        with pytest.raises(LedgerError, match="closed"):
            cursor.next()

    def test_next_when_exhausted(self):
        cursor = InMemoryStateStore().scan_by_partial_key(NS, [])
        with pytest.raises(LedgerError, match="exhausted"):
            cursor.next()

    def test_initial_data_and_len(self):
        store = InMemoryStateStore({"b": b"2", "a": b"1"})
        assert len(store) == 2
        assert store.keys() == ["a", "b"]
