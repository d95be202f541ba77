"""
query.py - Partial-key range queries over a state list namespace

The backing store hands out external cursors (has_next / next / close). A
cursor left open leaks store resources, so every cursor here is owned by a
RangeScan context manager and released on normal completion, on error, and
on early return.

    with scan_by_prefix(store, BOND_LIST_NAME, ["MagnetoCorp"]) as scan:
        for entry in scan:
            ...

RangeQuery adds record decoding on top of a scan, with one policy flag that
decides whether an undecodable entry is skipped (logged) or fatal.
"""
from __future__ import annotations
from datetime import date, datetime
import logging
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from .core import (
    StateStore, StateCursor, StateEntry, ScanPolicy,
    LedgerError, NotFound, DeserializationError, InvalidInput,
    DEFAULT_DATE_FORMAT,
    store_errors,
)
from .keys import encode_partial_key
from .serialization import RecordCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")

Predicate = Callable[[Any], bool]


# =============================================================================
# RAW SCAN
# =============================================================================

class RangeScan:
    """
    Scoped owner of one backing-store cursor.

    Entries come out in the store's native key order. The scan is forward
    only and cannot be restarted; open a new RangeScan to read again.
    """

    def __init__(self, store: StateStore, namespace: str, prefix_parts: Sequence[str] = ()):
        self.store = store
        self.namespace = namespace
        self.prefix_parts = tuple(prefix_parts)
        # Validate the prefix before any cursor exists
        encode_partial_key(namespace, self.prefix_parts)
        self._cursor: Optional[StateCursor] = None
        self._closed = False

    @property
    def label(self) -> str:
        return f"{self.namespace}[{':'.join(self.prefix_parts)}*]"

    def __enter__(self) -> RangeScan:
        if self._cursor is not None or self._closed:
            raise LedgerError(f"Scan {self.label} cannot be reopened")
        with store_errors("scan", self.label):
            self._cursor = self.store.scan_by_partial_key(self.namespace, list(self.prefix_parts))
        logger.debug("Opened cursor for %s", self.label)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[StateEntry]:
        if self._cursor is None:
            raise LedgerError(f"Scan {self.label} is not open")
        cursor = self._cursor
        while not self._closed:
            with store_errors("scan", self.label):
                if not cursor.has_next():
                    return
                entry = cursor.next()
            yield entry

    def close(self) -> None:
        """Release the cursor. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._cursor is not None:
            with store_errors("close", self.label):
                self._cursor.close()
            logger.debug("Closed cursor for %s", self.label)

    @property
    def closed(self) -> bool:
        return self._closed


def scan_by_prefix(store: StateStore, namespace: str, prefix_parts: Sequence[str] = ()) -> RangeScan:
    """Return an unopened scan over every key in namespace starting with prefix_parts."""
    return RangeScan(store, namespace, prefix_parts)


# =============================================================================
# DECODED QUERIES
# =============================================================================

class RangeQuery(Generic[T]):
    """
    Range queries that decode entries as records of one type.

    Attributes:
        policy: ScanPolicy; strict=False logs and skips malformed entries,
                strict=True raises DeserializationError on the first one.
    """

    def __init__(
        self,
        store: StateStore,
        namespace: str,
        record_class: Type[T],
        codec: Optional[RecordCodec] = None,
        policy: Optional[ScanPolicy] = None,
    ):
        self.store = store
        self.namespace = namespace
        self.record_class = record_class
        self.codec = codec or RecordCodec(record_class)
        self.policy = policy or ScanPolicy()

    def scan(self, prefix_parts: Sequence[str] = ()) -> RangeScan:
        return scan_by_prefix(self.store, self.namespace, prefix_parts)

    def _malformed(self, entry: StateEntry, exc: DeserializationError) -> None:
        if self.policy.strict:
            raise DeserializationError(f"Malformed entry at {entry.key!r}: {exc}") from exc
        logger.warning("Skipping malformed entry at %r: %s", entry.key, exc)

    def _decode(self, entry: StateEntry) -> Optional[T]:
        try:
            return self.codec.deserialize(entry.value, self.record_class)
        except DeserializationError as exc:
            self._malformed(entry, exc)
            return None

    def list_records(self, prefix_parts: Sequence[str] = ()) -> List[Tuple[str, T]]:
        """Return (key, record) for every decodable entry under the prefix, in key order."""
        results: List[Tuple[str, T]] = []
        with self.scan(prefix_parts) as scan:
            for entry in scan:
                record = self._decode(entry)
                if record is not None:
                    results.append((entry.key, record))
        return results

    def find_first_matching(self, prefix_parts: Sequence[str], predicate: Predicate) -> bytes:
        """
        Return the raw bytes of the first entry whose record satisfies predicate.

        The cursor is released as soon as a match is found. A predicate may
        raise DeserializationError for a record it cannot interpret; that
        entry is then treated like any other malformed entry.

        Raises:
            NotFound: If the scan completes without a match
        """
        with self.scan(prefix_parts) as scan:
            for entry in scan:
                record = self._decode(entry)
                if record is None:
                    continue
                try:
                    matched = predicate(record)
                except DeserializationError as exc:
                    self._malformed(entry, exc)
                    continue
                if matched:
                    return entry.value
            label = scan.label
        raise NotFound(f"No entry under {label} matches")


# =============================================================================
# PREDICATES
# =============================================================================

def parse_date(value: str, date_format: str = DEFAULT_DATE_FORMAT) -> date:
    return datetime.strptime(value, date_format).date()


def same_maturity_month(
    target: str,
    date_format: str = DEFAULT_DATE_FORMAT,
    field: str = 'maturity_date_time',
) -> Predicate:
    """
    Predicate: record's maturity date falls in the same calendar month and year as target.

    Both dates are read with date_format. A target that does not parse is a
    caller error (InvalidInput); a stored date that does not parse makes the
    record malformed (DeserializationError).
    """
    try:
        target_date = parse_date(target, date_format)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"target date {target!r} does not match date format {date_format!r}") from exc

    def matches(record: Any) -> bool:
        raw = getattr(record, field)
        try:
            stored = parse_date(raw, date_format)
        except (TypeError, ValueError) as exc:
            raise DeserializationError(
                f"{field} {raw!r} does not match date format {date_format!r}"
            ) from exc
        return (stored.year, stored.month) == (target_date.year, target_date.month)

    return matches
