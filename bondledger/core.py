"""
Core types for the bond state ledger.

This module provides the foundational pieces every other module builds on:
1. Constants: key delimiters, namespace names, record type tags
2. Configuration: LedgerConfig and ScanPolicy
3. Exceptions: LedgerError and the domain-specific error types
4. Protocols: StateStore and StateCursor for the external key/value ledger
5. Data structures: StateEntry

Nothing in this module touches a backing store. The store is an external
collaborator reached only through the protocols defined here.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Optional, Protocol, Sequence, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Composite keys use the minimum unicode code point as both the namespace
# marker and the part delimiter, so no printable identifier can collide.
NAMESPACE_MARKER = "\x00"
KEY_DELIMITER = "\x00"

# Name of the state list that owns every commercial bond.
BOND_LIST_NAME = "org.bondnet.commercialbondlist"

# Type tag embedded in every serialized commercial bond.
BOND_RECORD_TYPE = "org.bondnet.commercialbond"

# Stored dates are ISO calendar dates ("2020-04-17") unless configured otherwise.
DEFAULT_DATE_FORMAT = "%Y-%m-%d"


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class ScanPolicy:
    """
    How a range query treats entries whose payload cannot be decoded.

    Attributes:
        strict: Raise DeserializationError on the first malformed entry.
                When False the entry is logged and skipped.
    """
    strict: bool = False


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """
    Settings shared by the bond contract operations.

    Attributes:
        bond_list_name: Namespace of the bond state list.
        date_format: strptime format used to read maturity dates in queries.
        strict_scan: Fail range queries on malformed entries instead of skipping.
        verbose: Print a one-line summary of each contract operation.
    """
    bond_list_name: str = BOND_LIST_NAME
    date_format: str = DEFAULT_DATE_FORMAT
    strict_scan: bool = False
    verbose: bool = False

    def __post_init__(self):
        if not self.bond_list_name or KEY_DELIMITER in self.bond_list_name:
            raise ValueError(f"Invalid bond_list_name: {self.bond_list_name!r}")
        if not self.date_format:
            raise ValueError("date_format cannot be empty")

    def scan_policy(self) -> ScanPolicy:
        return ScanPolicy(strict=self.strict_scan)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all bond ledger errors."""
    pass


class InvalidKeyPart(LedgerError):
    """Raised when a composite key part is empty or contains the delimiter."""
    pass


class MalformedKey(LedgerError):
    """Raised when a string does not have the composite key structure."""
    pass


class DuplicateKey(LedgerError):
    """Raised when adding a record whose key already exists in the store."""
    pass


class NotFound(LedgerError):
    """Raised when a key is absent, or a closest-match scan finds nothing."""
    pass


class DeserializationError(LedgerError):
    """Raised when a stored payload cannot be turned back into a record."""
    pass


class OwnershipMismatch(LedgerError):
    """Raised when the claimed owner of a bond is not its recorded owner."""
    pass


class InvalidTransition(LedgerError):
    """Raised when a lifecycle transition is not allowed from the current state."""
    pass


class AlreadyRedeemed(LedgerError):
    """Raised when redeeming a bond that is already REDEEMED."""
    pass


class StoreUnavailable(LedgerError):
    """Raised when the backing store fails at the transport or storage level."""
    pass


class InvalidInput(LedgerError, ValueError):
    """Raised when a scalar argument (amount, rate, date) cannot be used."""
    pass


def to_decimal(value: Any, name: str) -> Decimal:
    """
    Coerce a caller-supplied number to a finite Decimal.

    Floats go through str() so that 0.05 becomes Decimal("0.05").

    Raises:
        InvalidInput: If value is not a number, or is NaN or infinite
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise InvalidInput(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return result


@contextmanager
def store_errors(action: str, key: str) -> Iterator[None]:
    """
    Translate transport failures from a backing store call into StoreUnavailable.

    Ledger errors raised by the store pass through untouched. Nothing is retried.
    """
    try:
        yield
    except LedgerError:
        raise
    except OSError as exc:
        raise StoreUnavailable(f"{action} failed for {key!r}: {exc}") from exc


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class StateEntry:
    """
    One raw (key, value) pair produced by a backing-store scan.

    Attributes:
        key: The full composite key as stored.
        value: The serialized record bytes.
    """
    key: str
    value: bytes


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class StateCursor(Protocol):
    """
    External iterator over the results of a partial-key scan.

    Callers poll has_next() and fetch with next() until has_next() is False,
    then call close(). close() must also be called when the caller stops early.
    """

    def has_next(self) -> bool:
        """Return True while at least one more entry can be fetched."""
        ...

    def next(self) -> StateEntry:
        """Return the next entry in key order."""
        ...

    def close(self) -> None:
        """Release the cursor. Safe to call more than once."""
        ...


@runtime_checkable
class StateStore(Protocol):
    """
    Key/value interface to the shared ledger world state.

    Versioning, consensus and endorsement are the store's concern. This
    package only reads, writes and scans through these three calls.
    """

    def put(self, key: str, value: bytes) -> None:
        """Write value at key. Raises on transport or storage failure."""
        ...

    def get(self, key: str) -> Optional[bytes]:
        """Return the bytes stored at key, or None if absent."""
        ...

    def scan_by_partial_key(self, namespace: str, prefix_parts: Sequence[str]) -> StateCursor:
        """Open a cursor over every key in namespace whose leading parts equal prefix_parts."""
        ...
