"""
state_list.py - Typed, namespace-scoped collection over the world state

A StateList owns the keys of one record type inside one namespace. It is the
only place that writes records, and it enforces create/overwrite discipline:

    add(record)     create only  - DuplicateKey if the key exists
    update(record)  overwrite only - NotFound if the key is absent
    get(key)        read         - NotFound if absent

For any key, exactly one of add and update can succeed at a given time, so a
record can never be silently clobbered by a create or conjured by an update.
There is no delete; terminal conditions are modelled as record state.
"""

from __future__ import annotations
import logging
from typing import Generic, Optional, Type, TypeVar, Union

from .core import (
    StateStore,
    DuplicateKey, NotFound, MalformedKey, DeserializationError,
    store_errors,
)
from .keys import CompositeKey
from .serialization import RecordCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateList(Generic[T]):
    """
    Collection of records of type T stored under namespace `name`.

    The list holds no record data of its own. Every call reads or writes
    through the backing store.

    Example:
        bonds = StateList(store, "org.bondnet.commercialbondlist", CommercialBond)
        bonds.add(bond)
        same = bonds.get(bonds.make_key("MagnetoCorp", "00001"))
    """

    def __init__(
        self,
        store: StateStore,
        name: str,
        record_class: Type[T],
        codec: Optional[RecordCodec] = None,
    ):
        """
        Create a state list.

        Args:
            store: Backing key/value store
            name: Namespace for every key in this list
            record_class: Record dataclass stored in this list
            codec: Shared type registry (a private one is created if omitted)
        """
        self.store = store
        self.name = name
        self.record_class = record_class
        self.codec = codec or RecordCodec()
        if record_class.RECORD_TYPE not in self.codec:
            self.codec.register(record_class)

    # ------------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------------

    def make_key(self, *parts: str) -> CompositeKey:
        """Build a key in this list's namespace from explicit parts."""
        return CompositeKey(self.name, parts)

    def key_for(self, record: T) -> CompositeKey:
        """Build the key of a record from its KEY_FIELDS."""
        return CompositeKey.from_record(self.name, record)

    def _coerce_key(self, key: Union[CompositeKey, str]) -> CompositeKey:
        if isinstance(key, str):
            key = CompositeKey.decode(key)
        if key.namespace != self.name:
            raise MalformedKey(f"Key {key} does not belong to state list {self.name}")
        return key

    # ------------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------------

    def _read(self, key: CompositeKey) -> Optional[bytes]:
        encoded = key.encode()
        with store_errors("get", str(key)):
            return self.store.get(encoded)

    def _write(self, key: CompositeKey, record: T) -> None:
        data = self.codec.serialize(record)
        with store_errors("put", str(key)):
            self.store.put(key.encode(), data)
        logger.debug("Wrote %s (%d bytes)", key, len(data))

    def exists(self, key: Union[CompositeKey, str]) -> bool:
        return self._read(self._coerce_key(key)) is not None

    # ------------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------------

    def add(self, record: T) -> None:
        """
        Store a new record.

        Raises:
            DuplicateKey: If an entry already exists at the record's key
            StoreUnavailable: If the backing store fails
        """
        self._check_type(record)
        key = self.key_for(record)
        if self._read(key) is not None:
            raise DuplicateKey(f"Record {key} already exists")
        self._write(key, record)

    def get(self, key: Union[CompositeKey, str]) -> T:
        """
        Fetch the record stored at key.

        Raises:
            NotFound: If nothing is stored at key
            DeserializationError: If the stored bytes are corrupt
            MalformedKey: If key belongs to another namespace
        """
        key = self._coerce_key(key)
        data = self._read(key)
        if data is None:
            raise NotFound(f"Record {key} does not exist")
        try:
            return self.codec.deserialize(data, self.record_class)
        except DeserializationError as exc:
            raise DeserializationError(f"Record {key} is unreadable: {exc}") from exc

    def update(self, record: T) -> None:
        """
        Overwrite an existing record.

        Raises:
            NotFound: If no entry exists at the record's key
            StoreUnavailable: If the backing store fails
        """
        self._check_type(record)
        key = self.key_for(record)
        if self._read(key) is None:
            raise NotFound(f"Record {key} does not exist")
        self._write(key, record)

    def _check_type(self, record: T) -> None:
        if not isinstance(record, self.record_class):
            raise TypeError(
                f"State list {self.name} holds {self.record_class.__name__}, "
                f"got {type(record).__name__}"
            )

    def __repr__(self):
        return f"StateList({self.name}, {self.record_class.__name__})"
