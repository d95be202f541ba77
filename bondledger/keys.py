"""
keys.py - Composite keys for the ledger world state

A composite key is the namespace followed by an ordered list of parts:

    NAMESPACE_MARKER + namespace + DELIM + part_1 + DELIM + ... + part_n + DELIM

Every part is terminated by the delimiter, so the encoding of a partial key
(the first k parts) is a string prefix of exactly those full keys whose first
k parts are equal. "Acme" never matches "Acme2".
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Tuple

from .core import NAMESPACE_MARKER, KEY_DELIMITER, InvalidKeyPart, MalformedKey


def check_key_part(part: Any, label: str) -> str:
    if not isinstance(part, str):
        raise InvalidKeyPart(f"{label} must be a string, got {type(part).__name__}")
    if not part:
        raise InvalidKeyPart(f"{label} cannot be empty")
    if KEY_DELIMITER in part:
        raise InvalidKeyPart(f"{label} contains the key delimiter: {part!r}")
    return part


def encode_partial_key(namespace: str, prefix_parts: Iterable[str]) -> str:
    """Encode namespace and zero or more leading parts as a scan prefix."""
    check_key_part(namespace, "namespace")
    parts = [check_key_part(p, f"key part {i}") for i, p in enumerate(prefix_parts)]
    encoded = NAMESPACE_MARKER + namespace + KEY_DELIMITER
    for part in parts:
        encoded += part + KEY_DELIMITER
    return encoded


def encode_key(namespace: str, parts: Iterable[str]) -> str:
    """Encode a full composite key. At least one part is required."""
    parts = tuple(parts)
    if not parts:
        raise InvalidKeyPart(f"composite key for {namespace!r} needs at least one part")
    return encode_partial_key(namespace, parts)


def split_key(key: str) -> Tuple[str, Tuple[str, ...]]:
    """Split an encoded key into (namespace, parts)."""
    if not isinstance(key, str) or not key.startswith(NAMESPACE_MARKER):
        raise MalformedKey(f"key does not start with the namespace marker: {key!r}")
    body = key[len(NAMESPACE_MARKER):]
    if not body.endswith(KEY_DELIMITER):
        raise MalformedKey(f"key is not delimiter-terminated: {key!r}")
    namespace, *parts = body[:-len(KEY_DELIMITER)].split(KEY_DELIMITER)
    if not namespace:
        raise MalformedKey(f"key has no namespace: {key!r}")
    if not parts:
        raise MalformedKey(f"key has no parts: {key!r}")
    if any(not p for p in parts):
        raise MalformedKey(f"key has an empty part: {key!r}")
    return namespace, tuple(parts)


def decode_key(key: str) -> Tuple[str, ...]:
    """Inverse of encode_key: return the parts without the namespace."""
    return split_key(key)[1]


@dataclass(frozen=True, slots=True)
class CompositeKey:
    """
    A decoded composite key.

    Two keys are equal iff their namespaces and part sequences are equal.
    """
    namespace: str
    parts: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'parts', tuple(self.parts))
        # Validate eagerly so an invalid key can never be constructed
        encode_key(self.namespace, self.parts)

    def encode(self) -> str:
        return encode_key(self.namespace, self.parts)

    @classmethod
    def decode(cls, key: str) -> CompositeKey:
        namespace, parts = split_key(key)
        return cls(namespace, parts)

    @classmethod
    def from_record(cls, namespace: str, record: Any) -> CompositeKey:
        """Build the key of a record from its KEY_FIELDS, in declared order."""
        fields = getattr(type(record), 'KEY_FIELDS', None)
        if not fields:
            raise InvalidKeyPart(f"{type(record).__name__} declares no KEY_FIELDS")
        return cls(namespace, tuple(getattr(record, name) for name in fields))

    def __str__(self) -> str:
        return f"{self.namespace}[{':'.join(self.parts)}]"
