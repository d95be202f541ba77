"""
serialization.py - Typed record codec

Records are frozen dataclasses that declare:
    RECORD_TYPE  class attribute, the type tag (e.g. "org.bondnet.commercialbond")
    KEY_FIELDS   class attribute, names of the fields that form the composite key
    record_type  an ordinary field holding the same tag, so the tag travels
                 with the payload

The payload is the record's fields as a JSON object with sorted keys. Decimals
are written as strings and enums as their values, so that reading a payload
back against the record's annotations reproduces the record field for field.
"""
from __future__ import annotations
from dataclasses import fields, is_dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
import json
import types
from typing import Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .core import DeserializationError, LedgerError

R = TypeVar("R")

_NONE_TYPE = type(None)


# =============================================================================
# ENCODING
# =============================================================================

def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value


def record_to_dict(record: Any) -> Dict[str, Any]:
    """Return the JSON-ready field mapping of a record."""
    if not is_dataclass(record) or isinstance(record, type):
        raise TypeError(f"Expected a record dataclass instance, got {type(record).__name__}")
    return {f.name: _encode_value(getattr(record, f.name)) for f in fields(record)}


def serialize_record(record: Any) -> bytes:
    """Serialize a record to UTF-8 JSON bytes."""
    return json.dumps(record_to_dict(record), sort_keys=True, separators=(",", ":")).encode("utf-8")


# =============================================================================
# DECODING
# =============================================================================

def _decode_value(tp: Any, raw: Any, name: str) -> Any:
    """Coerce a JSON value to the annotated field type."""
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        if raw is None and _NONE_TYPE in args:
            return None
        concrete = [a for a in args if a is not _NONE_TYPE]
        if len(concrete) != 1:
            raise DeserializationError(f"Unsupported annotation for field {name!r}: {tp}")
        tp = concrete[0]

    if raw is None:
        raise DeserializationError(f"Field {name!r} cannot be null")

    if tp is Decimal:
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise DeserializationError(f"Field {name!r} must be a decimal string, got {raw!r}")
        try:
            value = Decimal(str(raw))
        except InvalidOperation as exc:
            raise DeserializationError(f"Field {name!r} is not a decimal: {raw!r}") from exc
        if not value.is_finite():
            raise DeserializationError(f"Field {name!r} must be finite, got {raw!r}")
        return value
    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(raw)
        except ValueError as exc:
            raise DeserializationError(f"Field {name!r} is not a valid {tp.__name__}: {raw!r}") from exc
    if tp is bool:
        if not isinstance(raw, bool):
            raise DeserializationError(f"Field {name!r} must be a boolean, got {raw!r}")
        return raw
    if tp is int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise DeserializationError(f"Field {name!r} must be an integer, got {raw!r}")
        return raw
    if tp is str:
        if not isinstance(raw, str):
            raise DeserializationError(f"Field {name!r} must be a string, got {raw!r}")
        return raw
    return raw


def _load_payload(data: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, ValueError, TypeError) as exc:
        raise DeserializationError(f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise DeserializationError(f"Payload must be a JSON object, got {type(payload).__name__}")
    return payload


def record_from_dict(payload: Dict[str, Any], target_type: Type[R]) -> R:
    """Build a target_type record from a decoded JSON object."""
    expected_tag = getattr(target_type, 'RECORD_TYPE', None)
    if expected_tag is None or not is_dataclass(target_type):
        raise TypeError(f"{target_type!r} is not a record type")

    tag = payload.get('record_type')
    if tag != expected_tag:
        raise DeserializationError(
            f"Payload type tag {tag!r} does not match {target_type.__name__} ({expected_tag!r})"
        )

    hints = get_type_hints(target_type)
    declared = {f.name: f for f in fields(target_type) if f.init}
    unknown = set(payload) - set(declared)
    if unknown:
        raise DeserializationError(f"Unknown fields for {target_type.__name__}: {sorted(unknown)}")

    kwargs = {}
    for name in declared:
        if name not in payload:
            raise DeserializationError(f"Missing field {name!r} for {target_type.__name__}")
        kwargs[name] = _decode_value(hints[name], payload[name], name)

    try:
        return target_type(**kwargs)
    except (TypeError, ValueError, LedgerError) as exc:
        raise DeserializationError(f"Invalid {target_type.__name__} payload: {exc}") from exc


def deserialize_record(data: bytes, target_type: Type[R]) -> R:
    """Reconstruct a record of target_type from serialized bytes."""
    return record_from_dict(_load_payload(data), target_type)


# =============================================================================
# POLYMORPHIC RECOVERY
# =============================================================================

class RecordCodec:
    """
    Registry of record types sharing one store.

    deserialize() without a target reads the embedded type tag and picks the
    registered class, which is how mixed record kinds are recovered from a scan.

    Example:
        codec = RecordCodec()
        codec.register(CommercialBond)
        bond = codec.deserialize(raw)
    """

    def __init__(self, *record_types: type):
        self._types: Dict[str, type] = {}
        for record_type in record_types:
            self.register(record_type)

    def register(self, record_type: type) -> None:
        tag = getattr(record_type, 'RECORD_TYPE', None)
        if not tag or not is_dataclass(record_type):
            raise TypeError(f"{record_type!r} is not a record type")
        existing = self._types.get(tag)
        if existing is not None and existing is not record_type:
            raise ValueError(f"Type tag {tag!r} already registered to {existing.__name__}")
        self._types[tag] = record_type

    def lookup(self, tag: str) -> type:
        try:
            return self._types[tag]
        except KeyError:
            raise DeserializationError(f"No record type registered for tag {tag!r}") from None

    def serialize(self, record: Any) -> bytes:
        self.lookup(type(record).RECORD_TYPE)
        return serialize_record(record)

    def deserialize(self, data: bytes, target_type: Optional[type] = None) -> Any:
        payload = _load_payload(data)
        if target_type is None:
            target_type = self.lookup(payload.get('record_type'))
        return record_from_dict(payload, target_type)

    def __contains__(self, tag: str) -> bool:
        return tag in self._types

    def __repr__(self):
        return f"RecordCodec({sorted(self._types)})"
