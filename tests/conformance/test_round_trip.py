"""
Round-Trip Conformance Tests

INVARIANT: Both codecs are exact inverses.

    ∀ valid parts p:    decode_key(encode_key(ns, p)) = p
    ∀ valid records r:  deserialize(serialize(r), type(r)) = r

Key equality follows part equality:

    encode_key(ns, p) = encode_key(ns, q)  ⟺  p = q
"""

from hypothesis import given, settings
from hypothesis import strategies as st
from decimal import Decimal

from bondledger import (
    BondState,
    CommercialBond,
    CompositeKey,
    encode_key,
    encode_partial_key,
    decode_key,
    split_key,
    serialize_record,
    deserialize_record,
    KEY_DELIMITER,
)


key_parts = st.text(min_size=1, max_size=20).filter(lambda s: KEY_DELIMITER not in s)
part_tuples = st.lists(key_parts, min_size=1, max_size=5).map(tuple)
namespaces = key_parts

decimals = st.decimals(
    min_value=Decimal("0.000001"), max_value=Decimal("1e12"),
    allow_nan=False, allow_infinity=False, places=6,
)
rates = st.one_of(st.none(), st.decimals(
    min_value=Decimal("-1"), max_value=Decimal("1"),
    allow_nan=False, allow_infinity=False, places=4,
))

bonds = st.builds(
    CommercialBond,
    issuer=key_parts,
    bond_number=key_parts,
    issue_date_time=st.text(max_size=12),
    maturity_date_time=st.text(max_size=12),
    face_value=decimals,
    owner=key_parts,
    current_state=st.sampled_from(BondState),
    interest_rate=rates,
)


class TestKeyRoundTrip:
    """Property-based composite key tests."""

    @given(namespaces, part_tuples)
    @settings(max_examples=200)
    def test_decode_inverts_encode(self, ns, parts):
        """
        PROPERTY: decode(encode(parts)) == parts.
        """
        assert decode_key(encode_key(ns, parts)) == parts
        assert split_key(encode_key(ns, parts)) == (ns, parts)

    @given(namespaces, part_tuples, part_tuples)
    @settings(max_examples=200)
    def test_equal_keys_iff_equal_parts(self, ns, p, q):
        """
        PROPERTY: no two distinct part sequences share a key.
        """
        assert (encode_key(ns, p) == encode_key(ns, q)) == (p == q)

    @given(namespaces, part_tuples, part_tuples)
    @settings(max_examples=200)
    def test_prefix_match_iff_leading_parts_equal(self, ns, prefix, parts):
        """
        PROPERTY: a partial key prefixes a full key exactly when the full
        key's leading parts equal the prefix parts.
        """
        matches = encode_key(ns, parts).startswith(encode_partial_key(ns, prefix))
        assert matches == (parts[:len(prefix)] == prefix)

    @given(namespaces, part_tuples)
    def test_composite_key_object(self, ns, parts):
        key = CompositeKey(ns, parts)
        assert CompositeKey.decode(key.encode()) == key


class TestRecordRoundTrip:
    """Property-based record codec tests."""

    @given(bonds)
    @settings(max_examples=200)
    def test_deserialize_inverts_serialize(self, bond):
        """
        PROPERTY: deserialize(serialize(r), type(r)) == r, field for field.
        """
        restored = deserialize_record(serialize_record(bond), CommercialBond)
        assert restored == bond
        assert str(restored.face_value) == str(bond.face_value)

    @given(bonds)
    def test_serialization_deterministic(self, bond):
        assert serialize_record(bond) == serialize_record(
            deserialize_record(serialize_record(bond), CommercialBond)
        )
