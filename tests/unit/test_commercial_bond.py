"""
test_commercial_bond.py - Unit tests for the commercial bond record

Tests:
- create_bond factory (ISSUED, owned by issuer)
- Field validation and Decimal coercion
- Forward-only lifecycle transitions
"""

import pytest
from decimal import Decimal

from bondledger import (
    BondState,
    CommercialBond,
    create_bond,
    InvalidTransition,
    InvalidKeyPart,
    InvalidInput,
    LedgerError,
    to_decimal,
    BOND_RECORD_TYPE,
)
from tests.conftest import make_bond


class TestCreateBond:
    """Tests for the create_bond factory."""

    def test_new_bond_is_issued_to_issuer(self):
        bond = create_bond("MagnetoCorp", "00001", "2020-05-31", "2020-11-30", Decimal("5000000"))
        assert bond.current_state is BondState.ISSUED
        assert bond.owner == "MagnetoCorp"
        assert bond.interest_rate is None
        assert bond.record_type == BOND_RECORD_TYPE

    def test_numbers_coerced_to_decimal(self):
        bond = create_bond("MagnetoCorp", "00001", "2020-05-31", "2020-11-30", 5000000, 0.05)
        assert bond.face_value == Decimal("5000000")
        assert bond.interest_rate == Decimal("0.05")

    def test_zero_face_value(self):
        with pytest.raises(InvalidInput, match="face_value must be positive"):
            make_bond(face_value=Decimal("0"))

    def test_nan_rate(self):
        with pytest.raises(InvalidInput, match="interest_rate must be finite"):
            make_bond(interest_rate=Decimal("NaN"))

    def test_empty_issuer(self):
        with pytest.raises(InvalidKeyPart, match="issuer cannot be empty"):
            make_bond(issuer="")

    def test_empty_bond_number(self):
        with pytest.raises(InvalidKeyPart, match="bond_number cannot be empty"):
            make_bond(bond_number="")

    def test_delimiter_in_issuer(self):
        with pytest.raises(InvalidKeyPart, match="delimiter"):
            make_bond(issuer="Magneto\x00Corp")

    def test_bad_face_value_is_ledger_error(self):
        with pytest.raises(InvalidInput, match="face_value must be a number"):
            make_bond(face_value="lots")

    def test_infinite_face_value(self):
        with pytest.raises(InvalidInput, match="face_value must be finite"):
            make_bond(face_value="Infinity")

    def test_wrong_record_type(self):
        with pytest.raises(ValueError, match="record_type"):
            CommercialBond("A", "1", "2020-01-01", "2021-01-01", Decimal("1"), "A",
                           BondState.ISSUED, record_type="other")

    def test_state_must_be_enum(self):
        with pytest.raises(ValueError, match="BondState"):
            CommercialBond("A", "1", "2020-01-01", "2021-01-01", Decimal("1"), "A", 1)

    def test_frozen(self, bond):
        with pytest.raises(AttributeError):
            bond.owner = "Digibank"

    def test_key_fields(self):
        assert CommercialBond.KEY_FIELDS == ("issuer", "bond_number")

    def test_label(self, bond):
        assert bond.label == "MagnetoCorp 00001"


class TestLifecycle:
    """Tests for forward-only state transitions."""

    def test_state_predicates(self, bond):
        assert bond.is_issued()
        trading = bond.advance(BondState.TRADING)
        assert trading.is_trading()
        assert trading.advance(BondState.REDEEMED).is_redeemed()

    def test_advance_returns_copy(self, bond):
        bond.advance(BondState.TRADING)
        assert bond.is_issued()

    def test_issued_may_redeem_directly(self, bond):
        assert bond.advance(BondState.REDEEMED).is_redeemed()

    def test_no_backward_move(self, bond):
        redeemed = bond.advance(BondState.REDEEMED)
        with pytest.raises(InvalidTransition, match="REDEEMED to TRADING"):
            redeemed.advance(BondState.TRADING)

    def test_no_self_transition(self, bond):
        with pytest.raises(InvalidTransition):
            bond.advance(BondState.ISSUED)

    def test_with_owner(self, bond):
        moved = bond.with_owner("Digibank")
        assert moved.owner == "Digibank"
        assert bond.owner == "MagnetoCorp"

    def test_with_empty_owner(self, bond):
        with pytest.raises(ValueError, match="no owner"):
            bond.with_owner("")


class TestToDecimal:
    """Tests for caller-supplied number coercion."""

    def test_float_via_str(self):
        assert to_decimal(0.05, "rate") == Decimal("0.05")

    def test_decimal_passthrough(self):
        assert to_decimal(Decimal("1.50"), "price") == Decimal("1.50")

    def test_not_a_number(self):
        with pytest.raises(InvalidInput, match="price must be a number"):
            to_decimal("abc", "price")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", Decimal("NaN")])
    def test_non_finite(self, value):
        with pytest.raises(InvalidInput, match="price must be finite"):
            to_decimal(value, "price")

    def test_invalid_input_is_in_taxonomy(self):
        assert issubclass(InvalidInput, LedgerError)
        assert issubclass(InvalidInput, ValueError)
