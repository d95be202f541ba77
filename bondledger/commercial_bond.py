"""
commercial_bond.py - Commercial bond record and its state list

A CommercialBond has:
    issuer, bond_number (the key), issue and maturity dates, face_value,
    an optional interest_rate, the current owner and a lifecycle state.

Lifecycle: ISSUED -> TRADING -> REDEEMED. States only move forward; the
contract decides which transitions an operation performs.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple

from .core import (
    StateStore,
    InvalidInput, InvalidTransition,
    to_decimal,
    BOND_LIST_NAME, BOND_RECORD_TYPE,
)
from .keys import CompositeKey, check_key_part
from .serialization import RecordCodec
from .state_list import StateList


class BondState(Enum):
    """Lifecycle phase of a commercial bond."""
    ISSUED = 1
    TRADING = 2
    REDEEMED = 3


# =============================================================================
# RECORD
# =============================================================================

@dataclass(frozen=True, slots=True)
class CommercialBond:
    """A commercial bond as stored in the world state."""
    RECORD_TYPE: ClassVar[str] = BOND_RECORD_TYPE
    KEY_FIELDS: ClassVar[Tuple[str, ...]] = ('issuer', 'bond_number')

    issuer: str
    bond_number: str
    issue_date_time: str
    maturity_date_time: str
    face_value: Decimal
    owner: str
    current_state: BondState
    interest_rate: Optional[Decimal] = None
    record_type: str = BOND_RECORD_TYPE

    def __post_init__(self):
        if self.record_type != self.RECORD_TYPE:
            raise InvalidInput(f"record_type must be {self.RECORD_TYPE!r}, got {self.record_type!r}")
        for name in self.KEY_FIELDS:
            check_key_part(getattr(self, name), name)
        if not self.owner:
            raise InvalidInput(f"bond {self.issuer} {self.bond_number} has no owner")
        if not isinstance(self.current_state, BondState):
            raise InvalidInput(f"current_state must be a BondState, got {self.current_state!r}")
        # Accept plain numbers from callers; store Decimal
        object.__setattr__(self, 'face_value', to_decimal(self.face_value, f"bond {self.label} face_value"))
        if self.face_value <= Decimal("0"):
            raise InvalidInput(f"bond {self.label} face_value must be positive, got {self.face_value}")
        if self.interest_rate is not None:
            object.__setattr__(
                self, 'interest_rate', to_decimal(self.interest_rate, f"bond {self.label} interest_rate")
            )

    @property
    def label(self) -> str:
        return f"{self.issuer} {self.bond_number}"

    def is_issued(self) -> bool:
        return self.current_state is BondState.ISSUED

    def is_trading(self) -> bool:
        return self.current_state is BondState.TRADING

    def is_redeemed(self) -> bool:
        return self.current_state is BondState.REDEEMED

    def with_owner(self, owner: str) -> CommercialBond:
        return replace(self, owner=owner)

    def advance(self, state: BondState) -> CommercialBond:
        """Return a copy in a later lifecycle state. Never moves backward."""
        if state.value <= self.current_state.value:
            raise InvalidTransition(
                f"bond {self.label} cannot move from {self.current_state.name} to {state.name}"
            )
        return replace(self, current_state=state)


def create_bond(
    issuer: str,
    bond_number: str,
    issue_date_time: str,
    maturity_date_time: str,
    face_value: Decimal,
    interest_rate: Optional[Decimal] = None,
) -> CommercialBond:
    """A newly issued bond: state ISSUED, owned by its issuer."""
    return CommercialBond(
        issuer=issuer,
        bond_number=bond_number,
        issue_date_time=issue_date_time,
        maturity_date_time=maturity_date_time,
        face_value=face_value,
        owner=issuer,
        current_state=BondState.ISSUED,
        interest_rate=interest_rate,
    )


# =============================================================================
# STATE LIST
# =============================================================================

class BondList(StateList[CommercialBond]):
    """All commercial bonds, keyed by (issuer, bond_number)."""

    def __init__(self, store: StateStore, name: str = BOND_LIST_NAME, codec: Optional[RecordCodec] = None):
        super().__init__(store, name, CommercialBond, codec)

    def bond_key(self, issuer: str, bond_number: str) -> CompositeKey:
        return self.make_key(issuer, bond_number)

    def add_bond(self, bond: CommercialBond) -> None:
        self.add(bond)

    def get_bond(self, issuer: str, bond_number: str) -> CommercialBond:
        return self.get(self.bond_key(issuer, bond_number))

    def update_bond(self, bond: CommercialBond) -> None:
        self.update(bond)
