"""
bond_contract.py - Commercial bond transactions and queries

Each operation takes a BondContext first and plain strings/numbers after it,
and returns either serialized record bytes or a plain scalar, which is what
the enclosing dispatcher passes back to its caller.

    issue   -> ISSUED, owned by the issuer            (state list add)
    buy     -> ISSUED becomes TRADING, owner changes  (state list update)
    redeem  -> REDEEMED, ownership returns to issuer  (state list update)

Queries:
    get_bond, get_bond_rate, get_bond_maturity_date,
    get_all_bonds_from_issuer, get_closest_bond_rate
"""

from __future__ import annotations
from dataclasses import dataclass
import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .core import (
    StateStore, LedgerConfig,
    InvalidInput, NotFound, OwnershipMismatch, InvalidTransition, AlreadyRedeemed,
    to_decimal,
)
from .commercial_bond import BondList, BondState, CommercialBond, create_bond
from .query import RangeQuery, same_maturity_month
from .serialization import record_to_dict

logger = logging.getLogger(__name__)


# Bond book loaded by instantiate() when no other list is supplied.
DEFAULT_BONDS = (
    {'issuer': 'MagnetoCorp', 'bond_number': '00001', 'issue_date_time': '2019-04-17',
     'maturity_date_time': '2020-04-17', 'face_value': '10000', 'interest_rate': '0.05'},
    {'issuer': 'Digibank', 'bond_number': '00001', 'issue_date_time': '2019-05-17',
     'maturity_date_time': '2020-05-17', 'face_value': '50000', 'interest_rate': '0.04'},
    {'issuer': 'MagnetoCorp', 'bond_number': '00002', 'issue_date_time': '2019-06-17',
     'maturity_date_time': '2020-06-17', 'face_value': '10000', 'interest_rate': '0.05'},
    {'issuer': 'Digibank', 'bond_number': '00002', 'issue_date_time': '2019-07-17',
     'maturity_date_time': '2020-07-17', 'face_value': '50000', 'interest_rate': '0.04'},
)


# =============================================================================
# CONTEXT
# =============================================================================

@dataclass(frozen=True)
class BondContext:
    """
    Everything an operation needs, passed explicitly to each call.

    Attributes:
        store: The backing world state
        bond_list: State list of all commercial bonds
        config: Query and logging settings
    """
    store: StateStore
    bond_list: BondList
    config: LedgerConfig

    def query(self) -> RangeQuery[CommercialBond]:
        return RangeQuery(
            self.store,
            self.bond_list.name,
            CommercialBond,
            codec=self.bond_list.codec,
            policy=self.config.scan_policy(),
        )

    def report(self, message: str) -> None:
        logger.info(message)
        if self.config.verbose:
            print(message)


def create_context(store: StateStore, config: Optional[LedgerConfig] = None) -> BondContext:
    config = config or LedgerConfig()
    return BondContext(store=store, bond_list=BondList(store, config.bond_list_name), config=config)


# =============================================================================
# HELPERS
# =============================================================================

def _load(ctx: BondContext, issuer: str, bond_number: str) -> CommercialBond:
    try:
        return ctx.bond_list.get_bond(issuer, bond_number)
    except NotFound as exc:
        raise NotFound(f"bond does not exist: {issuer} {bond_number}") from exc


def _serialize(ctx: BondContext, bond: CommercialBond) -> bytes:
    return ctx.bond_list.codec.serialize(bond)


# =============================================================================
# TRANSACTIONS
# =============================================================================

def issue(
    ctx: BondContext,
    issuer: str,
    bond_number: str,
    issue_date_time: str,
    maturity_date_time: str,
    face_value: Any,
    interest_rate: Any = None,
) -> bytes:
    """
    Issue a new bond, owned by its issuer in state ISSUED.

    Raises:
        DuplicateKey: If the issuer already has a bond with this number
        InvalidKeyPart: If issuer or bond_number is empty
        InvalidInput: If face_value or interest_rate is not a finite number
    """
    bond = create_bond(
        issuer=issuer,
        bond_number=bond_number,
        issue_date_time=issue_date_time,
        maturity_date_time=maturity_date_time,
        face_value=to_decimal(face_value, "face_value"),
        interest_rate=None if interest_rate in (None, "") else to_decimal(interest_rate, "interest_rate"),
    )
    ctx.bond_list.add_bond(bond)
    ctx.report(f"Issued {bond.label} face value {bond.face_value} maturing {bond.maturity_date_time}")
    return _serialize(ctx, bond)


def buy(
    ctx: BondContext,
    issuer: str,
    bond_number: str,
    current_owner: str,
    new_owner: str,
    price: Any,
    purchase_date_time: str,
) -> bytes:
    """
    Transfer a bond to new_owner. The first purchase moves ISSUED to TRADING.

    Raises:
        NotFound: If the bond does not exist
        OwnershipMismatch: If current_owner does not own the bond
        InvalidTransition: If the bond is REDEEMED
        InvalidInput: If price is not a finite number
    """
    price = to_decimal(price, "price")
    bond = _load(ctx, issuer, bond_number)

    if bond.owner != current_owner:
        raise OwnershipMismatch(f"bond {issuer} {bond_number} is not owned by {current_owner}")

    if bond.is_redeemed():
        raise InvalidTransition(
            f"bond {issuer} {bond_number} is not trading. Current state = {bond.current_state.name}"
        )
    if bond.is_issued():
        bond = bond.advance(BondState.TRADING)

    bond = bond.with_owner(new_owner)
    ctx.bond_list.update_bond(bond)
    ctx.report(
        f"Bought {bond.label} from {current_owner} by {new_owner} "
        f"for {price} on {purchase_date_time}"
    )
    return _serialize(ctx, bond)


def redeem(
    ctx: BondContext,
    issuer: str,
    bond_number: str,
    redeeming_owner: str,
    redeem_date_time: str,
) -> bytes:
    """
    Redeem a bond: ownership returns to the issuer, state becomes REDEEMED.

    Raises:
        NotFound: If the bond does not exist
        AlreadyRedeemed: If the bond is already REDEEMED
        OwnershipMismatch: If redeeming_owner does not own the bond
    """
    bond = _load(ctx, issuer, bond_number)

    if bond.is_redeemed():
        raise AlreadyRedeemed(f"bond {issuer} {bond_number} already redeemed")
    if bond.owner != redeeming_owner:
        raise OwnershipMismatch(f"Redeeming owner {redeeming_owner} does not own bond {issuer} {bond_number}")

    bond = bond.with_owner(bond.issuer).advance(BondState.REDEEMED)
    ctx.bond_list.update_bond(bond)
    ctx.report(f"Redeemed {bond.label} from {redeeming_owner} on {redeem_date_time}")
    return _serialize(ctx, bond)


def instantiate(ctx: BondContext, bonds: Optional[Sequence[Mapping[str, Any]]] = None) -> int:
    """
    Seed the ledger with a bond book (DEFAULT_BONDS unless bonds is given).

    Returns:
        Number of bonds issued
    """
    book = DEFAULT_BONDS if bonds is None else bonds
    for terms in book:
        issue(
            ctx,
            terms['issuer'],
            terms['bond_number'],
            terms['issue_date_time'],
            terms['maturity_date_time'],
            terms['face_value'],
            terms.get('interest_rate'),
        )
    ctx.report(f"Instantiated bond contract with {len(book)} bonds")
    return len(book)


# =============================================================================
# QUERIES
# =============================================================================

def get_bond(ctx: BondContext, issuer: str, bond_number: str) -> bytes:
    """Return the serialized bond. Raises NotFound if it does not exist."""
    logger.info("getBond for: %s %s", issuer, bond_number)
    return _serialize(ctx, _load(ctx, issuer, bond_number))


def get_bond_rate(ctx: BondContext, issuer: str, bond_number: str) -> str:
    """Return the bond's interest rate, or "" when it was issued without one."""
    bond = _load(ctx, issuer, bond_number)
    return "" if bond.interest_rate is None else str(bond.interest_rate)


def get_bond_maturity_date(ctx: BondContext, issuer: str, bond_number: str) -> str:
    return _load(ctx, issuer, bond_number).maturity_date_time


def get_all_bonds_from_issuer(ctx: BondContext, issuer: str) -> str:
    """Return a JSON array of {"key", "record"} for every bond of issuer, in key order."""
    results = [
        {'key': key, 'record': record_to_dict(bond)}
        for key, bond in ctx.query().list_records([issuer])
    ]
    logger.info("Found %d bonds from %s", len(results), issuer)
    return json.dumps(results, sort_keys=True)


def get_closest_bond_rate(ctx: BondContext, issuer: str, target_maturity_date: str) -> str:
    """
    Rate of the first bond (in key order) of issuer maturing in the same month
    and year as target_maturity_date, or "" if there is none.

    Both dates are read with ctx.config.date_format.
    """
    predicate = same_maturity_month(target_maturity_date, ctx.config.date_format)
    try:
        raw = ctx.query().find_first_matching([issuer], predicate)
    except NotFound:
        logger.info("No bond by %s matures in the month of %s", issuer, target_maturity_date)
        return ""

    bond = ctx.bond_list.codec.deserialize(raw, CommercialBond)
    logger.info(
        "%s is the same month as bond number %s with the interest rate %s",
        target_maturity_date, bond.bond_number, bond.interest_rate,
    )
    return "" if bond.interest_rate is None else str(bond.interest_rate)


# =============================================================================
# DISPATCH TABLE
# =============================================================================

# Transaction names as seen by the dispatcher.
TRANSACTIONS: Dict[str, Callable[..., Any]] = {
    "instantiate": instantiate,
    "issue": issue,
    "buy": buy,
    "redeem": redeem,
    "getBond": get_bond,
    "getBondRate": get_bond_rate,
    "getBondMaturityDate": get_bond_maturity_date,
    "getAllBondsFromIssuer": get_all_bonds_from_issuer,
    "getClosestBondRate": get_closest_bond_rate,
}


def invoke(ctx: BondContext, name: str, *args: Any) -> Any:
    """Run the named transaction with positional string/number arguments."""
    try:
        handler = TRANSACTIONS[name]
    except KeyError:
        raise InvalidInput(f"Unknown transaction: {name}") from None
    return handler(ctx, *args)
