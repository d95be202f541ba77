"""
conftest.py - Shared pytest fixtures for bond ledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Stores (in-memory, scripted order)
- Contexts (empty, seeded with the default bond book)
- Bond records and state lists
"""

import pytest
from decimal import Decimal

from bondledger import (
    InMemoryStateStore, LedgerConfig,
    BondList, CommercialBond, create_bond,
    create_context, instantiate,
    serialize_record,
    BOND_LIST_NAME,
)

from tests.fake_store import ScriptedStore


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def make_bond(
    issuer: str = "MagnetoCorp",
    bond_number: str = "00001",
    maturity: str = "2020-11-30",
    rate: str = "0.05",
    **kwargs,
) -> CommercialBond:
    """Create an ISSUED bond for testing."""
    terms = dict(
        issuer=issuer,
        bond_number=bond_number,
        issue_date_time="2020-05-31",
        maturity_date_time=maturity,
        face_value=Decimal("5000000"),
        interest_rate=Decimal(rate) if rate is not None else None,
    )
    terms.update(kwargs)
    return create_bond(**terms)


def scripted_bond_store(*bonds: CommercialBond) -> ScriptedStore:
    """ScriptedStore holding bonds in the given scan order."""
    store = ScriptedStore()
    for bond in bonds:
        store.put_parts(BOND_LIST_NAME, [bond.issuer, bond.bond_number], serialize_record(bond))
    return store


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory world state."""
    return InMemoryStateStore()


@pytest.fixture
def bond_list(store):
    return BondList(store)


@pytest.fixture
def ctx(store):
    """Bond context over an empty store."""
    return create_context(store)


@pytest.fixture
def seeded_ctx(store):
    """Bond context seeded with the default bond book."""
    context = create_context(store)
    instantiate(context)
    return context


@pytest.fixture
def strict_config():
    return LedgerConfig(strict_scan=True)


@pytest.fixture
def bond():
    return make_bond()
