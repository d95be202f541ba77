#!/usr/bin/env python3
"""
demo.py - Walkthrough: a commercial bond from issue to redemption

WHAT YOU'LL SEE:
  1: Seeding the world state with the default bond book
  2: Issuing a bond
  3: Buying it (ISSUED -> TRADING)
  4: Rejected operations (wrong owner, double redeem)
  5: Redeeming it (TRADING -> REDEEMED)
  6: Range queries: all bonds from an issuer, closest rate by maturity month

Run:
    python demo.py           # Pause between steps
    python demo.py --quick   # Run all steps without pausing
"""

import json
import logging
import sys

from bondledger import (
    InMemoryStateStore, LedgerConfig, LedgerError,
    create_context, instantiate,
    issue, buy, redeem, get_bond,
    get_all_bonds_from_issuer, get_closest_bond_rate,
)


QUICK = "--quick" in sys.argv


def step(number: int, title: str) -> None:
    print(f"\n{'=' * 70}\n STEP {number}: {title}\n{'=' * 70}")
    if not QUICK:
        input("  (press Enter) ")


def show(payload: bytes) -> None:
    record = json.loads(payload)
    print(f"  {record['issuer']} {record['bond_number']}: owner={record['owner']} "
          f"state={record['current_state']} face={record['face_value']}")


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    store = InMemoryStateStore()
    ctx = create_context(store, LedgerConfig(verbose=True))

    step(1, "Seed the default bond book")
    instantiate(ctx)
    print(f"  {store}")

    step(2, "Issue MagnetoCorp 00003")
    show(issue(ctx, "MagnetoCorp", "00003", "2020-05-31", "2020-11-30", 5000000, "0.05"))

    step(3, "Digibank buys it")
    show(buy(ctx, "MagnetoCorp", "00003", "MagnetoCorp", "Digibank", 4900000, "2020-06-01"))

    step(4, "Operations the contract rejects")
    try:
        buy(ctx, "MagnetoCorp", "00003", "MagnetoCorp", "Hedgematic", 4950000, "2020-06-02")
    except LedgerError as exc:
        print(f"  {type(exc).__name__}: {exc}")

    step(5, "Digibank redeems it")
    show(redeem(ctx, "MagnetoCorp", "00003", "Digibank", "2020-11-30"))
    try:
        redeem(ctx, "MagnetoCorp", "00003", "MagnetoCorp", "2020-12-01")
    except LedgerError as exc:
        print(f"  {type(exc).__name__}: {exc}")
    show(get_bond(ctx, "MagnetoCorp", "00003"))

    step(6, "Range queries")
    for item in json.loads(get_all_bonds_from_issuer(ctx, "MagnetoCorp")):
        record = item['record']
        print(f"  {record['bond_number']} matures {record['maturity_date_time']} rate {record['interest_rate']}")
    rate = get_closest_bond_rate(ctx, "MagnetoCorp", "2020-04-01")
    print(f"  Closest MagnetoCorp rate for April 2020: {rate or '(none)'}")
    print(f"  Open cursors after queries: {store.open_cursors}")


if __name__ == "__main__":
    main()
