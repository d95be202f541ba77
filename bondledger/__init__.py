"""
bondledger - Commercial bond lifecycle on a key/value world state

Typed state lists over an external key/value ledger, with composite keys,
type-tagged record serialization and partial-key range queries.

Usage:
    from bondledger import InMemoryStateStore, create_context, issue, buy, redeem

    ctx = create_context(InMemoryStateStore())
    issue(ctx, "MagnetoCorp", "00001", "2020-05-31", "2020-11-30", 5000000, "0.05")
    buy(ctx, "MagnetoCorp", "00001", "MagnetoCorp", "Digibank", 4900000, "2020-06-01")
    redeem(ctx, "MagnetoCorp", "00001", "Digibank", "2020-11-30")
"""

# Core types
from .core import (
    StateStore,
    StateCursor,
    StateEntry,
    ScanPolicy,
    LedgerConfig,
    LedgerError,
    InvalidKeyPart,
    MalformedKey,
    DuplicateKey,
    NotFound,
    DeserializationError,
    OwnershipMismatch,
    InvalidTransition,
    AlreadyRedeemed,
    StoreUnavailable,
    InvalidInput,
    to_decimal,
    NAMESPACE_MARKER,
    KEY_DELIMITER,
    BOND_LIST_NAME,
    BOND_RECORD_TYPE,
    DEFAULT_DATE_FORMAT,
)

# Composite keys
from .keys import (
    CompositeKey,
    encode_key,
    encode_partial_key,
    decode_key,
    split_key,
    check_key_part,
)

# Record codec
from .serialization import (
    RecordCodec,
    serialize_record,
    deserialize_record,
    record_to_dict,
    record_from_dict,
)

# State lists and queries
from .state_list import StateList
from .query import (
    RangeScan,
    RangeQuery,
    scan_by_prefix,
    same_maturity_month,
    parse_date,
)
from .store import InMemoryStateStore, InMemoryCursor

# Commercial bonds
from .commercial_bond import (
    BondState,
    CommercialBond,
    BondList,
    create_bond,
)
from .bond_contract import (
    BondContext,
    create_context,
    issue,
    buy,
    redeem,
    instantiate,
    get_bond,
    get_bond_rate,
    get_bond_maturity_date,
    get_all_bonds_from_issuer,
    get_closest_bond_rate,
    invoke,
    TRANSACTIONS,
    DEFAULT_BONDS,
)

__all__ = [
    # Core
    'StateStore', 'StateCursor', 'StateEntry', 'ScanPolicy', 'LedgerConfig',
    'LedgerError', 'InvalidKeyPart', 'MalformedKey', 'DuplicateKey', 'NotFound',
    'DeserializationError', 'OwnershipMismatch', 'InvalidTransition',
    'AlreadyRedeemed', 'StoreUnavailable', 'InvalidInput', 'to_decimal',
    'NAMESPACE_MARKER', 'KEY_DELIMITER', 'BOND_LIST_NAME', 'BOND_RECORD_TYPE',
    'DEFAULT_DATE_FORMAT',
    # Keys
    'CompositeKey', 'encode_key', 'encode_partial_key', 'decode_key', 'split_key',
    'check_key_part',
    # Codec
    'RecordCodec', 'serialize_record', 'deserialize_record',
    'record_to_dict', 'record_from_dict',
    # State lists and queries
    'StateList', 'RangeScan', 'RangeQuery', 'scan_by_prefix',
    'same_maturity_month', 'parse_date',
    'InMemoryStateStore', 'InMemoryCursor',
    # Commercial bonds
    'BondState', 'CommercialBond', 'BondList', 'create_bond',
    'BondContext', 'create_context',
    'issue', 'buy', 'redeem', 'instantiate',
    'get_bond', 'get_bond_rate', 'get_bond_maturity_date',
    'get_all_bonds_from_issuer', 'get_closest_bond_rate',
    'invoke', 'TRANSACTIONS', 'DEFAULT_BONDS',
]

__version__ = '1.0.0'
