"""Owner resolution and transaction balance parsing."""

from .owner import (
    AddressOwner,
    ConsensusV2Owner,
    ImmutableOwner,
    ObjectOwner,
    OpaqueOwner,
    Owner,
    SharedOwner,
    decode_owner,
    resolve_owner,
)
from .models import (
    BalanceChange,
    DynamicFieldBalanceChange,
    GasCostSummary,
    ParseResult,
    TransactionBlockResponse,
)
from .transaction import parse_transaction, parse_transaction_value
from .coin_type import DecimalsCache, extract_coin_type
