"""
Sui transaction parsing.

Normalises sui_getTransactionBlock responses into balance changes and gas
cost, and reconstructs balance changes of coins held in a bag through
dynamic fields.

Usage:
    from suiparse import RpcConfig, TxParseClient

    async with TxParseClient.from_config(RpcConfig("mainnet")) as client:
        result = await client.parse_transaction(digest)
        changes = await client.get_bag_dynamic_field_balance_changes(digest, bag_id)
"""

from .core.client import TxParseClient, parse_transaction_sync
from .core.config import RpcConfig
from .core.rpc import SuiRpcClient
from .exceptions import (
    InvalidPayload,
    MissingGasUsage,
    MissingResultError,
    ParseError,
    RpcError,
    SuiParseError,
    TransportError,
)
from .parser import (
    BalanceChange,
    DecimalsCache,
    DynamicFieldBalanceChange,
    GasCostSummary,
    ParseResult,
    decode_owner,
    extract_coin_type,
    parse_transaction,
    parse_transaction_value,
    resolve_owner,
)
from .state import ObjectSnapshot, extract_balance, select_bag_members

__version__ = "0.1.0"

__all__ = [
    "TxParseClient",
    "SuiRpcClient",
    "RpcConfig",
    "parse_transaction_sync",
    "parse_transaction",
    "parse_transaction_value",
    "BalanceChange",
    "GasCostSummary",
    "ParseResult",
    "DynamicFieldBalanceChange",
    "DecimalsCache",
    "decode_owner",
    "resolve_owner",
    "extract_coin_type",
    "ObjectSnapshot",
    "extract_balance",
    "select_bag_members",
    "SuiParseError",
    "TransportError",
    "RpcError",
    "MissingResultError",
    "ParseError",
    "MissingGasUsage",
    "InvalidPayload",
]
