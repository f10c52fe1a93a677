"""Transaction balance parser."""

from typing import Any

from ..exceptions import MissingGasUsage
from .models import BalanceChange, ParseResult, TransactionBlockResponse
from .owner import resolve_owner


def parse_transaction(response: TransactionBlockResponse) -> ParseResult:
    """
    Normalise a decoded transaction response.

    Every raw balance change yields exactly one BalanceChange, in source
    order. Entries with the same coin type are not merged.

    Raises:
        MissingGasUsage: If effects or effects.gasUsed is absent
    """
    effects = response.effects
    if effects is None or effects.gas_used is None:
        raise MissingGasUsage()

    balance_changes = [
        BalanceChange(
            coin_type=change.coin_type,
            amount=change.amount,
            owner=resolve_owner(change.owner) or "",
        )
        for change in response.balance_changes
    ]

    return ParseResult(balance_changes=balance_changes, gas_cost=effects.gas_used)


def parse_transaction_value(value: Any) -> ParseResult:
    """
    Decode an untyped JSON value and parse it.

    Raises:
        InvalidPayload: If the value does not look like a transaction response
        MissingGasUsage: If it does but carries no gas usage
    """
    return parse_transaction(TransactionBlockResponse.from_json(value))
