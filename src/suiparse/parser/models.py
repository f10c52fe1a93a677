"""
Data models for transaction parsing.

Wire records decode the camelCase JSON returned by the node and raise
InvalidPayload on malformed shapes. Result records serialise back to
the same camelCase convention via to_dict().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidPayload
from .owner import Owner, decode_owner


def require_str(raw: Dict[str, Any], key: str, context: str) -> str:
    """Fetch a mandatory string member or raise InvalidPayload."""
    value = raw.get(key)
    if not isinstance(value, str):
        raise InvalidPayload(f"{context}.{key} must be a string, got {type(value).__name__}")
    return value


def require_dict(raw: Any, context: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise InvalidPayload(f"{context} must be an object, got {type(raw).__name__}")
    return raw


@dataclass(frozen=True)
class BalanceChange:
    """A single balance delta reported by a transaction."""
    coin_type: str
    amount: str  # signed integer as decimal text
    owner: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "coinType": self.coin_type,
            "amount": self.amount,
            "owner": self.owner,
        }


@dataclass(frozen=True)
class GasCostSummary:
    computation_cost: str
    storage_cost: str
    storage_rebate: str
    non_refundable_storage_fee: str

    @classmethod
    def from_json(cls, raw: Any) -> "GasCostSummary":
        raw = require_dict(raw, "effects.gasUsed")
        return cls(
            computation_cost=require_str(raw, "computationCost", "gasUsed"),
            storage_cost=require_str(raw, "storageCost", "gasUsed"),
            storage_rebate=require_str(raw, "storageRebate", "gasUsed"),
            non_refundable_storage_fee=require_str(raw, "nonRefundableStorageFee", "gasUsed"),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "computationCost": self.computation_cost,
            "storageCost": self.storage_cost,
            "storageRebate": self.storage_rebate,
            "nonRefundableStorageFee": self.non_refundable_storage_fee,
        }


@dataclass(frozen=True)
class ParseResult:
    """Output of the transaction balance parser."""
    balance_changes: List[BalanceChange]
    gas_cost: GasCostSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balanceChanges": [c.to_dict() for c in self.balance_changes],
            "gasCost": self.gas_cost.to_dict(),
        }


@dataclass(frozen=True)
class DynamicFieldBalanceChange:
    """Reconstructed balance delta of one bag member."""
    coin_type: str
    previous_value: str
    current_value: str
    value_diff: str
    decimals: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coinType": self.coin_type,
            "previousValue": self.previous_value,
            "currentValue": self.current_value,
            "valueDiff": self.value_diff,
            "decimals": self.decimals,
        }


@dataclass
class RawBalanceChange:
    coin_type: str
    amount: str
    owner: Optional[Owner] = None

    @classmethod
    def from_json(cls, raw: Any) -> "RawBalanceChange":
        raw = require_dict(raw, "balanceChanges[]")
        return cls(
            coin_type=require_str(raw, "coinType", "balanceChanges[]"),
            amount=require_str(raw, "amount", "balanceChanges[]"),
            owner=decode_owner(raw.get("owner")),
        )


@dataclass
class TransactionEffects:
    gas_used: Optional[GasCostSummary] = None

    @classmethod
    def from_json(cls, raw: Any) -> "TransactionEffects":
        raw = require_dict(raw, "effects")
        gas_used = raw.get("gasUsed")
        return cls(gas_used=GasCostSummary.from_json(gas_used) if gas_used is not None else None)


@dataclass
class TransactionBlockResponse:
    """Subset of a sui_getTransactionBlock result used by the parser."""
    digest: Optional[str] = None
    balance_changes: List[RawBalanceChange] = field(default_factory=list)
    effects: Optional[TransactionEffects] = None

    @classmethod
    def from_json(cls, raw: Any) -> "TransactionBlockResponse":
        raw = require_dict(raw, "transaction")

        digest = raw.get("digest")
        if digest is not None and not isinstance(digest, str):
            raise InvalidPayload("transaction.digest must be a string")

        changes = raw.get("balanceChanges")
        if changes is None:
            changes = []
        if not isinstance(changes, list):
            raise InvalidPayload("transaction.balanceChanges must be a list")

        effects = raw.get("effects")
        return cls(
            digest=digest,
            balance_changes=[RawBalanceChange.from_json(c) for c in changes],
            effects=TransactionEffects.from_json(effects) if effects is not None else None,
        )
