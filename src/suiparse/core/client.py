"""
Transaction parse client.

Fetches transactions and object snapshots from a Sui full node and turns
them into ParseResult and DynamicFieldBalanceChange records.
"""

import asyncio
import logging
from typing import List, Optional

import httpx

from ..exceptions import InvalidPayload, SuiParseError
from ..parser.coin_type import DecimalsCache, extract_coin_type
from ..parser.models import DynamicFieldBalanceChange, ParseResult
from ..parser.transaction import parse_transaction_value
from ..state.object_changes import BagMember, decode_object_changes, select_bag_members
from ..state.snapshot import ObjectSnapshot, calculate_diff
from .config import RpcConfig
from .rpc import (
    BALANCE_CHANGE_OPTIONS,
    GET_TRANSACTION_BLOCK,
    OBJECT_CHANGE_OPTIONS,
    SuiRpcClient,
    call_sync,
    parse_version,
)

logger = logging.getLogger(__name__)


class TxParseClient:
    """
    High level client over a SuiRpcClient.

    Bag members are processed one after another unless max_concurrency
    is above 1. Either way the returned list follows the order in which
    members appear in the transaction's objectChanges.
    """

    def __init__(self, rpc: SuiRpcClient, max_concurrency: int = 1):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.rpc = rpc
        self.max_concurrency = max_concurrency

    @classmethod
    def from_config(cls, config: RpcConfig) -> "TxParseClient":
        rpc = SuiRpcClient(config.rpc_url, timeout=config.timeout)
        return cls(rpc, max_concurrency=config.max_concurrency)

    async def parse_transaction(self, digest: str) -> ParseResult:
        """
        Fetch a transaction and parse its balance changes and gas cost.

        Raises:
            TransportError, RpcError, MissingResultError: From the node call
            MissingGasUsage: If the response has no gas usage
            InvalidPayload: If the response is malformed
        """
        result = await self.rpc.get_transaction_block(digest, BALANCE_CHANGE_OPTIONS)
        return parse_transaction_value(result)

    async def get_bag_dynamic_field_balance_changes(
        self,
        tx_digest: str,
        bag_id: str,
    ) -> List[DynamicFieldBalanceChange]:
        """
        Reconstruct balance changes of the objects a transaction touched
        inside a bag.

        Only the transaction fetch can raise. Any failure for an individual
        bag member is logged and the member is skipped.
        """
        result = await self.rpc.get_transaction_block(tx_digest, OBJECT_CHANGE_OPTIONS)
        if not isinstance(result, dict):
            raise InvalidPayload("transaction must be an object")

        changes = decode_object_changes(result.get("objectChanges"))
        members = select_bag_members(changes, bag_id)
        logger.debug("Transaction %s touched %d member(s) of bag %s", tx_digest, len(members), bag_id)

        # Scoped to this call; discarded on return.
        cache = DecimalsCache()

        if self.max_concurrency == 1:
            outcomes = []
            for member in members:
                outcomes.append(await self._process_member_safely(member, cache))
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(member: BagMember) -> Optional[DynamicFieldBalanceChange]:
                async with semaphore:
                    return await self._process_member_safely(member, cache)

            outcomes = await asyncio.gather(*(bounded(m) for m in members))

        return [change for change in outcomes if change is not None]

    async def compute_bag_balance_changes(
        self,
        tx_digest: str,
        bag_id: str,
    ) -> List[DynamicFieldBalanceChange]:
        return await self.get_bag_dynamic_field_balance_changes(tx_digest, bag_id)

    async def _process_member_safely(
        self,
        member: BagMember,
        cache: DecimalsCache,
    ) -> Optional[DynamicFieldBalanceChange]:
        try:
            return await self.process_member(member, cache)
        except SuiParseError as e:
            logger.warning("Error processing object %s: %s", member.object_id, e)
            return None
        except Exception:
            logger.exception("Unexpected error processing object %s", member.object_id)
            return None

    async def process_member(
        self,
        member: BagMember,
        cache: DecimalsCache,
    ) -> Optional[DynamicFieldBalanceChange]:
        """
        Diff one bag member between its previous and current version.

        Returns None when the current version carries no balance.
        """
        current = await self.fetch_snapshot(member.object_id, member.version)
        previous = None
        if member.previous_version is not None:
            previous = await self.fetch_snapshot(member.object_id, member.previous_version)

        balance = calculate_diff(current, previous)
        if balance is None:
            logger.debug("Object %s has no balance at version %s", member.object_id, member.version)
            return None

        coin_type = extract_coin_type(current.type_tag or "")
        decimals = await cache.get_decimals(coin_type, self.rpc.get_coin_metadata)

        return DynamicFieldBalanceChange(
            coin_type=coin_type,
            previous_value=str(balance.previous),
            current_value=str(balance.current),
            value_diff=str(balance.diff),
            decimals=decimals,
        )

    async def fetch_snapshot(self, object_id: str, version: str) -> ObjectSnapshot:
        raw = await self.rpc.try_get_past_object(object_id, parse_version(version))
        return ObjectSnapshot.from_json(raw)

    async def close(self) -> None:
        await self.rpc.close()

    async def __aenter__(self) -> "TxParseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def parse_transaction_sync(
    digest: str,
    config: Optional[RpcConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ParseResult:
    """Blocking variant of TxParseClient.parse_transaction for scripts."""
    config = config or RpcConfig()
    result = call_sync(
        config.rpc_url,
        GET_TRANSACTION_BLOCK,
        [digest, BALANCE_CHANGE_OPTIONS],
        timeout=config.timeout,
        transport=transport,
    )
    return parse_transaction_value(result)
