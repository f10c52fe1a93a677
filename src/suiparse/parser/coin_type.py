"""Coin type extraction and per-call decimals cache."""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Optional

from ..exceptions import RpcError

logger = logging.getLogger(__name__)

# Matches the first Coin<T> / Balance<T> occurrence, including one nested
# inside a dynamic_field::Field<K, V> wrapper.
COIN_TYPE_PATTERN = re.compile(r"(?:coin::Coin|balance::Balance)<([^>]+)>")

MetadataFetcher = Callable[[str], Awaitable[Optional[Dict[str, Any]]]]


def extract_coin_type(type_tag: str) -> str:
    """
    Extract the coin type argument from an object type tag.

    "0x2::coin::Coin<0x2::sui::SUI>" -> "0x2::sui::SUI"
    "0x2::dynamic_field::Field<K, 0x2::balance::Balance<0x2::sui::SUI>>" -> "0x2::sui::SUI"

    Tags without a Coin/Balance wrapper are returned unchanged.
    """
    match = COIN_TYPE_PATTERN.search(type_tag)
    if match:
        return match.group(1)
    return type_tag


def decimals_from_metadata(metadata: Any) -> int:
    if not isinstance(metadata, dict):
        return 0
    decimals = metadata.get("decimals")
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        return 0
    if not 0 <= decimals <= 255:
        return 0
    return decimals


class DecimalsCache:
    """
    Coin type -> decimals map owned by a single orchestration call.

    Entries are never invalidated. Failed lookups are not stored, so a
    later member with the same coin type retries the lookup.
    """

    def __init__(self):
        self._decimals: Dict[str, int] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.lookups = 0

    def __contains__(self, coin_type: str) -> bool:
        return coin_type in self._decimals

    def __len__(self) -> int:
        return len(self._decimals)

    def get(self, coin_type: str) -> Optional[int]:
        return self._decimals.get(coin_type)

    async def get_decimals(self, coin_type: str, fetch: MetadataFetcher) -> int:
        """
        Return decimals for a coin type, fetching metadata on a miss.

        Args:
            coin_type: Canonical coin type, e.g. "0x2::sui::SUI"
            fetch: Coroutine returning the suix_getCoinMetadata result

        Returns:
            Decimal precision, or 0 when the node reports an RPC error
        """
        cached = self._decimals.get(coin_type)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(coin_type, asyncio.Lock())
        async with lock:
            # Another task may have filled the entry while we waited.
            cached = self._decimals.get(coin_type)
            if cached is not None:
                return cached

            self.lookups += 1
            try:
                metadata = await fetch(coin_type)
            except RpcError as e:
                logger.warning("Failed to get decimals for %s: %s", coin_type, e)
                return 0

            decimals = decimals_from_metadata(metadata)
            self._decimals[coin_type] = decimals
            return decimals
