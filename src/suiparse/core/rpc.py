"""
Sui JSON-RPC transport.

SuiRpcClient is the async client used by TxParseClient. call_sync is a
blocking equivalent for scripts that do not run an event loop.
"""

import asyncio
import logging
import re
from typing import Any, Dict, Optional

import aiohttp
import httpx

from ..exceptions import MissingResultError, RpcError, TransportError
from ..state.snapshot import U64_MAX

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")

GET_TRANSACTION_BLOCK = "sui_getTransactionBlock"
TRY_GET_PAST_OBJECT = "sui_tryGetPastObject"
GET_COIN_METADATA = "suix_getCoinMetadata"

# Response options for sui_getTransactionBlock
BALANCE_CHANGE_OPTIONS = {
    "showBalanceChanges": True,
    "showEvents": True,
    "showEffects": True,
}
OBJECT_CHANGE_OPTIONS = {"showObjectChanges": True}


def build_payload(method: str, params: Optional[list] = None, request_id: int = 1) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": method,
        "params": params or [],
    }


def unwrap_envelope(method: str, envelope: Any) -> Any:
    """
    Return the result member of a JSON-RPC response.

    Raises:
        RpcError: If the envelope has an error member
        MissingResultError: If it has no result member
        TransportError: If it is not a JSON object
    """
    if not isinstance(envelope, dict):
        raise TransportError(f"{method}: response is not a JSON-RPC object")

    error = envelope.get("error")
    if error is not None:
        if isinstance(error, dict):
            raise RpcError(
                code=error.get("code", 0),
                message=str(error.get("message", "")),
                data=error.get("data"),
            )
        raise RpcError(code=0, message=str(error))

    if "result" not in envelope:
        raise MissingResultError(method)
    return envelope["result"]


def parse_version(version: str) -> int:
    """Object versions arrive as decimal text; anything that is not a u64 maps to 0."""
    if not isinstance(version, str) or not _DIGITS.fullmatch(version):
        return 0
    number = int(version)
    return number if number <= U64_MAX else 0


class SuiRpcClient:
    """
    Simple async Sui RPC client.

    Pass an existing aiohttp session to share a connection pool; otherwise
    one is created on first use and closed by close().
    """

    def __init__(
        self,
        rpc_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize RPC client.

        Args:
            rpc_url: RPC endpoint URL
            session: Optional caller-owned session
            timeout: Total timeout per request in seconds
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._request_id = 0

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def _call(self, method: str, params: list = None) -> Any:
        """Make an RPC call."""
        self._request_id += 1
        payload = build_payload(method, params, self._request_id)
        logger.debug("rpc %s params=%s", method, payload["params"])

        session = self._get_session()
        try:
            async with session.post(self.rpc_url, json=payload) as response:
                envelope = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransportError(f"{method} request failed: {e}") from e

        return unwrap_envelope(method, envelope)

    async def get_transaction_block(self, digest: str, options: Optional[dict] = None) -> Any:
        """Fetch a transaction block with the given response options."""
        return await self._call(
            GET_TRANSACTION_BLOCK,
            [digest, options if options is not None else BALANCE_CHANGE_OPTIONS],
        )

    async def try_get_past_object(self, object_id: str, version: int) -> Dict[str, Any]:
        """Fetch an object as of `version` with its Move content."""
        result = await self._call(
            TRY_GET_PAST_OBJECT,
            [object_id, version, {"showContent": True}],
        )
        if result is None:
            raise MissingResultError(TRY_GET_PAST_OBJECT)
        return result

    async def get_coin_metadata(self, coin_type: str) -> Optional[Dict[str, Any]]:
        """Fetch coin metadata; None when the node knows no metadata."""
        return await self._call(GET_COIN_METADATA, [coin_type])

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "SuiRpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def call_sync(
    rpc_url: str,
    method: str,
    params: Optional[list] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> Any:
    """Blocking JSON-RPC call over httpx."""
    payload = build_payload(method, params)
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(rpc_url, json=payload)
            envelope = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise TransportError(f"{method} request failed: {e}") from e

    return unwrap_envelope(method, envelope)
