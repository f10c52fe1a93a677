import json

import aiohttp
import httpx
import pytest
from aioresponses import aioresponses

from suiparse.core.client import parse_transaction_sync
from suiparse.core.config import RpcConfig
from suiparse.core.rpc import (
    SuiRpcClient,
    build_payload,
    call_sync,
    parse_version,
    unwrap_envelope,
)
from suiparse.exceptions import MissingResultError, RpcError, TransportError

RPC_URL = "http://sui.node.test/rpc"


class RecordingCallback:
    """aioresponses callback that keeps the JSON bodies it saw."""

    def __init__(self):
        self.bodies = []

    def __call__(self, url, **kwargs):
        self.bodies.append(kwargs.get("json"))


class TestUnwrapEnvelope:

    def test_result(self):
        assert unwrap_envelope("m", {"jsonrpc": "2.0", "id": 1, "result": {"a": 1}}) == {"a": 1}

    def test_null_result_is_returned(self):
        assert unwrap_envelope("m", {"jsonrpc": "2.0", "id": 1, "result": None}) is None

    def test_error(self):
        envelope = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom", "data": [1]}}

        with pytest.raises(RpcError) as excinfo:
            unwrap_envelope("m", envelope)
        assert (excinfo.value.code, excinfo.value.message, excinfo.value.data) == (-32000, "boom", [1])

    def test_missing_result(self):
        with pytest.raises(MissingResultError):
            unwrap_envelope("sui_getTransactionBlock", {"jsonrpc": "2.0", "id": 1})

    def test_not_an_object(self):
        with pytest.raises(TransportError):
            unwrap_envelope("m", ["jsonrpc"])


@pytest.mark.parametrize("version,expected", [
    ("101", 101),
    ("0", 0),
    ("latest", 0),
    ("-4", 0),
    ("1_000", 0),
    (" 5 ", 0),
    ("+5", 0),
    (str(2 ** 64 - 1), 2 ** 64 - 1),
    (str(2 ** 64), 0),
    (None, 0),
])
def test_parse_version(version, expected):
    assert parse_version(version) == expected


def test_build_payload():
    assert build_payload("suix_getCoinMetadata", ["0x2::sui::SUI"], 7) == {
        "jsonrpc": "2.0",
        "id": 7,
        "method": "suix_getCoinMetadata",
        "params": ["0x2::sui::SUI"],
    }


class TestSuiRpcClient:

    @pytest.mark.asyncio
    async def test_get_transaction_block_sends_options(self, transaction_block):
        callback = RecordingCallback()
        with aioresponses() as mocked:
            mocked.post(RPC_URL, payload={"jsonrpc": "2.0", "id": 1, "result": transaction_block}, callback=callback)

            async with SuiRpcClient(RPC_URL) as rpc:
                result = await rpc.get_transaction_block("0xdead")

        assert result == transaction_block
        assert callback.bodies == [{
            "jsonrpc": "2.0",
            "id": 1,
            "method": "sui_getTransactionBlock",
            "params": [
                "0xdead",
                {"showBalanceChanges": True, "showEvents": True, "showEffects": True},
            ],
        }]

    @pytest.mark.asyncio
    async def test_past_object_sends_integer_version(self):
        callback = RecordingCallback()
        with aioresponses() as mocked:
            mocked.post(
                RPC_URL,
                payload={"jsonrpc": "2.0", "id": 1, "result": {"status": "VersionNotFound"}},
                callback=callback,
            )

            async with SuiRpcClient(RPC_URL) as rpc:
                result = await rpc.try_get_past_object("0xa", 42)

        assert result == {"status": "VersionNotFound"}
        assert callback.bodies[0]["params"] == ["0xa", 42, {"showContent": True}]

    @pytest.mark.asyncio
    async def test_past_object_null_result(self):
        with aioresponses() as mocked:
            mocked.post(RPC_URL, payload={"jsonrpc": "2.0", "id": 1, "result": None})

            async with SuiRpcClient(RPC_URL) as rpc:
                with pytest.raises(MissingResultError):
                    await rpc.try_get_past_object("0xa", 42)

    @pytest.mark.asyncio
    async def test_coin_metadata_null_result(self):
        with aioresponses() as mocked:
            mocked.post(RPC_URL, payload={"jsonrpc": "2.0", "id": 1, "result": None})

            async with SuiRpcClient(RPC_URL) as rpc:
                assert await rpc.get_coin_metadata("0xabc::t::T") is None

    @pytest.mark.asyncio
    async def test_rpc_error(self):
        with aioresponses() as mocked:
            mocked.post(
                RPC_URL,
                payload={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "Transaction not found"}},
            )

            async with SuiRpcClient(RPC_URL) as rpc:
                with pytest.raises(RpcError) as excinfo:
                    await rpc.get_transaction_block("0xmissing")

        assert excinfo.value.message == "Transaction not found"

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        with aioresponses() as mocked:
            mocked.post(RPC_URL, exception=aiohttp.ClientConnectionError("refused"))

            async with SuiRpcClient(RPC_URL) as rpc:
                with pytest.raises(TransportError):
                    await rpc.get_coin_metadata("0x2::sui::SUI")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        with aioresponses() as mocked:
            mocked.post(RPC_URL, status=502, body="Bad Gateway", content_type="text/html")

            async with SuiRpcClient(RPC_URL) as rpc:
                with pytest.raises(TransportError):
                    await rpc.get_coin_metadata("0x2::sui::SUI")

    @pytest.mark.asyncio
    async def test_request_ids_increase(self):
        callback = RecordingCallback()
        with aioresponses() as mocked:
            mocked.post(RPC_URL, payload={"jsonrpc": "2.0", "id": 1, "result": None}, callback=callback, repeat=True)

            async with SuiRpcClient(RPC_URL) as rpc:
                await rpc.get_coin_metadata("a")
                await rpc.get_coin_metadata("b")

        assert [body["id"] for body in callback.bodies] == [1, 2]

    @pytest.mark.asyncio
    async def test_caller_session_is_not_closed(self):
        async with aiohttp.ClientSession() as session:
            rpc = SuiRpcClient(RPC_URL, session=session)
            await rpc.close()
            assert not session.closed


def mock_transport(envelope, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(200, json=envelope)

    return httpx.MockTransport(handler)


class TestSync:

    def test_call_sync(self):
        seen = []
        transport = mock_transport({"jsonrpc": "2.0", "id": 1, "result": {"decimals": 9}}, seen)

        result = call_sync(RPC_URL, "suix_getCoinMetadata", ["0x2::sui::SUI"], transport=transport)

        assert result == {"decimals": 9}
        assert seen[0]["method"] == "suix_getCoinMetadata"

    def test_call_sync_error(self):
        transport = mock_transport({"jsonrpc": "2.0", "id": 1, "error": {"code": -1, "message": "nope"}})

        with pytest.raises(RpcError):
            call_sync(RPC_URL, "m", transport=transport)

    def test_call_sync_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError):
            call_sync(RPC_URL, "m", transport=httpx.MockTransport(handler))

    def test_parse_transaction_sync(self, transaction_block):
        seen = []
        transport = mock_transport({"jsonrpc": "2.0", "id": 1, "result": transaction_block}, seen)

        result = parse_transaction_sync("0xdead", RpcConfig(RPC_URL), transport=transport)

        assert seen[0]["params"][0] == "0xdead"
        assert len(result.balance_changes) == 5
        assert result.gas_cost.computation_cost == "100"
