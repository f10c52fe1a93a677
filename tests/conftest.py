import json
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

BAG_ID = "0xbag"


def load_fixture(name: str):
    with open(FIXTURES / name, encoding="utf-8") as f:
        return json.load(f)


def move_object(type_tag: str, fields: dict, status: str = "VersionFound") -> dict:
    """A sui_tryGetPastObject result with Move content."""
    return {
        "status": status,
        "details": {
            "objectId": "0x0",
            "version": "1",
            "content": {
                "dataType": "moveObject",
                "type": type_tag,
                "hasPublicTransfer": False,
                "fields": fields,
            },
        },
    }


class FakeRpc:
    """
    In-memory stand-in for SuiRpcClient.

    objects maps (object_id, version) to a past object result or an
    exception to raise; metadata maps coin type to a metadata result or
    an exception.
    """

    def __init__(self, transaction=None, objects=None, metadata=None):
        self.transaction = transaction
        self.objects = objects or {}
        self.metadata = metadata or {}
        self.calls = []
        self.closed = False

    async def get_transaction_block(self, digest, options=None):
        self.calls.append(("sui_getTransactionBlock", digest, options))
        if isinstance(self.transaction, Exception):
            raise self.transaction
        return self.transaction

    async def try_get_past_object(self, object_id, version):
        self.calls.append(("sui_tryGetPastObject", object_id, version))
        result = self.objects.get((object_id, version))
        if isinstance(result, Exception):
            raise result
        if result is None:
            return {"status": "VersionNotFound", "details": [object_id, version]}
        return result

    async def get_coin_metadata(self, coin_type):
        self.calls.append(("suix_getCoinMetadata", coin_type))
        result = self.metadata.get(coin_type)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture
def transaction_block():
    return load_fixture("transaction_block.json")


@pytest.fixture
def object_changes_block():
    return load_fixture("object_changes.json")
