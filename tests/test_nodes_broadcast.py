import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chains.currency import AlgoNodeType, Currency
from chains.nodes import NodeResolver
from common.errors import AppError
from kms.broadcast import Broadcaster
from kms.store import KmsTransactionStore
from observability import Metrics


@pytest.mark.asyncio
async def test_default_node_urls():
    nodes = NodeResolver()
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("NODE_URLS_CELO_TESTNET", None)
        assert await nodes.get_nodes_url(Currency.CELO, True) == ["https://alfajores-forno.celo-testnet.org"]
    assert (await nodes.get_nodes_url("ETH", False))[0].startswith("https://")


@pytest.mark.asyncio
async def test_env_override_is_split_and_trimmed():
    nodes = NodeResolver()
    with patch.dict(os.environ, {"NODE_URLS_BSC": "https://a.node/, https://b.node"}):
        assert await nodes.get_nodes_url(Currency.BSC, False) == ["https://a.node", "https://b.node"]
    with patch.dict(os.environ, {"ALGO_INDEXER_URLS_TESTNET": "https://idx.test/"}):
        assert await nodes.get_algo_nodes_url(AlgoNodeType.INDEXER, True) == ["https://idx.test"]


@pytest.mark.asyncio
async def test_algod_uses_algo_chain_urls():
    nodes = NodeResolver()
    with patch.dict(os.environ, {"NODE_URLS_ALGO": "https://algod.node"}):
        assert await nodes.get_algo_nodes_url(AlgoNodeType.ALGOD, False) == ["https://algod.node"]


@pytest.fixture
def nodes():
    resolver = MagicMock()
    resolver.get_nodes_url = AsyncMock(return_value=["https://first.node", "https://second.node"])
    return resolver


@pytest.mark.asyncio
async def test_broadcast_evm_completes_kms_entry(nodes, monkeypatch):
    store = KmsTransactionStore(db_path="")
    ref = store.store("0xunsigned", Currency.ETH, ["sig"])
    metrics = Metrics()
    b = Broadcaster(nodes, store, testnet=True, metrics=metrics)
    send = AsyncMock(return_value="0xhash")
    monkeypatch.setattr(b, "_send_evm", send)

    res = await b.broadcast("ETH", "f86b01", ref)

    assert res == {"txId": "0xhash", "failed": False}
    send.assert_awaited_once_with("https://first.node", "f86b01")
    nodes.get_nodes_url.assert_awaited_once_with(Currency.ETH, True)
    assert store.get(ref).tx_id == "0xhash"
    assert metrics.snapshot()["counters"]["broadcast_eth"] == 1


@pytest.mark.asyncio
async def test_broadcast_algo_runs_in_thread(nodes, monkeypatch):
    b = Broadcaster(nodes, KmsTransactionStore(db_path=""))
    monkeypatch.setattr(b, "_send_algo", lambda url, tx: f"ALGO:{url}:{tx}")

    res = await b.broadcast(Currency.ALGO, "c2lnbmVk")

    assert res["txId"] == "ALGO:https://first.node:c2lnbmVk"


@pytest.mark.asyncio
async def test_broadcast_unknown_chain(nodes):
    b = Broadcaster(nodes, KmsTransactionStore(db_path=""))
    with pytest.raises(AppError) as e:
        await b.broadcast("DOGE", "00")
    assert e.value.code == "unsuported.chain"
    nodes.get_nodes_url.assert_not_called()
