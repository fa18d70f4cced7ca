from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from algosdk.v2client import algod
from web3 import AsyncHTTPProvider, AsyncWeb3

from chains.currency import EVM_CHAINS, Currency
from chains.nodes import NodeResolver
from common.errors import AppError
from kms.store import KmsTransactionStore
from observability import Metrics, log_event


class Broadcaster:
    """
    Submits signed transactions to the network of `chain`.

    When `signature_id` is given the transaction came back from the KMS signer,
    so the matching pending entry is marked complete after submission.
    """

    def __init__(
        self,
        nodes: NodeResolver,
        store: KmsTransactionStore,
        *,
        testnet: bool = False,
        algod_token: str = "",
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.nodes = nodes
        self.store = store
        self.testnet = testnet
        self.algod_token = algod_token
        self.metrics = metrics

    async def broadcast(self, chain: Currency | str, tx_data: str, signature_id: Optional[str] = None) -> Dict[str, Any]:
        try:
            chain = Currency(chain)
        except ValueError:
            raise AppError("unsuported.chain", f"Unsupported chain {chain}.") from None
        url = (await self.nodes.get_nodes_url(chain, self.testnet))[0]
        if chain in EVM_CHAINS:
            tx_id = await self._send_evm(url, tx_data)
        else:
            tx_id = await asyncio.to_thread(self._send_algo, url, tx_data)
        log_event("tx_broadcast", data={"chain": chain.value, "tx_id": tx_id, "kms": bool(signature_id)})
        if self.metrics is not None:
            self.metrics.inc(f"broadcast_{chain.value.lower()}")
        if signature_id:
            self.store.complete(signature_id, tx_id)
        return {"txId": tx_id, "failed": False}

    async def _send_evm(self, url: str, tx_data: str) -> str:
        w3 = AsyncWeb3(AsyncHTTPProvider(url))
        raw = tx_data if tx_data.startswith("0x") else f"0x{tx_data}"
        tx_hash = await w3.eth.send_raw_transaction(raw)
        return AsyncWeb3.to_hex(tx_hash)

    def _send_algo(self, url: str, tx_data: str) -> str:
        # tx_data is a base64 msgpack-encoded signed transaction
        client = algod.AlgodClient(self.algod_token, url)
        return client.send_raw_transaction(tx_data)
