from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from algosdk import account, encoding, mnemonic, transaction
from algosdk.error import IndexerHTTPError
from algosdk.v2client import algod, indexer

from algo.keys import from_secret, to_algo, to_microalgos, to_secret
from algo.models import AlgoTransaction
from chains.currency import AlgoNodeType, Currency
from chains.nodes import NodeResolver
from common.errors import AlgoError, RequestValidationFailed
from kms.broadcast import Broadcaster
from kms.store import KmsTransactionStore
from observability import log_event


def _microalgos(field: str, amount: str) -> int:
    try:
        return to_microalgos(amount)
    except ValueError as e:
        raise RequestValidationFailed([{"loc": ["body", field], "msg": str(e), "type": "value_error"}]) from e


class AlgoService(ABC):
    """
    Algorand node proxy, wallet helpers and payment submission.

    algosdk clients are blocking; their calls run in worker threads.
    """

    def __init__(self, timeout_sec: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.timeout_sec = timeout_sec
        self._transport = transport

    @abstractmethod
    async def is_testnet(self) -> bool:
        pass

    @abstractmethod
    async def get_nodes_url(self, node_type: AlgoNodeType, testnet: bool) -> List[str]:
        pass

    @abstractmethod
    async def store_kms_transaction(
        self, tx_data: str, chain: Currency, signature_ids: List[str], index: Optional[int] = None
    ) -> str:
        pass

    @abstractmethod
    async def broadcast_raw(self, chain: Currency, tx_data: str, signature_id: Optional[str] = None) -> Any:
        pass

    def node_token(self, node_type: AlgoNodeType) -> str:
        return ""

    def _token_header(self, node_type: AlgoNodeType) -> Dict[str, str]:
        token = self.node_token(node_type)
        if not token:
            return {}
        name = "X-Algo-API-Token" if node_type is AlgoNodeType.ALGOD else "X-Indexer-API-Token"
        return {name: token}

    async def _node_url(self, node_type: AlgoNodeType) -> str:
        return (await self.get_nodes_url(node_type, await self.is_testnet()))[0]

    async def _node_request(
        self,
        method: str,
        node_type: AlgoNodeType,
        path: str,
        *,
        params: Any = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> Any:
        base = await self._node_url(node_type)
        url = f"{base}/{path.lstrip('/')}" if path else base
        headers = self._token_header(node_type)
        if content_type:
            headers["Content-Type"] = content_type
        async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self._transport) as client:
            resp = await client.request(method, url, params=params, content=content, headers=headers)
        if resp.status_code >= 400:
            log_event(
                "algo_node_error",
                data={"node": node_type.value, "status": resp.status_code, "path": path},
                level="warning",
            )
            raise AlgoError(resp.text or f"Node responded with {resp.status_code}.", "algo.node.error",
                            status_code=resp.status_code)
        if "json" in resp.headers.get("content-type", ""):
            return resp.json()
        return resp.text

    async def node_get_method(self, query: Any, node_type: AlgoNodeType, path: str = "") -> Any:
        return await self._node_request("GET", node_type, path, params=query)

    async def node_post_method(
        self, body: bytes, node_type: AlgoNodeType, path: str = "", content_type: Optional[str] = None
    ) -> Any:
        return await self._node_request("POST", node_type, path, content=body, content_type=content_type)

    async def _algod(self) -> algod.AlgodClient:
        return algod.AlgodClient(self.node_token(AlgoNodeType.ALGOD), await self._node_url(AlgoNodeType.ALGOD))

    async def _indexer(self) -> indexer.IndexerClient:
        return indexer.IndexerClient(
            self.node_token(AlgoNodeType.INDEXER), await self._node_url(AlgoNodeType.INDEXER)
        )

    async def generate_wallet(self, phrase: Optional[str] = None) -> Dict[str, str]:
        if phrase:
            private_key = mnemonic.to_private_key(phrase)
            address = account.address_from_private_key(private_key)
        else:
            private_key, address = account.generate_account()
        return {"address": address, "secret": to_secret(private_key)}

    async def generate_address(self, secret: str) -> Dict[str, str]:
        return {"address": account.address_from_private_key(from_secret(secret))}

    async def get_balance(self, address: str) -> Dict[str, str]:
        client = await self._algod()
        info = await asyncio.to_thread(client.account_info, address)
        return {"balance": to_algo(info.get("amount", 0))}

    async def send_transaction(self, body: AlgoTransaction) -> Any:
        fee = _microalgos("fee", body.fee)
        amount = _microalgos("amount", body.amount)
        client = await self._algod()
        params = await asyncio.to_thread(client.suggested_params)
        params.flat_fee = True
        params.fee = fee

        private_key = None
        sender = body.from_
        if not body.signature_id:
            private_key = from_secret(body.from_private_key)
            sender = account.address_from_private_key(private_key)
        txn = transaction.PaymentTxn(
            sender=sender,
            sp=params,
            receiver=body.to,
            amt=amount,
            note=body.note.encode("utf-8") if body.note else None,
        )
        if body.signature_id:
            stored = await self.store_kms_transaction(
                encoding.msgpack_encode(txn), Currency.ALGO, [body.signature_id], body.index
            )
            return {"signatureId": stored}
        return await self.broadcast_raw(Currency.ALGO, encoding.msgpack_encode(txn.sign(private_key)))

    async def broadcast(self, tx_data: str, signature_id: Optional[str] = None) -> Any:
        return await self.broadcast_raw(Currency.ALGO, tx_data, signature_id)

    async def get_current_block(self) -> int:
        client = await self._algod()
        status = await asyncio.to_thread(client.status)
        return int(status["last-round"])

    async def get_block(self, round_number: int) -> Dict[str, Any]:
        client = await self._algod()
        res = await asyncio.to_thread(client.block_info, round_number)
        return res.get("block", res)

    async def get_transaction(self, txid: str) -> Dict[str, Any]:
        client = await self._indexer()
        try:
            res = await asyncio.to_thread(client.transaction, txid)
        except IndexerHTTPError as e:
            # the indexer reports a missing id only through the message text
            reason = str(e).lower()
            if "no transaction found" in reason or "not found" in reason:
                raise AlgoError("Transaction not found.", "tx.not.found") from e
            raise
        return res["transaction"]

    async def get_pay_transactions(
        self, from_time: str, to_time: str, limit: Optional[int] = None, next_token: Optional[str] = None
    ) -> Dict[str, Any]:
        client = await self._indexer()
        res = await asyncio.to_thread(
            client.search_transactions,
            limit=limit,
            next_page=next_token,
            txn_type="pay",
            start_time=from_time,
            end_time=to_time,
        )
        return {"nextToken": res.get("next-token"), "transactions": res.get("transactions", [])}


class DefaultAlgoService(AlgoService):
    """
    AlgoService backed by the process-wide node resolver, KMS store and broadcaster.
    """

    def __init__(
        self,
        nodes: NodeResolver,
        store: KmsTransactionStore,
        broadcaster: Broadcaster,
        *,
        testnet: bool = False,
        algod_token: str = "",
        indexer_token: str = "",
        timeout_sec: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout_sec=timeout_sec, transport=transport)
        self.nodes = nodes
        self.store = store
        self.broadcaster = broadcaster
        self.testnet = testnet
        self._tokens = {AlgoNodeType.ALGOD: algod_token, AlgoNodeType.INDEXER: indexer_token}

    def node_token(self, node_type: AlgoNodeType) -> str:
        return self._tokens.get(node_type, "")

    async def is_testnet(self) -> bool:
        return self.testnet

    async def get_nodes_url(self, node_type: AlgoNodeType, testnet: bool) -> List[str]:
        return await self.nodes.get_algo_nodes_url(node_type, testnet)

    async def store_kms_transaction(
        self, tx_data: str, chain: Currency, signature_ids: List[str], index: Optional[int] = None
    ) -> str:
        return self.store.store(tx_data, chain, signature_ids, index)

    async def broadcast_raw(self, chain: Currency, tx_data: str, signature_id: Optional[str] = None) -> Any:
        return await self.broadcaster.broadcast(chain, tx_data, signature_id)
