from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from chains.currency import EVM_CHAINS, Currency
from chains.nodes import NodeResolver
from common.errors import MultiTokenError, UnsupportedChainError
from kms.broadcast import Broadcaster
from kms.store import KmsTransactionStore
from multitoken.abi import MULTITOKEN_READ_ABI
from multitoken.dispatch import DispatchTable, Operation, select_variant
from multitoken.models import (
    BurnMultiToken,
    BurnMultiTokenBatch,
    DeployMultiToken,
    MintMultiToken,
    MintMultiTokenBatch,
    TransferMultiToken,
    TransferMultiTokenBatch,
    UpdateCashbackMultiToken,
)
from observability import Metrics, log_event

_WEI = Decimal(10) ** 18


def _from_wei(value: Any) -> str:
    return format((Decimal(int(value)) / _WEI).normalize(), "f")


def _plain(obj: Any) -> Dict[str, Any]:
    # AttributeDict / HexBytes -> JSON-safe dict
    return json.loads(Web3.to_json(obj))


class MultiTokenService(ABC):
    """
    Multi-token (ERC-1155) operations on EVM chains.

    Mutating operations prepare a transaction through the SDK preparer picked
    from the dispatch table, then either hand it to KMS (`signature_id` set)
    or broadcast it. Subclasses provide the four collaborators.
    """

    def __init__(self, dispatch: DispatchTable, metrics: Optional[Metrics] = None) -> None:
        self.dispatch = dispatch
        self.metrics = metrics

    @abstractmethod
    async def store_kms_transaction(
        self, tx_data: str, chain: Currency, signature_ids: List[str], index: Optional[int] = None
    ) -> str:
        pass

    @abstractmethod
    async def is_testnet(self) -> bool:
        pass

    @abstractmethod
    async def get_nodes_url(self, chain: Currency, testnet: bool) -> List[str]:
        pass

    @abstractmethod
    async def broadcast(self, chain: Currency, tx_data: str, signature_id: Optional[str] = None) -> Any:
        pass

    async def _submit(self, operation: Operation, body: Any) -> Any:
        chain = body.chain
        ref = self.dispatch.lookup(chain, operation, select_variant(operation, body))
        testnet = await self.is_testnet()
        provider = (await self.get_nodes_url(chain, testnet))[0]
        started = time.perf_counter()
        tx_data = await self.dispatch.prepare(ref, body, testnet, provider)
        if self.metrics is not None:
            self.metrics.observe_ms(f"prepare_{operation.value}", (time.perf_counter() - started) * 1000)

        if body.signature_id:
            stored = await self.store_kms_transaction(tx_data, chain, [body.signature_id], body.index)
            self._record(operation, "kms")
            return {"signatureId": stored}
        result = await self.broadcast(chain, tx_data)
        self._record(operation, "broadcast")
        return result

    def _record(self, operation: Operation, path: str) -> None:
        if self.metrics is not None:
            self.metrics.record_dispatch(operation.value, path)

    async def transfer_multi_token(self, body: TransferMultiToken) -> Any:
        return await self._submit(Operation.TRANSFER, body)

    async def transfer_multi_token_batch(self, body: TransferMultiTokenBatch) -> Any:
        return await self._submit(Operation.TRANSFER_BATCH, body)

    async def mint_multi_token(self, body: MintMultiToken) -> Any:
        return await self._submit(Operation.MINT, body)

    async def mint_multi_token_batch(self, body: MintMultiTokenBatch) -> Any:
        return await self._submit(Operation.MINT_BATCH, body)

    async def burn_multi_token(self, body: BurnMultiToken) -> Any:
        return await self._submit(Operation.BURN, body)

    async def burn_multi_token_batch(self, body: BurnMultiTokenBatch) -> Any:
        return await self._submit(Operation.BURN_BATCH, body)

    async def deploy_multi_token(self, body: DeployMultiToken) -> Any:
        return await self._submit(Operation.DEPLOY, body)

    async def update_cashback_for_author(self, body: UpdateCashbackMultiToken) -> Any:
        return await self._submit(Operation.UPDATE_CASHBACK, body)

    async def _get_client(self, chain: Currency, testnet: bool) -> AsyncWeb3:
        return AsyncWeb3(AsyncHTTPProvider((await self.get_nodes_url(chain, testnet))[0]))

    async def _contract(self, chain: Currency, contract_address: str):
        if chain not in EVM_CHAINS:
            raise UnsupportedChainError(chain)
        w3 = await self._get_client(chain, await self.is_testnet())
        return w3.eth.contract(address=AsyncWeb3.to_checksum_address(contract_address), abi=MULTITOKEN_READ_ABI)

    def _read_failed(self, e: Exception) -> MultiTokenError:
        log_event("multitoken_read_failed", data={"error": repr(e)}, level="error")
        return MultiTokenError(f"Unable to obtain information for token. {e}", "nft.erc721.failed")

    async def get_metadata_multi_token(self, chain: Currency, token: str, contract_address: str) -> Dict[str, Any]:
        c = await self._contract(chain, contract_address)
        try:
            return {"data": await c.functions.tokenURI(int(token)).call()}
        except Exception as e:
            raise self._read_failed(e) from e

    async def get_royalty_multi_token(self, chain: Currency, token: str, contract_address: str) -> Dict[str, Any]:
        c = await self._contract(chain, contract_address)
        try:
            addresses, values = await asyncio.gather(
                c.functions.tokenCashbackRecipients(int(token)).call(),
                c.functions.tokenCashbackValues(int(token)).call(),
            )
            return {"addresses": list(addresses), "values": [_from_wei(v) for v in values]}
        except Exception as e:
            raise self._read_failed(e) from e

    async def get_tokens_of_owner(self, chain: Currency, address: str, contract_address: str) -> Dict[str, Any]:
        c = await self._contract(chain, contract_address)
        try:
            owner = AsyncWeb3.to_checksum_address(address)
            return {"data": [str(t) for t in await c.functions.tokensOfOwner(owner).call()]}
        except Exception as e:
            raise self._read_failed(e) from e

    async def get_transaction(self, chain: Currency, tx_id: str) -> Dict[str, Any]:
        if chain not in EVM_CHAINS:
            raise UnsupportedChainError(chain)
        try:
            w3 = await self._get_client(chain, await self.is_testnet())
            transaction = _plain(await w3.eth.get_transaction(tx_id))
            tx_hash = transaction.pop("hash", None)
            for key in ("r", "s", "v"):
                transaction.pop(key, None)
            receipt: Dict[str, Any] = {}
            try:
                receipt = _plain(await w3.eth.get_transaction_receipt(tx_hash))
            except Exception as e:
                # still pending or pruned; the transaction itself is returned
                log_event("multitoken_receipt_missing", data={"hash": tx_hash, "error": repr(e)}, level="debug")
                transaction["transactionHash"] = tx_hash
            return {**transaction, **receipt}
        except Exception as e:
            log_event("multitoken_tx_lookup_failed", data={"hash": tx_id, "error": repr(e)}, level="error")
            raise MultiTokenError(
                "Transaction not found. Possible not exists or is still pending.", "tx.not.found"
            ) from e


class DefaultMultiTokenService(MultiTokenService):
    """
    MultiTokenService backed by the process-wide node resolver, KMS store and broadcaster.
    """

    def __init__(
        self,
        dispatch: DispatchTable,
        nodes: NodeResolver,
        store: KmsTransactionStore,
        broadcaster: Broadcaster,
        *,
        testnet: bool = False,
        metrics: Optional[Metrics] = None,
    ) -> None:
        super().__init__(dispatch, metrics)
        self.nodes = nodes
        self.store = store
        self.broadcaster = broadcaster
        self.testnet = testnet

    async def store_kms_transaction(
        self, tx_data: str, chain: Currency, signature_ids: List[str], index: Optional[int] = None
    ) -> str:
        return self.store.store(tx_data, chain, signature_ids, index)

    async def is_testnet(self) -> bool:
        return self.testnet

    async def get_nodes_url(self, chain: Currency, testnet: bool) -> List[str]:
        return await self.nodes.get_nodes_url(chain, testnet)

    async def broadcast(self, chain: Currency, tx_data: str, signature_id: Optional[str] = None) -> Any:
        return await self.broadcaster.broadcast(chain, tx_data, signature_id)
