from __future__ import annotations

from typing import Any, Dict, List

from chains.currency import Currency
from common.errors import KmsError
from kms.store import KmsTransactionStore
from observability import log_event


class KmsService:
    """
    Exposes pending KMS transactions to the external signer.

    The signer polls `get_pending`, signs each entry and broadcasts it with the
    entry id as `signatureId`; `complete` covers signers that broadcast on
    their own.
    """

    def __init__(self, store: KmsTransactionStore) -> None:
        self.store = store

    async def get_pending(self, chain: Currency) -> List[Dict[str, Any]]:
        return self.store.list_pending(chain)

    async def get(self, tx_id: str) -> Dict[str, Any]:
        p = self.store.get(tx_id)
        if p is None:
            raise KmsError(f"Pending transaction {tx_id} not found.", "kms.not.found")
        return p.to_dict()

    async def complete(self, tx_id: str, chain_tx_id: str) -> None:
        if not self.store.complete(tx_id, chain_tx_id):
            raise KmsError(f"Pending transaction {tx_id} not found or already completed.", "kms.not.pending")
        log_event("kms_completed", data={"id": tx_id, "tx_id": chain_tx_id})

    async def delete(self, tx_id: str) -> None:
        if not self.store.delete(tx_id):
            raise KmsError(f"Pending transaction {tx_id} not found.", "kms.not.found")
        log_event("kms_deleted", data={"id": tx_id})
