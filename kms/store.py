"""
Pending KMS transaction store.

When a request carries `signatureId`, the prepared (unsigned) transaction is
not broadcast. It is stored here until an external KMS signer picks it up,
signs it and broadcasts it back through `POST /broadcast` with the same id.

Rows are kept in memory and, when `KMS_DB_PATH` is set, in SQLite so that a
restart does not lose transactions still waiting for a signature.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from observability import Metrics


@dataclass
class PendingTransaction:
    id: str
    chain: str
    serialized_transaction: str
    signature_ids: List[str]
    index: Optional[int]
    created_at: float
    tx_id: Optional[str] = None
    completed_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "chain": self.chain,
            "serializedTransaction": self.serialized_transaction,
            "hashes": list(self.signature_ids),
            "index": self.index,
            "txId": self.tx_id,
        }


def _chain_name(chain: Any) -> str:
    return str(getattr(chain, "value", chain))


class KmsTransactionStore:
    """
    Thread-safe store of transactions waiting for KMS signing.
    """

    def __init__(self, db_path: Optional[str] = None, metrics: Optional[Metrics] = None) -> None:
        self._lock = threading.Lock()
        self.metrics = metrics
        self._items: Dict[str, PendingTransaction] = {}
        self._conn: Optional[sqlite3.Connection] = None
        self._path = db_path if db_path is not None else (os.getenv("KMS_DB_PATH") or "").strip()

    def persistence_enabled(self) -> bool:
        return bool(self._path)

    def _get_conn(self) -> Optional[sqlite3.Connection]:
        if not self._path:
            return None
        if self._conn is not None:
            return self._conn
        parent = os.path.dirname(self._path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # create lazily
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kms_transactions(
                id TEXT PRIMARY KEY,
                chain TEXT NOT NULL,
                serialized_transaction TEXT NOT NULL,
                signature_ids_json TEXT NOT NULL,
                tx_index INTEGER,
                created_at REAL NOT NULL,
                tx_id TEXT,
                completed_at REAL
            )
            """
        )
        self._conn.commit()
        return self._conn

    def _persist(self, p: PendingTransaction) -> None:
        conn = self._get_conn()
        if conn is None:
            return
        conn.execute(
            """
            INSERT INTO kms_transactions(
                id, chain, serialized_transaction, signature_ids_json, tx_index,
                created_at, tx_id, completed_at
            )
            VALUES(?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
              tx_id=excluded.tx_id,
              completed_at=excluded.completed_at
            """,
            (
                p.id,
                p.chain,
                p.serialized_transaction,
                json.dumps(p.signature_ids),
                p.index,
                float(p.created_at),
                p.tx_id,
                p.completed_at,
            ),
        )
        conn.commit()

    @staticmethod
    def _from_row(row: tuple) -> PendingTransaction:
        try:
            signature_ids = json.loads(row[3]) if row[3] else []
            if not isinstance(signature_ids, list):
                signature_ids = []
        except ValueError:
            signature_ids = []
        return PendingTransaction(
            id=str(row[0]),
            chain=str(row[1]),
            serialized_transaction=str(row[2]),
            signature_ids=[str(s) for s in signature_ids],
            index=int(row[4]) if row[4] is not None else None,
            created_at=float(row[5]),
            tx_id=str(row[6]) if row[6] is not None else None,
            completed_at=float(row[7]) if row[7] is not None else None,
        )

    def _load(self, tx_id: str) -> Optional[PendingTransaction]:
        conn = self._get_conn()
        if conn is None:
            return None
        row = conn.execute(
            """
            SELECT id, chain, serialized_transaction, signature_ids_json, tx_index,
                   created_at, tx_id, completed_at
            FROM kms_transactions
            WHERE id = ?
            """,
            (tx_id,),
        ).fetchone()
        if not row:
            return None
        return self._from_row(row)

    def store(self, tx_data: str, chain: str, signature_ids: List[str], index: Optional[int] = None) -> str:
        """
        Store an unsigned transaction and return its reference.
        """
        with self._lock:
            p = PendingTransaction(
                id=uuid.uuid4().hex,
                chain=_chain_name(chain),
                serialized_transaction=str(tx_data),
                signature_ids=[str(s) for s in signature_ids],
                index=index,
                created_at=time.time(),
            )
            self._items[p.id] = p
            self._persist(p)
        if self.metrics is not None:
            self.metrics.inc(f"kms_stored_{p.chain.lower()}")
        return p.id

    def get(self, tx_id: str) -> Optional[PendingTransaction]:
        with self._lock:
            p = self._items.get(tx_id)
            if p is not None:
                return p
            p2 = self._load(tx_id)
            if p2 is not None:
                self._items[tx_id] = p2
            return p2

    def list_pending(self, chain: str) -> List[Dict[str, Any]]:
        with self._lock:
            pending = {
                p.id: p for p in self._items.values() if p.chain == _chain_name(chain) and p.completed_at is None
            }
            conn = self._get_conn()
            if conn is not None:
                rows = conn.execute(
                    """
                    SELECT id, chain, serialized_transaction, signature_ids_json, tx_index,
                           created_at, tx_id, completed_at
                    FROM kms_transactions
                    WHERE chain = ? AND completed_at IS NULL
                    """,
                    (_chain_name(chain),),
                ).fetchall()
                for row in rows:
                    if str(row[0]) not in pending:
                        pending[str(row[0])] = self._from_row(row)
            items = sorted(pending.values(), key=lambda p: p.created_at)
            return [p.to_dict() for p in items]

    def complete(self, tx_id: str, chain_tx_id: str) -> bool:
        """
        Mark a pending transaction as signed and broadcast.
        """
        with self._lock:
            p = self._items.get(tx_id) or self._load(tx_id)
            if not p:
                return False
            if p.completed_at is not None:
                return False
            p.tx_id = str(chain_tx_id)
            p.completed_at = time.time()
            self._items[tx_id] = p
            self._persist(p)
            return True

    def delete(self, tx_id: str) -> bool:
        with self._lock:
            found = self._items.pop(tx_id, None) is not None
            conn = self._get_conn()
            if conn is not None:
                cur = conn.execute("DELETE FROM kms_transactions WHERE id = ?", (tx_id,))
                conn.commit()
                found = found or cur.rowcount > 0
            return found
