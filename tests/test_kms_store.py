import os
from unittest.mock import patch

import pytest

from chains.currency import Currency
from kms.store import KmsTransactionStore
from observability import Metrics


@pytest.fixture
def store(tmp_path):
    with patch.dict(os.environ, {"KMS_DB_PATH": str(tmp_path / "kms.db")}):
        return KmsTransactionStore()


def test_store_get_pending(store):
    ref = store.store("0xdeadbeef", Currency.ETH, ["sig-1"], 3)
    assert ref
    p = store.get(ref)
    assert p.chain == "ETH"
    assert p.signature_ids == ["sig-1"]
    assert p.index == 3

    pending = store.list_pending(Currency.ETH)
    assert len(pending) == 1
    assert pending[0]["id"] == ref
    assert pending[0]["serializedTransaction"] == "0xdeadbeef"
    assert pending[0]["hashes"] == ["sig-1"]
    assert store.list_pending("CELO") == []


def test_complete_flow(store):
    ref = store.store("tx", "BSC", ["sig-2"])

    assert store.complete(ref, "0xabc")
    assert store.get(ref).tx_id == "0xabc"
    assert store.list_pending(Currency.BSC) == []

    # replay
    assert not store.complete(ref, "0xother")
    assert store.get(ref).tx_id == "0xabc"
    assert not store.complete("missing", "0x1")


def test_delete(store):
    ref = store.store("tx", Currency.ALGO, ["sig-3"])
    assert store.delete(ref)
    assert store.get(ref) is None
    assert not store.delete(ref)


def test_memory_only_when_path_empty():
    metrics = Metrics()
    s = KmsTransactionStore(db_path="", metrics=metrics)
    assert not s.persistence_enabled()
    ref = s.store("tx", Currency.CELO, ["sig"])
    assert s.get(ref) is not None
    assert metrics.snapshot()["counters"] == {"kms_stored_celo": 1}


def test_persistence(tmp_path):
    db_path = str(tmp_path / "persist.db")
    s1 = KmsTransactionStore(db_path=db_path)
    ref = s1.store("0x01", Currency.CELO, ["sig-a", "sig-b"], 0)

    s1._items.clear()
    loaded = s1.get(ref)
    assert loaded is not None
    assert loaded.signature_ids == ["sig-a", "sig-b"]

    # a new instance (process restart) still sees the pending transaction
    s2 = KmsTransactionStore(db_path=db_path)
    assert [p["id"] for p in s2.list_pending(Currency.CELO)] == [ref]
    assert s2.complete(ref, "0xdone")
    assert KmsTransactionStore(db_path=db_path).list_pending(Currency.CELO) == []
