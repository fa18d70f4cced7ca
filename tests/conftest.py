import os
import sys
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

# Add root directory to sys.path to allow imports from top-level modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Set environment variables BEFORE modules are imported
os.environ["TESTNET"] = "false"
os.environ["KMS_DB_PATH"] = ""
os.environ["MULTITOKEN_SDK_MODULE"] = ""
os.environ["CONNECTOR_LOG_LEVEL"] = "error"

from multitoken.dispatch import PREPARERS, DispatchTable  # noqa: E402
from multitoken.service import MultiTokenService  # noqa: E402


class RecordingSdk:
    """
    Stand-in for the external SDK module: every `prepare_*` name returns a
    coroutine function that records its call and returns a tagged payload.
    """

    def __init__(self):
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        if not name.startswith("prepare_"):
            raise AttributeError(name)

        async def _prepare(*args):
            self.calls.append((name, args))
            return f"signed:{name}"

        return _prepare


class FakeMultiTokenService(MultiTokenService):
    def __init__(self, sdk: Any, *, testnet: bool = False, broadcast_result: Any = None):
        super().__init__(DispatchTable(sdk, PREPARERS))
        self.testnet = testnet
        self.broadcast_result = broadcast_result or {"txId": "0xabc", "failed": False}
        self.node_calls: List[tuple] = []
        self.stored: List[tuple] = []
        self.broadcasts: List[tuple] = []

    async def store_kms_transaction(self, tx_data: str, chain, signature_ids: List[str], index: Optional[int] = None) -> str:
        self.stored.append((tx_data, chain, signature_ids, index))
        return "kms-ref-1"

    async def is_testnet(self) -> bool:
        return self.testnet

    async def get_nodes_url(self, chain, testnet: bool) -> List[str]:
        self.node_calls.append((chain, testnet))
        return [f"https://{chain.value.lower()}.node", "https://fallback.node"]

    async def broadcast(self, chain, tx_data: str, signature_id: Optional[str] = None):
        self.broadcasts.append((chain, tx_data, signature_id))
        return self.broadcast_result


@pytest.fixture
def sdk():
    return RecordingSdk()


@pytest.fixture
def make_multitoken_service():
    return FakeMultiTokenService


@pytest.fixture
def multitoken_service(sdk):
    return FakeMultiTokenService(sdk)


@pytest.fixture
def container():
    from app.core.container import global_container
    return global_container


@pytest.fixture
def fake_container():
    from observability import Metrics

    return SimpleNamespace(metrics=Metrics(), algo_service=None, multitoken_service=None, kms_service=None)
