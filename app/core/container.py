from algo.service import DefaultAlgoService
from app.core.config import settings
from chains.nodes import NodeResolver
from kms.broadcast import Broadcaster
from kms.service import KmsService
from kms.store import KmsTransactionStore
from multitoken.dispatch import DispatchTable, load_sdk
from multitoken.service import DefaultMultiTokenService
from observability import Metrics


class Container:
    def __init__(self):
        # Observability
        self.metrics = Metrics()

        # Collaborators shared by both chain families
        self.nodes = NodeResolver()
        self.kms_store = KmsTransactionStore(db_path=settings.KMS_DB_PATH, metrics=self.metrics)
        self.broadcaster = Broadcaster(
            self.nodes,
            self.kms_store,
            testnet=settings.TESTNET,
            algod_token=settings.ALGO_ALGOD_TOKEN,
            metrics=self.metrics,
        )

        # Services
        self.kms_service = KmsService(self.kms_store)
        self.multitoken_service = DefaultMultiTokenService(
            DispatchTable(load_sdk(settings.MULTITOKEN_SDK_MODULE)),
            self.nodes,
            self.kms_store,
            self.broadcaster,
            testnet=settings.TESTNET,
            metrics=self.metrics,
        )
        self.algo_service = DefaultAlgoService(
            self.nodes,
            self.kms_store,
            self.broadcaster,
            testnet=settings.TESTNET,
            algod_token=settings.ALGO_ALGOD_TOKEN,
            indexer_token=settings.ALGO_INDEXER_TOKEN,
            timeout_sec=settings.NODE_HTTP_TIMEOUT_SEC,
        )


global_container = Container()
