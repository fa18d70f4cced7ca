from .broadcast import Broadcaster
from .service import KmsService
from .store import KmsTransactionStore, PendingTransaction

__all__ = ["Broadcaster", "KmsService", "KmsTransactionStore", "PendingTransaction"]
