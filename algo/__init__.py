from .models import AlgoTransaction, BroadcastTx
from .service import AlgoService, DefaultAlgoService

__all__ = ["AlgoService", "AlgoTransaction", "BroadcastTx", "DefaultAlgoService"]
