from .currency import EVM_CHAINS, AlgoNodeType, Currency
from .nodes import NodeResolver

__all__ = ["AlgoNodeType", "Currency", "EVM_CHAINS", "NodeResolver"]
