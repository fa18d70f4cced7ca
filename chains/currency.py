from __future__ import annotations

from enum import Enum


class Currency(str, Enum):
    ETH = "ETH"
    BSC = "BSC"
    CELO = "CELO"
    ALGO = "ALGO"


EVM_CHAINS = frozenset({Currency.ETH, Currency.BSC, Currency.CELO})


class AlgoNodeType(str, Enum):
    INDEXER = "INDEXER"
    ALGOD = "ALGOD"
