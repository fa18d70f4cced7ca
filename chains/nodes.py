"""
Node URL resolution.

Every chain has an ordered list of node URLs per network. Callers use the
first entry; the rest are kept for operators who rotate endpoints by editing
the environment.

Env overrides (comma separated):
- NODE_URLS_<CHAIN> / NODE_URLS_<CHAIN>_TESTNET
- ALGO_INDEXER_URLS / ALGO_INDEXER_URLS_TESTNET
"""

from __future__ import annotations

import os
from typing import Dict, List, Tuple

from chains.currency import AlgoNodeType, Currency
from common.errors import AppError

_DEFAULT_URLS: Dict[Tuple[Currency, bool], List[str]] = {
    (Currency.ETH, False): ["https://cloudflare-eth.com"],
    (Currency.ETH, True): ["https://rpc.sepolia.org"],
    (Currency.BSC, False): ["https://bsc-dataseed.binance.org"],
    (Currency.BSC, True): ["https://data-seed-prebsc-1-s1.binance.org:8545"],
    (Currency.CELO, False): ["https://forno.celo.org"],
    (Currency.CELO, True): ["https://alfajores-forno.celo-testnet.org"],
    (Currency.ALGO, False): ["https://mainnet-api.algonode.cloud"],
    (Currency.ALGO, True): ["https://testnet-api.algonode.cloud"],
}

_DEFAULT_INDEXER_URLS: Dict[bool, List[str]] = {
    False: ["https://mainnet-idx.algonode.cloud"],
    True: ["https://testnet-idx.algonode.cloud"],
}


def _split(raw: str) -> List[str]:
    return [u.strip().rstrip("/") for u in raw.split(",") if u.strip()]


def _env_urls(name: str) -> List[str]:
    return _split(os.getenv(name) or "")


class NodeResolver:
    """
    Resolves `(chain, testnet)` to an ordered list of node URLs.
    """

    async def get_nodes_url(self, chain: Currency | str, testnet: bool) -> List[str]:
        chain = Currency(chain)
        suffix = "_TESTNET" if testnet else ""
        urls = _env_urls(f"NODE_URLS_{chain.value}{suffix}") or list(_DEFAULT_URLS.get((chain, testnet), []))
        if not urls:
            raise AppError("node.not.configured", f"No node configured for {chain.value}.", {"testnet": testnet})
        return urls

    async def get_algo_nodes_url(self, node_type: AlgoNodeType, testnet: bool) -> List[str]:
        if node_type is AlgoNodeType.ALGOD:
            return await self.get_nodes_url(Currency.ALGO, testnet)
        suffix = "_TESTNET" if testnet else ""
        urls = _env_urls(f"ALGO_INDEXER_URLS{suffix}") or list(_DEFAULT_INDEXER_URLS[testnet])
        return urls
