"""
Lookup table from `(chain, operation, variant)` to the SDK preparer to call.

Preparers live in an external module (see `load_sdk`) and are resolved by
name at call time. CELO preparers take the testnet flag as their first
argument; the others take `(body, provider)`.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from chains.currency import Currency
from common.errors import MultiTokenError, UnsupportedChainError


class Operation(str, Enum):
    TRANSFER = "transfer"
    TRANSFER_BATCH = "transfer_batch"
    MINT = "mint"
    MINT_BATCH = "mint_batch"
    BURN = "burn"
    BURN_BATCH = "burn_batch"
    DEPLOY = "deploy"
    UPDATE_CASHBACK = "update_cashback"


class Variant(str, Enum):
    PLAIN = "plain"
    CASHBACK = "cashback"


@dataclass(frozen=True)
class PreparerRef:
    name: str
    needs_testnet: bool = False


_ETH = Currency.ETH
_BSC = Currency.BSC
_CELO = Currency.CELO
_P = Variant.PLAIN
_C = Variant.CASHBACK

PREPARERS: Dict[Tuple[Currency, Operation, Variant], PreparerRef] = {
    (_ETH, Operation.TRANSFER, _P): PreparerRef("prepare_eth_transfer_multi_token_signed_transaction"),
    (_BSC, Operation.TRANSFER, _P): PreparerRef("prepare_bsc_transfer_multi_token_signed_transaction"),
    (_CELO, Operation.TRANSFER, _P): PreparerRef("prepare_celo_transfer_multi_token_signed_transaction", True),
    (_ETH, Operation.TRANSFER_BATCH, _P): PreparerRef("prepare_eth_batch_transfer_multi_token_signed_transaction"),
    (_BSC, Operation.TRANSFER_BATCH, _P): PreparerRef("prepare_bsc_batch_transfer_multi_token_signed_transaction"),
    (_CELO, Operation.TRANSFER_BATCH, _P): PreparerRef(
        "prepare_celo_batch_transfer_multi_token_signed_transaction", True
    ),
    (_ETH, Operation.MINT, _P): PreparerRef("prepare_eth_mint_multi_token_signed_transaction"),
    (_ETH, Operation.MINT, _C): PreparerRef("prepare_eth_mint_cashback_multi_token_signed_transaction"),
    (_BSC, Operation.MINT, _P): PreparerRef("prepare_bsc_mint_multi_token_signed_transaction"),
    (_BSC, Operation.MINT, _C): PreparerRef("prepare_bsc_mint_multi_token_cashback_signed_transaction"),
    (_CELO, Operation.MINT, _P): PreparerRef("prepare_celo_mint_multi_token_signed_transaction", True),
    (_CELO, Operation.MINT, _C): PreparerRef("prepare_celo_mint_multi_token_cashback_signed_transaction", True),
    (_ETH, Operation.MINT_BATCH, _P): PreparerRef("prepare_eth_mint_multi_token_batch_signed_transaction"),
    (_ETH, Operation.MINT_BATCH, _C): PreparerRef("prepare_eth_mint_multiple_cashback_multi_token_signed_transaction"),
    (_BSC, Operation.MINT_BATCH, _P): PreparerRef("prepare_bsc_mint_multi_token_batch_signed_transaction"),
    (_BSC, Operation.MINT_BATCH, _C): PreparerRef("prepare_bsc_mint_multi_token_batch_cashback_signed_transaction"),
    (_CELO, Operation.MINT_BATCH, _P): PreparerRef("prepare_celo_mint_multi_token_batch_signed_transaction", True),
    (_CELO, Operation.MINT_BATCH, _C): PreparerRef(
        "prepare_celo_mint_multi_token_batch_cashback_signed_transaction", True
    ),
    (_ETH, Operation.BURN, _P): PreparerRef("prepare_eth_burn_multi_token_signed_transaction"),
    (_BSC, Operation.BURN, _P): PreparerRef("prepare_bsc_burn_multi_token_signed_transaction"),
    (_CELO, Operation.BURN, _P): PreparerRef("prepare_celo_burn_multi_token_signed_transaction", True),
    (_ETH, Operation.BURN_BATCH, _P): PreparerRef("prepare_eth_burn_batch_multi_token_signed_transaction"),
    (_BSC, Operation.BURN_BATCH, _P): PreparerRef("prepare_bsc_burn_multi_token_batch_signed_transaction"),
    (_CELO, Operation.BURN_BATCH, _P): PreparerRef("prepare_celo_burn_multi_token_batch_signed_transaction", True),
    (_ETH, Operation.DEPLOY, _P): PreparerRef("prepare_eth_deploy_multi_token_signed_transaction"),
    (_BSC, Operation.DEPLOY, _P): PreparerRef("prepare_bsc_deploy_multi_token_signed_transaction"),
    (_CELO, Operation.DEPLOY, _P): PreparerRef("prepare_celo_deploy_multi_token_signed_transaction", True),
    (_ETH, Operation.UPDATE_CASHBACK, _P): PreparerRef(
        "prepare_eth_update_cashback_for_author_multi_token_signed_transaction"
    ),
    (_BSC, Operation.UPDATE_CASHBACK, _P): PreparerRef(
        "prepare_bsc_update_cashback_for_author_multi_token_signed_transaction"
    ),
    (_CELO, Operation.UPDATE_CASHBACK, _P): PreparerRef(
        "prepare_celo_update_cashback_for_author_multi_token_signed_transaction", True
    ),
}

# Operations whose preparer depends on whether royalty recipients are given.
CASHBACK_AWARE = frozenset({Operation.MINT, Operation.MINT_BATCH})


def select_variant(operation: Operation, body: Any) -> Variant:
    if operation in CASHBACK_AWARE and getattr(body, "author_addresses", None) is not None:
        return Variant.CASHBACK
    return Variant.PLAIN


def load_sdk(module_name: Optional[str]) -> Optional[ModuleType]:
    """
    Import the module exposing the `prepare_*` functions, if configured.
    """
    if not module_name:
        return None
    return importlib.import_module(module_name)


class DispatchTable:
    """
    Resolves a request to a callable preparer bound to its calling convention.
    """

    def __init__(self, sdk: Any, preparers: Optional[Dict[Tuple[Currency, Operation, Variant], PreparerRef]] = None):
        self.sdk = sdk
        self.preparers = dict(PREPARERS if preparers is None else preparers)

    def lookup(self, chain: Any, operation: Operation, variant: Variant) -> PreparerRef:
        ref = self.preparers.get((chain, operation, variant))
        if ref is None:
            raise UnsupportedChainError(chain)
        return ref

    def resolve(self, ref: PreparerRef) -> Callable[..., Awaitable[str]]:
        fn = getattr(self.sdk, ref.name, None) if self.sdk is not None else None
        if fn is None:
            raise MultiTokenError(f"Multi-token SDK does not provide {ref.name}.", "multitoken.sdk.missing")
        return fn

    async def prepare(self, ref: PreparerRef, body: Any, testnet: bool, provider: str) -> str:
        fn = self.resolve(ref)
        if ref.needs_testnet:
            return await fn(testnet, body, provider)
        return await fn(body, provider)
