from fastapi import APIRouter

from chains.currency import Currency
from common.errors import MultiTokenError
from common.handlers import call_service
from multitoken.models import (
    BurnMultiToken,
    BurnMultiTokenBatch,
    DeployMultiToken,
    MintMultiToken,
    MintMultiTokenBatch,
    TransferMultiToken,
    TransferMultiTokenBatch,
    UpdateCashbackMultiToken,
)
from multitoken.service import MultiTokenService

CODE = "multitoken.error"


def build_multitoken_router(service: MultiTokenService) -> APIRouter:
    """Multi-token (ERC-1155) endpoints for ETH, BSC and CELO."""
    router = APIRouter(tags=["multitoken"])

    async def _guard(call):
        return await call_service(call, error_cls=MultiTokenError, code=CODE)

    @router.post("/transaction")
    async def transfer(body: TransferMultiToken):
        return await _guard(lambda: service.transfer_multi_token(body))

    @router.post("/transaction/batch")
    async def transfer_batch(body: TransferMultiTokenBatch):
        return await _guard(lambda: service.transfer_multi_token_batch(body))

    @router.post("/mint")
    async def mint(body: MintMultiToken):
        return await _guard(lambda: service.mint_multi_token(body))

    @router.post("/mint/batch")
    async def mint_batch(body: MintMultiTokenBatch):
        return await _guard(lambda: service.mint_multi_token_batch(body))

    @router.post("/burn")
    async def burn(body: BurnMultiToken):
        return await _guard(lambda: service.burn_multi_token(body))

    @router.post("/burn/batch")
    async def burn_batch(body: BurnMultiTokenBatch):
        return await _guard(lambda: service.burn_multi_token_batch(body))

    @router.post("/deploy")
    async def deploy(body: DeployMultiToken):
        return await _guard(lambda: service.deploy_multi_token(body))

    @router.put("/royalty")
    async def update_cashback(body: UpdateCashbackMultiToken):
        return await _guard(lambda: service.update_cashback_for_author(body))

    @router.get("/metadata/{chain}/{token}/{contract_address}")
    async def get_metadata(chain: Currency, token: str, contract_address: str):
        return await _guard(lambda: service.get_metadata_multi_token(chain, token, contract_address))

    @router.get("/royalty/{chain}/{token}/{contract_address}")
    async def get_royalty(chain: Currency, token: str, contract_address: str):
        return await _guard(lambda: service.get_royalty_multi_token(chain, token, contract_address))

    @router.get("/address/{chain}/{address}/{contract_address}")
    async def get_tokens_of_owner(chain: Currency, address: str, contract_address: str):
        return await _guard(lambda: service.get_tokens_of_owner(chain, address, contract_address))

    @router.get("/transaction/{chain}/{tx_hash}")
    async def get_transaction(chain: Currency, tx_hash: str):
        return await _guard(lambda: service.get_transaction(chain, tx_hash))

    return router
