from fastapi import APIRouter, Response

from chains.currency import Currency
from common.errors import KmsError
from common.handlers import call_service
from kms.service import KmsService

CODE = "kms.error"


def build_kms_router(service: KmsService) -> APIRouter:
    """Endpoints polled by the external KMS signer."""
    router = APIRouter(tags=["kms"])

    async def _guard(call):
        return await call_service(call, error_cls=KmsError, code=CODE)

    @router.get("/pending/{chain}")
    async def get_pending(chain: Currency):
        return await _guard(lambda: service.get_pending(chain))

    @router.get("/{tx_id}")
    async def get_pending_transaction(tx_id: str):
        return await _guard(lambda: service.get(tx_id))

    @router.put("/{tx_id}/{chain_tx_id}", status_code=204)
    async def complete_pending_transaction(tx_id: str, chain_tx_id: str):
        await _guard(lambda: service.complete(tx_id, chain_tx_id))
        return Response(status_code=204)

    @router.delete("/{tx_id}", status_code=204)
    async def delete_pending_transaction(tx_id: str):
        await _guard(lambda: service.delete(tx_id))
        return Response(status_code=204)

    return router
