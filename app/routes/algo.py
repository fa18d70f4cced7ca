from typing import Optional

from fastapi import APIRouter, Path, Query, Request

from algo.models import AlgoTransaction, BroadcastTx
from algo.service import AlgoService
from chains.currency import AlgoNodeType
from common.errors import AlgoError
from common.handlers import call_service

CODE = "algo.error"
# node-proxy failures keep their own capitalised code
NODE_CODE = "Algo.error"


def build_algo_router(service: AlgoService) -> APIRouter:
    """Algorand endpoints; every handler makes exactly one service call."""
    router = APIRouter(tags=["algorand"])

    async def _guard(call):
        return await call_service(call, error_cls=AlgoError, code=CODE)

    async def _node_guard(call):
        return await call_service(call, error_cls=AlgoError, code=NODE_CODE)

    async def _node_get(request: Request, node_type: AlgoNodeType, path: str = ""):
        query = request.query_params.multi_items()
        return await _node_guard(lambda: service.node_get_method(query, node_type, path))

    async def _node_post(request: Request, node_type: AlgoNodeType, path: str = ""):
        body = await request.body()
        content_type = request.headers.get("content-type")
        return await _node_guard(lambda: service.node_post_method(body, node_type, path, content_type))

    @router.get("/node/indexer/{x_api_key}")
    @router.get("/node/indexer/{x_api_key}/{path:path}")
    async def node_get_indexer(request: Request, x_api_key: str, path: str = ""):
        return await _node_get(request, AlgoNodeType.INDEXER, path)

    @router.post("/node/indexer/{x_api_key}")
    @router.post("/node/indexer/{x_api_key}/{path:path}")
    async def node_post_indexer(request: Request, x_api_key: str, path: str = ""):
        return await _node_post(request, AlgoNodeType.INDEXER, path)

    @router.get("/node/algod/{x_api_key}")
    @router.get("/node/algod/{x_api_key}/{path:path}")
    async def node_get_algod(request: Request, x_api_key: str, path: str = ""):
        return await _node_get(request, AlgoNodeType.ALGOD, path)

    @router.post("/node/algod/{x_api_key}")
    @router.post("/node/algod/{x_api_key}/{path:path}")
    async def node_post_algod(request: Request, x_api_key: str, path: str = ""):
        return await _node_post(request, AlgoNodeType.ALGOD, path)

    @router.get("/wallet")
    async def generate_wallet(mnemonic: Optional[str] = Query(default=None, max_length=500)):
        return await _guard(lambda: service.generate_wallet(mnemonic))

    @router.get("/address/{from_private_key}")
    async def generate_address(from_private_key: str = Path(min_length=103, max_length=103)):
        return await _guard(lambda: service.generate_address(from_private_key))

    @router.get("/account/balance/{address}")
    async def get_account_balance(address: str = Path(min_length=58, max_length=58)):
        return await _guard(lambda: service.get_balance(address))

    @router.post("/transaction")
    async def send_transaction(body: AlgoTransaction):
        return await _guard(lambda: service.send_transaction(body))

    @router.post("/broadcast")
    async def broadcast(body: BroadcastTx):
        return await _guard(lambda: service.broadcast(body.tx_data, body.signature_id))

    @router.get("/block/current")
    async def get_current_block():
        return await _guard(service.get_current_block)

    @router.get("/block/{round_number}")
    async def get_block(round_number: int = Path(ge=0)):
        return await _guard(lambda: service.get_block(round_number))

    @router.get("/transaction/{txid}")
    async def get_transaction(txid: str = Path(min_length=52, max_length=52)):
        return await _guard(lambda: service.get_transaction(txid))

    @router.get("/transactions/{from_time}/{to_time}")
    async def get_pay_transactions(
        from_time: str,
        to_time: str,
        limit: Optional[int] = Query(default=None, ge=1, le=1000),
        next_token: Optional[str] = Query(default=None, alias="next"),
    ):
        return await _guard(lambda: service.get_pay_transactions(from_time, to_time, limit, next_token))

    return router
