from .algo import build_algo_router
from .kms import build_kms_router
from .multitoken import build_multitoken_router

__all__ = ["build_algo_router", "build_kms_router", "build_multitoken_router"]
