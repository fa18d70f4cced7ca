from .dispatch import PREPARERS, DispatchTable, Operation, PreparerRef, Variant, load_sdk
from .service import DefaultMultiTokenService, MultiTokenService

__all__ = [
    "DefaultMultiTokenService",
    "DispatchTable",
    "MultiTokenService",
    "Operation",
    "PREPARERS",
    "PreparerRef",
    "Variant",
    "load_sdk",
]
