"""
Conversions between the wallet `secret` exposed over HTTP and algosdk keys.

algosdk represents a private key as base64 of the 64-byte ed25519 key. The
API exposes the same bytes as unpadded base32, which is safe in URL paths.
"""

from __future__ import annotations

import base64
from decimal import Decimal, InvalidOperation

MICROALGOS_PER_ALGO = Decimal(10) ** 6


def to_secret(private_key: str) -> str:
    return base64.b32encode(base64.b64decode(private_key)).decode("ascii").rstrip("=")


def from_secret(secret: str) -> str:
    s = secret.strip().upper()
    s += "=" * (-len(s) % 8)
    return base64.b64encode(base64.b32decode(s)).decode("ascii")


def to_microalgos(amount: str) -> int:
    try:
        value = Decimal(amount) * MICROALGOS_PER_ALGO
    except InvalidOperation:
        raise ValueError(f"invalid ALGO amount: {amount!r}") from None
    if value != value.to_integral_value():
        raise ValueError(f"ALGO amount has more than 6 decimals: {amount!r}")
    return int(value)


def to_algo(microalgos: int) -> str:
    return format((Decimal(int(microalgos)) / MICROALGOS_PER_ALGO).normalize(), "f")
