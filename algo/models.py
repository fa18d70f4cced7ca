from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_AMOUNT = r"^\d+(\.\d{1,6})?$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlgoTransaction(_CamelModel):
    """
    ALGO payment. Amount and fee are in ALGO, up to 6 decimals.
    """

    from_: Optional[str] = Field(default=None, alias="from", min_length=58, max_length=58)
    to: str = Field(min_length=58, max_length=58)
    amount: str = Field(pattern=_AMOUNT)
    fee: str = Field(default="0.001", pattern=_AMOUNT)
    note: Optional[str] = Field(default=None, max_length=1000)
    from_private_key: Optional[str] = Field(default=None, min_length=103, max_length=103)
    signature_id: Optional[str] = None
    index: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _one_signer(self):
        if bool(self.from_private_key) == bool(self.signature_id):
            raise ValueError("exactly one of fromPrivateKey or signatureId must be present")
        if self.signature_id and not self.from_:
            raise ValueError("from is required when signatureId is present")
        return self


class BroadcastTx(_CamelModel):
    tx_data: str = Field(min_length=1, max_length=500000)
    signature_id: Optional[str] = None
