from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from chains.currency import Currency


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Fee(_CamelModel):
    gas_limit: str
    gas_price: str


class MultiTokenRequest(_CamelModel):
    """
    Fields shared by every mutating multi-token request.

    Either `from_private_key` (sign here) or `signature_id` (sign in KMS) must be set.
    """

    chain: Currency
    from_private_key: Optional[str] = Field(default=None, min_length=64, max_length=66)
    signature_id: Optional[str] = None
    index: Optional[int] = Field(default=None, ge=0)
    nonce: Optional[int] = Field(default=None, ge=0)
    fee: Optional[Fee] = None
    fee_currency: Optional[str] = None

    @model_validator(mode="after")
    def _one_signer(self):
        if bool(self.from_private_key) == bool(self.signature_id):
            raise ValueError("exactly one of fromPrivateKey or signatureId must be present")
        return self


class TransferMultiToken(MultiTokenRequest):
    to: str
    token_id: str
    amount: str
    contract_address: str
    data: Optional[str] = None


class TransferMultiTokenBatch(MultiTokenRequest):
    to: str
    token_id: List[str] = Field(min_length=1)
    amounts: List[str] = Field(min_length=1)
    contract_address: str
    data: Optional[str] = None

    @model_validator(mode="after")
    def _same_length(self):
        if len(self.token_id) != len(self.amounts):
            raise ValueError("tokenId and amounts must have the same length")
        return self


class MintMultiToken(MultiTokenRequest):
    to: str
    token_id: str
    amount: str
    contract_address: str
    data: Optional[str] = None
    author_addresses: Optional[List[str]] = None
    cashback_values: Optional[List[str]] = None


class MintMultiTokenBatch(MultiTokenRequest):
    to: List[str] = Field(min_length=1)
    token_id: List[List[str]]
    amounts: List[List[str]]
    contract_address: str
    data: Optional[str] = None
    author_addresses: Optional[List[List[List[str]]]] = None
    cashback_values: Optional[List[List[List[str]]]] = None

    @model_validator(mode="after")
    def _same_length(self):
        if not (len(self.to) == len(self.token_id) == len(self.amounts)):
            raise ValueError("to, tokenId and amounts must have the same length")
        return self


class BurnMultiToken(MultiTokenRequest):
    account: str
    token_id: str
    amount: str
    contract_address: str


class BurnMultiTokenBatch(MultiTokenRequest):
    account: str
    token_id: List[str] = Field(min_length=1)
    amounts: List[str] = Field(min_length=1)
    contract_address: str


class DeployMultiToken(MultiTokenRequest):
    uri: str
    public_mint: Optional[bool] = None


class UpdateCashbackMultiToken(MultiTokenRequest):
    token_id: str
    cashback_value: str
    contract_address: str
