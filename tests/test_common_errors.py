import pytest
from pydantic import BaseModel, ValidationError

from chains.currency import Currency
from common.errors import (
    AlgoError,
    AppError,
    ErrorKind,
    MultiTokenError,
    RequestValidationFailed,
    UnsupportedChainError,
    classify_exception,
    extract_reason,
    to_unexpected,
)


class _Model(BaseModel):
    amount: int


def _validation_error():
    with pytest.raises(ValidationError) as e:
        _Model(amount="x")
    return e.value


def test_app_error_basics():
    e = AppError("code", "msg", {"a": 1})
    assert e.code == "code"
    assert e.message == "msg"
    assert e.data["a"] == 1
    assert e.status_code == 403
    assert e.to_dict() == {"message": "msg", "code": "code", "data": {"a": 1}}


def test_family_errors():
    e = UnsupportedChainError(Currency.ALGO)
    assert isinstance(e, MultiTokenError)
    assert e.code == "unsuported.chain"
    assert e.message == "Unsupported chain ALGO."

    e2 = AlgoError("boom")
    assert e2.code == "algo.error"
    assert e2.to_dict() == {"message": "boom", "code": "algo.error"}


def test_classify_exception():
    assert classify_exception(_validation_error()) is ErrorKind.VALIDATION
    assert classify_exception(RequestValidationFailed([{"msg": "x"}])) is ErrorKind.VALIDATION
    assert classify_exception(AlgoError("m")) is ErrorKind.DOMAIN
    assert classify_exception(UnsupportedChainError("ETH")) is ErrorKind.DOMAIN
    # expected chain failures from lower layers are still unexpected
    assert classify_exception(ValueError("nonce too low")) is ErrorKind.UNEXPECTED
    assert classify_exception(Exception("Whoops")) is ErrorKind.UNEXPECTED


class _Response:
    def __init__(self, data=None, text=None):
        self.data = data
        self.text = text


class _Inner:
    message = "inner reason"


class _Wrapped(Exception):
    def __init__(self, message=None, response=None):
        super().__init__("outer")
        self.message = message
        self.response = response


def test_extract_reason_priority():
    assert extract_reason(_Wrapped(message=_Inner(), response=_Response(data="resp"))) == "inner reason"
    assert extract_reason(_Wrapped(message="top", response=_Response(data="resp data"))) == "resp data"
    assert extract_reason(_Wrapped(message="top", response=_Response(text="body"))) == "body"
    assert extract_reason(_Wrapped(message="top")) == "top"
    assert extract_reason(RuntimeError("plain")) == "plain"
    assert extract_reason(RuntimeError()) == "RuntimeError"


def test_to_unexpected_uses_family_error():
    e = to_unexpected(RuntimeError("gas"), MultiTokenError, "multitoken.error")
    assert isinstance(e, MultiTokenError)
    assert e.code == "multitoken.error"
    assert e.message == "Unexpected error occurred. Reason: gas"

    base = to_unexpected(KeyError("k"))
    assert type(base) is AppError
    assert base.code == "connector.error"
