from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError


@dataclass(eq=False)
class AppError(Exception):
    """
    Domain error with a stable machine-readable code.

    Rendered by the API server as `{message, code}` with `status_code`.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    status_code: int = 403

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.data:
            out["data"] = self.data
        return out


class AlgoError(AppError):
    def __init__(self, message: str, code: str = "algo.error", data: Dict[str, Any] = None, status_code: int = 403):
        super().__init__(code, message, data or {}, status_code)


class MultiTokenError(AppError):
    def __init__(self, message: str, code: str = "multitoken.error", data: Dict[str, Any] = None, status_code: int = 403):
        super().__init__(code, message, data or {}, status_code)


class KmsError(AppError):
    def __init__(self, message: str, code: str = "kms.error", data: Dict[str, Any] = None, status_code: int = 403):
        super().__init__(code, message, data or {}, status_code)


class UnsupportedChainError(MultiTokenError):
    def __init__(self, chain: Any):
        name = getattr(chain, "value", chain)
        super().__init__(f"Unsupported chain {name}.", "unsuported.chain", {"chain": str(name)})


class RequestValidationFailed(Exception):
    """
    One or more validation failures raised from inside a service call.
    """

    def __init__(self, errors: list):
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = list(errors)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DOMAIN = "domain"
    UNEXPECTED = "unexpected"


def classify_exception(e: BaseException) -> ErrorKind:
    """
    Sort a caught exception into the closed set of error kinds.

    Only `AppError` subclasses count as domain errors; anything else raised by
    lower layers is unexpected, even when it describes an expected chain failure.
    """
    if isinstance(e, (ValidationError, RequestValidationFailed)):
        return ErrorKind.VALIDATION
    if isinstance(e, AppError):
        return ErrorKind.DOMAIN
    return ErrorKind.UNEXPECTED


def validation_details(e: BaseException) -> list:
    if isinstance(e, ValidationError):
        return e.errors(include_url=False, include_context=False, include_input=False)
    if isinstance(e, RequestValidationFailed):
        return e.errors
    return [{"msg": str(e)}]


def _response_data(response: Any) -> Optional[Any]:
    if response is None:
        return None
    data = getattr(response, "data", None)
    if data:
        return data
    # httpx / requests responses
    text = getattr(response, "text", None)
    if isinstance(text, str) and text:
        return text
    return None


def extract_reason(e: BaseException) -> str:
    """
    Best-effort human reason for an unexpected error.

    Priority: nested message, inner response data, top-level message, str(e).
    """
    message = getattr(e, "message", None)
    nested = getattr(message, "message", None)
    if nested:
        return str(nested)
    data = _response_data(getattr(e, "response", None))
    if data:
        return str(data)
    if message:
        return str(message)
    if e.args and isinstance(e.args[0], str) and e.args[0]:
        return e.args[0]
    return str(e) or e.__class__.__name__


def to_unexpected(e: BaseException, error_cls: type = AppError, code: str = "connector.error") -> AppError:
    reason = extract_reason(e)
    message = f"Unexpected error occurred. Reason: {reason}"
    if error_cls is AppError:
        return AppError(code, message)
    return error_cls(message, code)
