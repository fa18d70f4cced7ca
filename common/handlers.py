from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import HTTPException

from common.errors import AppError, ErrorKind, classify_exception, to_unexpected, validation_details
from observability import log_event


async def call_service(
    call: Callable[[], Awaitable[Any]],
    *,
    error_cls: type = AppError,
    code: str = "connector.error",
) -> Any:
    """
    Run exactly one service call and reshape whatever it raises.

    - validation failures become a 400 carrying the original error list
    - domain errors propagate unchanged
    - anything else becomes `error_cls` with the family `code`
    """
    try:
        return await call()
    except Exception as e:
        kind = classify_exception(e)
        if kind is ErrorKind.VALIDATION:
            raise HTTPException(status_code=400, detail=validation_details(e)) from e
        if kind is ErrorKind.DOMAIN:
            raise
        log_event("unexpected_error", data={"error": repr(e), "code": code}, level="error")
        err = to_unexpected(e, error_cls, code)
        err.kind = ErrorKind.UNEXPECTED
        raise err from e
