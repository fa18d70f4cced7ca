import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.config import settings
from app.core.container import Container, global_container
from app.routes import build_algo_router, build_kms_router, build_multitoken_router
from common.errors import AppError, ErrorKind
from observability import build_log_context, log_event, render_prometheus, set_current_context
from observability.logging import reset_current_context


def _validation_errors(exc: RequestValidationError) -> list:
    out = []
    for err in exc.errors():
        out.append({k: v for k, v in err.items() if k not in ("ctx", "input", "url")})
    return out


def create_app(container: Container = global_container) -> FastAPI:
    app = FastAPI(title="Chain Connector API", version=settings.VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        ctx = build_log_context(tool="http", request_id=request.headers.get("x-request-id"))
        token = set_current_context(ctx)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            reset_current_context(token)
        elapsed_ms = (time.perf_counter() - started) * 1000
        container.metrics.observe_ms("http_request_latency_ms", elapsed_ms)
        response.headers["X-Request-Id"] = ctx["request_id"]
        log_event(
            "http_request",
            ctx=ctx,
            data={"method": request.method, "path": request.url.path, "status": response.status_code},
            level="debug",
        )
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        container.metrics.record_error(getattr(exc, "kind", ErrorKind.DOMAIN).value)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        container.metrics.record_error(ErrorKind.VALIDATION.value)
        return JSONResponse(
            status_code=400,
            content={"message": "Validation failed.", "code": "validation.failed", "errors": _validation_errors(exc)},
        )

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "testnet": settings.TESTNET}

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics():
        return render_prometheus(container.metrics.snapshot(), namespace="connector")

    app.include_router(build_algo_router(container.algo_service), prefix=settings.ALGO_PREFIX)
    app.include_router(build_multitoken_router(container.multitoken_service), prefix=settings.MULTITOKEN_PREFIX)
    app.include_router(build_kms_router(container.kms_service), prefix=settings.KMS_PREFIX)
    return app


app = create_app()
