import uvicorn

from app.api_server import app
from app.core.config import settings
from observability import build_log_context, log_event


def main() -> None:
    ctx = build_log_context(tool="api_server")
    log_event(
        "api_server_started",
        ctx=ctx,
        data={"port": settings.API_PORT, "host": settings.API_HOST, "testnet": settings.TESTNET},
    )
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
