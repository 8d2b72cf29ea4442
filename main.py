# main.py
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from starlette.middleware.cors import CORSMiddleware
import routes
from config.cache import close_redis, get_redis
from config.database import close_engine
from config.settings import settings
from util.enums import Color, Environment, ErrorMessage
from util.errors import BlobStorageError, DataAccessError
from util.logger import init_logger

logger = logging.getLogger(__name__)

# Closed in order on shutdown; one failing does not skip the rest.
_SHUTDOWN_STEPS: tuple[tuple[str, Callable[[], Awaitable[None]]], ...] = (
    ("redis", close_redis),
    ("database", close_engine),
)


async def _client_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def _startup() -> None:
    init_logger()
    print(f"{Color.GREEN}Advisor starting ({settings.APP_ENV})...{Color.RESET}")
    redis = await get_redis()
    await FastAPILimiter.init(redis, identifier=_client_ip)
    # The records database connects lazily on the first query.
    print(f"{Color.BLUE}Advisor ready{Color.RESET}")


async def _shutdown() -> None:
    for name, close in _SHUTDOWN_STEPS:
        try:
            await close()
        except Exception as e:
            logger.warning("shutdown.close.error target=%s err=%s", name, e)
    print(f"{Color.RED}Advisor stopped{Color.RESET}")


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    try:
        await _startup()
    except Exception as e:
        print(f"{Color.RED}Startup failed: {e}{Color.RESET}")
        raise
    try:
        yield
    finally:
        await _shutdown()


app: FastAPI = FastAPI(title="University Advisor", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],  # DELETE ends a session
    allow_headers=["Authorization", "Content-Type", "Accept"],
)


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    retry = str(settings.RATE_LIMIT_SECONDS)
    return JSONResponse(
        status_code=429,
        content={
            "ok": False,
            "error": "rate_limited",
            "message": f"Too many requests. Try again in {retry}s.",
        },
        headers={"Retry-After": retry},
    )


@app.exception_handler(DataAccessError)
@app.exception_handler(BlobStorageError)
async def upstream_handler(request: Request, exc: Exception):
    # detail stays in the server log
    logger.error("upstream.error path=%s kind=%s", request.url.path, type(exc).__name__)
    info = ErrorMessage.UPSTREAM_UNAVAILABLE.value
    return JSONResponse(
        status_code=info.http_status,
        content={"ok": False, "error": "upstream_unavailable", "message": info.message},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
