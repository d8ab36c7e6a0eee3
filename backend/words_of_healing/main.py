"""Words of Healing API - Main FastAPI Application."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from words_of_healing import __version__
from words_of_healing.config import get_settings
from words_of_healing.api.deps import Runtime, limiter
from words_of_healing.api.routes import leaderboard, levels, play
from words_of_healing.services.runtime import get_runtime

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("words_of_healing")

settings = get_settings()

# Polled many times a second by every participant page
QUIET_PATHS = ("/health", "/v1/levels")


def _seconds_since(timestamp: Optional[float]) -> Optional[float]:
    if timestamp is None:
        return None
    return round(time.monotonic() - timestamp, 3)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Answer 429 and log who was throttled."""
    request_id = getattr(request.state, "request_id", "-")
    logger.warning(
        f"[{request_id}] rate limit hit by {_client_host(request)} "
        f"on {request.method} {request.url.path} ({exc.detail})"
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many actions. Please slow down.",
            "retry_after": str(exc.detail),
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a short id and log its outcome and latency."""

    async def dispatch(self, request: Request, call_next):
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO

        logger.log(level, f"[{request_id}] --> {request.method} {request.url.path} from {_client_host(request)}")

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(f"[{request_id}] <-- ERROR: {type(e).__name__}: {e} ({elapsed:.2f}ms)")
            raise

        elapsed = (time.perf_counter() - started) * 1000
        logger.log(level, f"[{request_id}] <-- {response.status_code} ({elapsed:.2f}ms)")
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the worker's game runtime and tear it down with every session timer."""
    logger.info(f"Starting {settings.app_name} {__version__} (store: {settings.store_backend})")

    if settings.store_backend == "sql" and settings.debug:
        from words_of_healing.db.database import init_db
        await init_db()

    runtime = app.dependency_overrides.get(get_runtime, get_runtime)()
    await runtime.start()

    yield

    logger.info(f"Shutting down with {runtime.play.active_count} live sessions")
    await runtime.stop()

    if settings.store_backend == "sql":
        from words_of_healing.db.database import close_db
        from words_of_healing.db.redis import close_redis
        await close_redis()
        await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Live, host-paced scripture puzzle event",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)

# CORS middleware - wildcard in debug, explicit origins otherwise
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check(runtime: Runtime) -> dict:
    """Liveness plus the worker's view of the event."""
    return {
        "status": "ok",
        "version": __version__,
        "store": settings.store_backend,
        "sessions": runtime.play.active_count,
        "unlock_sync": runtime.unlock_sync.running,
        "unlock_synced_seconds_ago": _seconds_since(runtime.unlock_sync.last_synced_at),
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


app.include_router(levels.router, prefix="/v1")
app.include_router(leaderboard.router, prefix="/v1")
app.include_router(play.router, prefix="/v1")
