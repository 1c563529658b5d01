"""FastAPI application entry point with FastMCP mounted and APScheduler."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.exceptions import SacredSixError
from app.services.scheduler_service import scheduler, setup_scheduler

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
)

# FastMCP ASGI sub-app
from app.mcp.server import mcp  # noqa: E402

mcp_app = mcp.http_app(path="/mcp")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Sacred Six...")
    setup_scheduler()
    scheduler.start()
    logger.info("APScheduler started with %d jobs", len(scheduler.get_jobs()))

    async with mcp_app.lifespan(app):
        yield

    # Shutdown
    scheduler.shutdown(wait=False)
    logger.info("APScheduler stopped")


app = FastAPI(
    title="Sacred Six",
    description="Daily Sacred Six task selection, recurring tasks and completion streaks",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SacredSixError)
async def domain_error_handler(request: Request, exc: SacredSixError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


# REST API router
from app.api.v1.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")

app.mount("/mcp", mcp_app)


@app.get("/health")
async def health():
    """Basic liveness probe."""
    return {"status": "ok", "service": "sacred-six"}


@app.get("/health/ready")
async def health_ready():
    """Readiness probe with database check."""
    from app.database import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ready", "database": "ok"}
    except Exception as e:
        logger.error("Health ready check failed: %s", e)
        return JSONResponse(
            {"status": "not_ready", "database": "error"},
            status_code=503
        )
