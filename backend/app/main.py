"""Main FastAPI application for Couple Resolve."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.db import init_db
from app.api import router
from app.services import MediationError, session_service

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def purge_expired_sessions(interval: int):
    """Delete sessions past the retention window, then sleep, forever."""
    while True:
        try:
            session_service.purge_expired()
        except Exception:
            logger.exception("Session purge failed")
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Couple Resolve backend...")
    init_db()

    purge_task = None
    if settings.session_retention_hours > 0:
        purge_task = asyncio.create_task(purge_expired_sessions(settings.purge_interval_seconds))
    logger.info("All systems ready")

    yield

    logger.info("Shutting down...")
    if purge_task is not None:
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    logger.info("Shutdown complete")


app = FastAPI(
    title="Couple Resolve",
    description="Two partners share their perspectives and receive an AI-guided mediation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(MediationError)
async def mediation_error_handler(request: Request, exc: MediationError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Couple Resolve",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }


def run():
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
