"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from otp_auth.api.errors import install_error_handlers
from otp_auth.api.router import router as auth_router
from otp_auth.config import settings
from otp_auth.database.engine import init_db

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db()
    logger.info("Database initialised")
    yield
    logger.info("Shutting down %s …", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Email one-time-password issuance and verification",
    version="0.1.0",
    lifespan=lifespan,
)

install_error_handlers(app)
app.include_router(auth_router)


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    """Serve the app with uvicorn (``otp-auth`` console script)."""
    uvicorn.run(
        "otp_auth.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
