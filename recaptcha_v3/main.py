"""reCAPTCHA v3 verifier - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .routers import recaptcha_router

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s: %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - warn about incomplete reCAPTCHA setup on startup."""
    if settings.recaptcha_enabled and not settings.recaptcha_secret_key:
        logger.warning("RECAPTCHA_SECRET_KEY is not set - token verification will fail")
    if settings.recaptcha_enabled and not settings.recaptcha_site_key:
        logger.warning("RECAPTCHA_SITE_KEY is not set - script URL has no render key")

    yield


app = FastAPI(
    title=settings.app_name,
    description="Server-side verification of reCAPTCHA v3 tokens",
    version=__version__,
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

# Include routers
app.include_router(recaptcha_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "recaptcha-v3"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


def run() -> None:
    """Console entrypoint: `recaptcha-v3-server`."""
    import uvicorn

    uvicorn.run("recaptcha_v3.main:app", host="0.0.0.0", port=8000, reload=False)
