"""
BaatCheet auth API.

Builds the FastAPI app: cookie sessions under /api/auth, the account
directory under /api/users and health probes. The lifespan owns the Redis
connection and the email queue; store outages surface as a generic 500.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from baatcheet.config import load_config
from baatcheet.cache import StoreUnavailableError
from .routes.router import router as api_router
from .deps import get_services, close_services

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

API_VERSION = "1.0.0"
SERVICE_NAME = "baatcheet-api"
INTERNAL_ERROR = {"detail": "Internal server error"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Connect to Redis and start the email queue; release both on exit."""
    services = get_services()
    logger.info(
        f"BaatCheet API ready (environment={services.config.environment}, "
        f"rotate_refresh_tokens={services.config.tokens.rotate_refresh_tokens})"
    )

    yield

    close_services()
    logger.info("BaatCheet API stopped")


app = FastAPI(
    title="BaatCheet API",
    description="Email/OTP registration, cookie sessions and password reset for BaatCheet",
    version=API_VERSION,
    lifespan=lifespan,
)

# Session cookies need credentialed CORS, which forbids a wildcard origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    # The Redis error text stays in the log, never in the response
    logger.error(f"Ephemeral store unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error during {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


@app.get("/health", tags=["System"])
async def health_check():
    """Liveness probe; does not touch Redis (see /api/system/status)."""
    return {"status": "healthy", "service": SERVICE_NAME}


app.include_router(api_router, prefix="/api")


@app.get("/", tags=["System"])
async def root():
    return {
        "name": "BaatCheet API",
        "version": API_VERSION,
        "docs": "/docs"
    }
