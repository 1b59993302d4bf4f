"""StayFinder — FastAPI application entry point."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stayfinder.api.v1.auth import router as auth_router
from stayfinder.api.v1.bookings import router as bookings_router
from stayfinder.api.v1.favorites import router as favorites_router
from stayfinder.api.v1.properties import router as properties_router
from stayfinder.api.v1.reviews import router as reviews_router
from stayfinder.config import settings
from stayfinder.database import async_session_factory, engine
from stayfinder.exceptions import register_exception_handlers
from stayfinder.services.sweeper import completion_sweeper

# Configure root logger so all stayfinder.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the completion sweeper; on shutdown stop it and dispose the engine."""
    sweeper: asyncio.Task | None = None
    if settings.completion_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            completion_sweeper(async_session_factory, settings.completion_sweep_interval_seconds)
        )

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Property-rental marketplace: listings, availability, bookings, reviews and favorites.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(properties_router)
app.include_router(bookings_router)
app.include_router(reviews_router)
app.include_router(favorites_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
