"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from rental.api.exceptions import register_exception_handlers
from rental.api.v1.bungalows import router as bungalows_router
from rental.api.v1.reservations import router as reservations_router
from rental.config import settings

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("app_starting", environment=settings.environment)
    yield
    logger.info("app_shutting_down")


app = FastAPI(
    title="Bungalow Rental API",
    description="Quotes, availability and reservations for bungalow rentals",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(reservations_router)
app.include_router(bungalows_router)


@app.get("/api/v1/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "version": "0.1.0"}
