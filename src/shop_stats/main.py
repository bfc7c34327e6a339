import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import DATABASE_URL
from .core.logging_config import configure_logging
from .features.auth.router import router as auth_router
from .features.statistics.router import router as statistics_router

configure_logging()
logger = logging.getLogger("shop_stats.main")  # This logger will inherit from 'shop_stats'

MODEL_MODULES = [
    "shop_stats.features.auth.models",
    "shop_stats.features.shops.models",
    "shop_stats.features.catalog.models",
    "shop_stats.features.orders.models",
]

TORTOISE_ORM_CONFIG = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {
            "models": MODEL_MODULES + ["aerich.models"],  # aerich.models for migrations
            "default_connection": "default",
        }
    },
    "use_tz": True,
    "timezone": "UTC",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events, such as connecting to the database.
    """
    logger.info("Starting application...")
    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    logger.info("Tortoise-ORM connections have been closed.")


app = FastAPI(
    title="Shop Statistics API",
    description="Read-only sales statistics for marketplace shops.",
    version="0.1.0",
    exception_handlers=tortoise_exception_handlers(),
    lifespan=lifespan,
)


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": "Welcome to the Shop Statistics API!"}


app.include_router(auth_router, prefix="/api/v1")
app.include_router(statistics_router, prefix="/api/v1")
