import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import LOG_NAMESPACES
from .core.database import TORTOISE_ORM_CONFIG
from .core.logging_config import setup_logging
from .features.auth.repository import UserRepository
from .features.auth.router import router as auth_router, users_router
from .features.consumption.repository import ConsumptionRecordRepository
from .features.consumption.router import router as consumption_router
from .features.inventory.repository import InventoryItemRepository, LocationRepository
from .features.inventory.router import locations_router, router as inventory_router
from .features.reports.router import router as reports_router
from .features.reports.service import ReportService

logger = logging.getLogger("stockroom.main")  # This logger will inherit from 'stockroom'


@dataclass(frozen=True)
class Repositories:
    inventory_items: InventoryItemRepository
    consumption_records: ConsumptionRecordRepository
    locations: LocationRepository
    users: UserRepository


def build_repositories() -> Repositories:
    return Repositories(
        inventory_items=InventoryItemRepository(),
        consumption_records=ConsumptionRecordRepository(),
        locations=LocationRepository(),
        users=UserRepository(),
    )


def build_report_service(repositories: Repositories) -> ReportService:
    return ReportService(
        inventory_items=repositories.inventory_items,
        consumption_records=repositories.consumption_records,
        locations=repositories.locations,
        users=repositories.users,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events, such as connecting to the database.
    """
    logger.info("Starting application...")
    await Tortoise.init(config=app.state.tortoise_config)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    logger.info("Tortoise-ORM connections have been closed.")


def create_app(tortoise_config: Optional[dict] = None) -> FastAPI:
    """
    Builds the API application.

    Repositories and the report service are constructed once here and kept
    on ``app.state`` for the request handlers.
    """
    setup_logging(allowed_namespaces=LOG_NAMESPACES or None)

    app = FastAPI(
        title="Stockroom API",
        description="API for tracking consumable stock, its consumption and reports.",
        version="0.1.0",
        exception_handlers=tortoise_exception_handlers(),
        lifespan=lifespan,
    )
    app.state.tortoise_config = tortoise_config or TORTOISE_ORM_CONFIG
    app.state.repositories = build_repositories()
    app.state.report_service = build_report_service(app.state.repositories)

    @app.get("/")
    async def read_root(request: Request):
        """
        Root endpoint for the API.
        """
        client_host = request.client.host if request.client else "unknown client"
        logger.info(f"Root endpoint '/' accessed by {client_host}")
        return {"message": "Welcome to the Stockroom API!"}

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(inventory_router, prefix="/api/v1")
    app.include_router(locations_router, prefix="/api/v1")
    app.include_router(consumption_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")

    return app


app = create_app()
