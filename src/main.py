"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.error_handler import error_handler_middleware
from src.api.middleware.latency_logging import latency_logging_middleware
from src.api.routes import activities, health, orders
from src.core.config import Settings, get_settings

API_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Set up root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info("Starting %s %s in %s mode", settings.app_name, API_VERSION, settings.app_env)
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Build the order ledger API.

    Interactive docs are only served in debug mode. Every business route
    lives under ``/api/v1``; health probes stay at the root for load balancers.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Darshanik Orders API",
        description="B2B textile order ledger and fulfillment tracking",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    # Added last runs first: latency logging wraps the error handler.
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_middleware)

    app.include_router(health.router)

    api_v1 = APIRouter(prefix="/api/v1")
    for module in (orders, activities):
        api_v1.include_router(module.router)
    app.include_router(api_v1)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("src.main:app", host=settings.host, port=settings.port, reload=settings.debug)
