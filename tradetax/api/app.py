"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from config.settings import settings
from tradetax.api.routes import router, validation_error_handler
from tradetax.calculators.errors import ConfigurationError
from tradetax.calculators.tax_data import TAX_YEARS
from tradetax.db.session import close_pool, get_pool
from tradetax.service import LiabilityService

logger = logging.getLogger(__name__)


def check_settings() -> None:
    """Fail fast on settings the calculators cannot use."""
    if settings.default_tax_year not in TAX_YEARS:
        raise ConfigurationError(
            f"DEFAULT_TAX_YEAR {settings.default_tax_year} is not one of: "
            f"{', '.join(sorted(TAX_YEARS))}"
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: check settings, init DB pool, build service. Shutdown: close pool."""
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting up...")
    check_settings()

    pool = await get_pool()
    app.state.pool = pool
    app.state.service = LiabilityService(pool)

    yield

    logger.info("Shutting down...")
    await close_pool()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="TradeTax", lifespan=lifespan)
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app
