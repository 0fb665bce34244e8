import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import DATABASE_URL
from .core.logging_config import configure_logging
from .features.auth.router import router as auth_router
from .features.herd.router import router as herd_router
from .features.sales.router import router as sales_router
from .features.feed.router import router as feed_router
from .features.health.router import router as health_router
from .features.breeding.router import router as breeding_router
from .features.reports.router import router as reports_router
from .features.reports.exceptions import ReportError

logger = logging.getLogger("farmledger.main")

MODEL_MODULES = [
    "farmledger.features.auth.models",
    "farmledger.features.herd.models",
    "farmledger.features.sales.models",
    "farmledger.features.feed.models",
    "farmledger.features.health.models",
    "farmledger.features.breeding.models",
]

TORTOISE_ORM_CONFIG = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {
            "models": MODEL_MODULES + ["aerich.models"],
            "default_connection": "default",
        }
    },
    # Timestamps are stored as naive UTC
    "use_tz": False,
    "timezone": "UTC",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events, such as connecting to the database.
    """
    configure_logging()
    logger.info("Starting application...")
    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    logger.info("Tortoise-ORM connections have been closed.")


app = FastAPI(
    title="FarmLedger API",
    description="API for goat herd records and farm reports.",
    version="0.1.0",
    exception_handlers=tortoise_exception_handlers(),
    lifespan=lifespan,
)


@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc)})


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": "Welcome to the FarmLedger API!"}


app.include_router(auth_router, prefix="/api/v1")
app.include_router(herd_router, prefix="/api/v1")
app.include_router(sales_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")
app.include_router(health_router, prefix="/api/v1")
app.include_router(breeding_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
