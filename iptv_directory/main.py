from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iptv_directory.config import settings, setup_logging
from iptv_directory.dependencies import get_scheduler

from iptv_directory.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("="*60)
    logger.info("Starting IPTV Directory Service...")
    logger.info("="*60)

    scheduler = get_scheduler()
    try:
        # First refresh is scheduled to run immediately
        logger.info("Starting scheduler...")
        scheduler.start()
        logger.info("Scheduler started successfully")

        logger.info("="*60)
        logger.info("IPTV Directory Service started successfully")
        logger.info("="*60)
    except Exception as e:
        logger.error("="*60)
        logger.error("Failed to start IPTV Directory Service: %s", e, exc_info=True)
        logger.error("="*60)
        raise

    yield

    logger.info("="*60)
    logger.info("Shutting down IPTV Directory Service...")
    logger.info("="*60)

    try:
        scheduler.shutdown()
    except Exception as e:
        logger.error("Error during scheduler shutdown: %s", e, exc_info=True)

    logger.info("IPTV Directory Service stopped")


app = FastAPI(
    title=settings.addon_name,
    version=settings.addon_version,
    lifespan=lifespan
)

# Add-on clients fetch the manifest and catalogs from browser contexts
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(main_router)


def run() -> None:
    """Serve the add-on with uvicorn on the configured host and port"""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
