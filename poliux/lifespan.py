# poliux/lifespan.py
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .config import ANALYSIS_WEBHOOK_URL
from .logging_setup import get_logger
from .store import init_db

logger = get_logger("poliux.lifespan")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # ---- Startup ----
    logger.info("APP STARTUP")
    init_db()
    if not ANALYSIS_WEBHOOK_URL:
        logger.warning("ANALYSIS_WEBHOOK_URL not set; bill analysis requests will return 503")

    yield

    # ---- Shutdown ----
    logger.info("APP SHUTDOWN")
