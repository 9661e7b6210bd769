import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from homecare.core.config import settings
from homecare.db.base import Base
from homecare.db.session import engine
from homecare.routers import daily, logs, poc, services

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (Simple approach)
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.PROJECT_NAME} started, day-of-week rules in {settings.REFERENCE_TIMEZONE}")
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# /poc/daily and /poc/daily-logs must be matched before /poc/{id}
app.include_router(daily.router)
app.include_router(logs.router)
app.include_router(poc.router)
app.include_router(services.router)


@app.get("/health")
async def health():
    return {"ok": True}
