# chairbook/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import Session

from chairbook.config import settings
from chairbook.data import seed_catalog
from chairbook.db import engine, init_db
from chairbook.logging_setup import configure_logging
from chairbook.routers import appointments_routes, barbers_routes, services_routes

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    init_db()
    if settings.SEED_DEMO_DATA:
        with Session(engine) as session:
            seed_catalog(session)
    logger.info("chairbook ready (timezone %s)", settings.TIMEZONE)
    yield

app = FastAPI(title="chairbook", lifespan=lifespan)

app.include_router(barbers_routes.router)
app.include_router(services_routes.router)
app.include_router(appointments_routes.router)

@app.get("/health")
def health_check():
    return {"status": "ok"}
