# eventvax/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from eventvax.api.v1.api import api_router
from eventvax.background_tasks.chain_sync_tasks import ChainSyncTask
from eventvax.core.config import settings
from eventvax.db.session import SessionLocal, engine
from eventvax.models import Base
from eventvax.scheduler import init_scheduler, shutdown_scheduler
from eventvax.services.chain_sync import ChainSyncRunner

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    _ensure_sqlite_directory(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables checked and created if necessary.")

    app.state.http_client = httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS)
    runner = ChainSyncRunner(SessionLocal, settings=settings)
    app.state.sync_task = ChainSyncTask(runner)

    # The first pass runs in the background; startup does not wait for it.
    if settings.SYNC_ON_STARTUP:
        app.state.sync_task.start()
    init_scheduler(runner, settings.SYNC_INTERVAL_SECONDS)

    yield

    logger.info("Application shutting down...")
    shutdown_scheduler()
    await app.state.sync_task.shutdown()
    app.state.http_client.close()
    engine.dispose()


app = FastAPI(
    title="EventVax Chain Sync Service",
    version="1.0.0",
    description="""
        **EventVax Chain Sync**

        Mirrors events registered on the EventVax contracts into the local
        ticketing database.

        ## Features

        * **Blockchain Sync**: Idempotent reconciliation of `EventRegistered` logs
        * **Metadata Enrichment**: Event name, location and flyer from IPFS
        * **Mirrored Events**: Read access to synced events and ticket counts
        """,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok", "message": "EventVax API is running"}
