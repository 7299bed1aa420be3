"""FireCert API application.

Lifespan:
  - configures logging from settings.log_level
  - runs a background loop that evicts idle wizard sessions

The local upload directory is created at import, before StaticFiles
checks that it exists.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from firecert.config import settings
from firecert.middleware.exceptions import register_exception_handlers
from firecert.routers import applications, establishments, health, inspections, wizard
from firecert.services.sessions import session_registry

logger = logging.getLogger("firecert")

EVICTION_INTERVAL_SECONDS = 60


async def _evict_idle_sessions() -> None:
    while True:
        await asyncio.sleep(EVICTION_INTERVAL_SECONDS)
        session_registry.evict_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    task = asyncio.create_task(_evict_idle_sessions())
    logger.info(f"FireCert started ({settings.environment})")
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("FireCert stopped")


Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

app = FastAPI(
    title="FireCert",
    description="Fire safety registration, certification and inspection backend",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])
app.include_router(establishments.router, prefix="/api/establishments", tags=["establishments"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(inspections.router, prefix="/api/inspections", tags=["inspections"])

# Uploaded documents (local document store)
app.mount(
    settings.public_upload_base_url,
    StaticFiles(directory=settings.upload_dir),
    name="uploads",
)
