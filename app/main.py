from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
import logging

from app.config import get_settings
from app.database import init_db, get_sessionmaker
from app.errors import setup_error_handlers
from app.routers import auth, sync

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting PlayerSync...")
    await init_db()
    logger.info("PlayerSync started successfully")
    yield
    # Shutdown
    logger.info("Shutting down PlayerSync...")


app = FastAPI(
    title="PlayerSync",
    description="Google sign-in and per-user state sync for the music player",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

setup_error_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/google-auth", tags=["auth"])
app.include_router(sync.router, prefix="/api/sync", tags=["sync"])
# Path used by earlier front-end builds
app.include_router(sync.router, prefix="/api/storage", include_in_schema=False)


@app.get("/health")
async def health(sessionmaker=Depends(get_sessionmaker)):
    return {"status": "healthy", "service": "playersync", "d1Available": sessionmaker is not None}
