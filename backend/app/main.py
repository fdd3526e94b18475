"""Video Leech Backend - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import bunny, leech, videos
from app.services.bunny_storage import get_bunny_client
from app.services.scraper import get_firecrawl_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    logger.info("Starting Video Leech Backend...")

    yield

    logger.info("Shutting down Video Leech Backend...")

    try:
        await get_firecrawl_client().close()
    except Exception as e:
        logger.warning(f"Error closing Firecrawl client: {e}")

    try:
        await get_bunny_client().close()
    except Exception as e:
        logger.warning(f"Error closing Bunny client: {e}")

    logger.info("Video Leech Backend shutdown complete")


app = FastAPI(
    title="Video Leech Backend",
    description="Privileged operations for the video site - scraping, auto-leech, uploads",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(leech.router)
app.include_router(videos.router)
app.include_router(bunny.router)


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint for monitoring.

    Returns overall health status and status of each service:
    - supabase: Content platform database
    """
    health = {"status": "healthy", "services": {}}

    try:
        from app.db.supabase import get_async_supabase_client_async

        supabase = await get_async_supabase_client_async()
        await supabase.table("settings").select("id").limit(1).execute()
        health["services"]["supabase"] = {"status": "healthy"}
    except Exception as e:
        health["services"]["supabase"] = {"status": "unavailable", "error": str(e)}

    for service_name, service_health in health["services"].items():
        if service_health.get("status") not in ("healthy", None):
            health["status"] = "degraded"
            break

    return health
