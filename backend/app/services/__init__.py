from app.services.bunny_storage import (
    BunnyStorageClient,
    BunnyStorageError,
    get_bunny_client,
    reset_bunny_client,
)
from app.services.leech import LeechService, ScrapeFailedError, get_leech_service
from app.services.scraper import (
    FirecrawlClient,
    get_firecrawl_client,
    reset_firecrawl_client,
)
from app.services.video_repository import VideoRepository, get_video_repository
from app.services.video_upload import VideoUploadService, get_upload_service

__all__ = [
    "BunnyStorageClient",
    "BunnyStorageError",
    "get_bunny_client",
    "reset_bunny_client",
    "LeechService",
    "ScrapeFailedError",
    "get_leech_service",
    "FirecrawlClient",
    "get_firecrawl_client",
    "reset_firecrawl_client",
    "VideoRepository",
    "get_video_repository",
    "VideoUploadService",
    "get_upload_service",
]
