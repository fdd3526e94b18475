"""Auto-leech orchestration: scrape → extract → admin review → import.

Scraping and storage are injected so the flow can be tested without
network or database access. Extraction itself is the pure
``media_extractor.extract``.
"""

import logging
from typing import Optional

from app.models.leech import (
    LeechImportItem,
    LeechImportRequest,
    LeechImportResult,
    LeechPreview,
    ScrapeOptions,
    ScrapeRequest,
    ScrapeResponse,
)
from app.models.media import MediaKind
from app.models.video import VideoRecord, VideoStatus, VideoType, VideoVisibility
from app.services.media_extractor import extract
from app.services.scraper import FirecrawlClient, get_firecrawl_client
from app.services.video_repository import VideoRepository, get_video_repository

logger = logging.getLogger(__name__)

DEFAULT_SCRAPE_OPTIONS = ScrapeOptions(
    formats=["html", "links"],
    only_main_content=False,
    wait_for=5000,
)
UNTITLED_VIDEO = "Untitled Video"


class ScrapeFailedError(Exception):
    """The scraping backend could not fetch the page."""


def build_video_record(item: LeechImportItem, request: LeechImportRequest) -> VideoRecord:
    """Map a reviewed candidate to an approved, public ``videos`` row."""
    return VideoRecord(
        title=(item.title or "").strip() or UNTITLED_VIDEO,
        description=item.description,
        thumbnail_url=item.thumbnail,
        video_url=item.url,
        video_type=VideoType.IFRAME if item.kind == MediaKind.FRAME else VideoType.UPLOAD,
        category_id=request.category_id or None,
        is_vip=request.is_vip,
        is_vietsub=request.is_vietsub,
        is_uncensored=request.is_uncensored,
        status=VideoStatus.APPROVED,
        visibility=VideoVisibility.PUBLIC,
    )


class LeechService:
    """Coordinates the admin auto-leech flow."""

    def __init__(self, scraper: FirecrawlClient, repository: VideoRepository) -> None:
        self.scraper = scraper
        self.repository = repository

    async def scrape(self, request: ScrapeRequest) -> ScrapeResponse:
        """Proxy a scrape, filling in the leech defaults for missing options."""
        options = request.options or DEFAULT_SCRAPE_OPTIONS
        return await self.scraper.scrape(request.url.strip(), options)

    async def preview(self, request: ScrapeRequest) -> LeechPreview:
        """Scrape the page and extract its candidates for review.

        Raises:
            ScrapeFailedError: If the scrape envelope reports failure.
        """
        response = await self.scrape(request)
        if not response.success:
            raise ScrapeFailedError(response.error or "Scrape failed")

        result = extract(response.page_html(), request.url)
        if not result.candidates:
            logger.info(f"No videos found on {request.url}")

        return LeechPreview(
            source_url=request.url,
            candidates=result.candidates,
            thumbnail=result.thumbnail,
            title=result.title,
            description=result.description,
        )

    async def import_items(self, request: LeechImportRequest) -> LeechImportResult:
        """Insert each reviewed candidate; one failed row does not stop the batch."""
        outcome = LeechImportResult()
        for item in request.items:
            try:
                row = await self.repository.insert_video(build_video_record(item, request))
            except Exception as e:
                logger.error(f"Import of {item.url} failed: {e}")
                outcome.failed += 1
                outcome.errors.append(f"{item.url}: {e!s}")
                continue
            outcome.imported += 1
            video_id: Optional[str] = row.get("id")
            if video_id:
                outcome.video_ids.append(str(video_id))

        logger.info(f"Imported {outcome.imported} video(s), {outcome.failed} failed")
        return outcome


async def get_leech_service() -> LeechService:
    repository = await get_video_repository()
    return LeechService(get_firecrawl_client(), repository)
