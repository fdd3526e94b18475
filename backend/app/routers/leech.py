"""Auto-leech API router (admin only)."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.auth.dependencies import require_admin
from app.models.leech import (
    LeechImportRequest,
    LeechImportResult,
    LeechPreview,
    ScrapeRequest,
    ScrapeResponse,
)
from app.services.leech import LeechService, ScrapeFailedError, get_leech_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leech", tags=["leech"])


@router.post("/scrape", response_model=ScrapeResponse, response_model_exclude_none=True)
async def scrape_page(
    request: ScrapeRequest,
    current_user: dict = Depends(require_admin),
    service: LeechService = Depends(get_leech_service),
) -> ScrapeResponse:
    """
    Scrape a page through the scraping backend.

    Always answers 200; failures are reported as
    ``{"success": false, "error": "..."}`` so the client can show the
    message and let the admin retry.
    """
    return await service.scrape(request)


@router.post("/preview", response_model=LeechPreview)
async def preview_page(
    request: ScrapeRequest,
    current_user: dict = Depends(require_admin),
    service: LeechService = Depends(get_leech_service),
) -> LeechPreview:
    """
    Scrape a page and extract video candidates for review.

    Nothing is stored: the admin picks candidates and sends them to
    ``/leech/import``.
    """
    try:
        return await service.preview(request)
    except ScrapeFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/import", response_model=LeechImportResult)
async def import_videos(
    request: LeechImportRequest,
    current_user: dict = Depends(require_admin),
    service: LeechService = Depends(get_leech_service),
) -> LeechImportResult:
    """Insert reviewed candidates as approved, public videos."""
    logger.info(f"User {current_user['user_id']} importing {len(request.items)} video(s)")
    return await service.import_items(request)
