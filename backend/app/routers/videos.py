"""Video upload API router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.auth.dependencies import get_current_user
from app.models.video import UploadResponse
from app.services.bunny_storage import BunnyStorageError
from app.services.video_upload import (
    StorageConfigurationError,
    UploadedFile,
    UploadForbiddenError,
    UploadRejectedError,
    VideoUploadService,
    get_upload_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    if upload is None:
        return None
    return UploadedFile(
        filename=upload.filename or "",
        content_type=upload.content_type,
        content=await upload.read(),
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_video(
    video: Optional[UploadFile] = File(None, description="MP4, WebM or MOV file"),
    thumbnail: Optional[UploadFile] = File(None, description="JPEG, PNG or WebP"),
    title: Optional[str] = Form(None, description="Video title"),
    description: Optional[str] = Form(None, description="Video description"),
    category_id: Optional[str] = Form(None, description="Category UUID"),
    current_user: dict = Depends(get_current_user),
    service: VideoUploadService = Depends(get_upload_service),
) -> UploadResponse:
    """
    Upload a video for moderation.

    The file goes to Bunny storage and a ``pending`` row is created;
    an admin has to approve it before it is listed.
    """
    if video is not None and video.size is not None and video.size > service.max_size_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Video file too large. Maximum size is "
            f"{service.max_size_bytes // (1024 * 1024)}MB",
        )

    try:
        row = await service.upload(
            current_user["user_id"],
            await _read_upload(video),
            title,
            description=description,
            category_id=category_id,
            thumbnail=await _read_upload(thumbnail),
        )
    except UploadForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except UploadRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except BunnyStorageError as e:
        logger.error(f"Video upload failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to upload video to storage")
    except Exception as e:
        logger.error(f"Upload error: {e}")
        raise HTTPException(status_code=500, detail="Failed to save video information")

    return UploadResponse(
        success=True,
        message="Video uploaded successfully. Waiting for admin approval.",
        video=row,
    )
