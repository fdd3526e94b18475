"""User video uploads: validate, push to Bunny storage, record as pending."""

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.config import get_settings
from app.models.video import VideoRecord, VideoStatus, VideoType
from app.services.bunny_storage import (
    BunnyStorageClient,
    BunnyStorageError,
    get_bunny_client,
)
from app.services.video_repository import VideoRepository, get_video_repository

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_TYPES = {"video/mp4", "video/webm", "video/quicktime"}
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}
MAX_TITLE_SLUG_LENGTH = 50

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_EXTENSION_RE = re.compile(r"[A-Za-z0-9]{1,10}")


class UploadRejectedError(ValueError):
    """The submitted upload is invalid."""


class UploadForbiddenError(Exception):
    """The uploader is not allowed to upload."""


class StorageConfigurationError(Exception):
    """Storage credentials are missing on the server."""


@dataclass
class UploadedFile:
    """An uploaded file already read into memory."""

    filename: str
    content_type: Optional[str]
    content: bytes


def title_slug(title: str) -> str:
    return _NON_ALNUM_RE.sub("_", title)[:MAX_TITLE_SLUG_LENGTH]


def file_extension(filename: str, default: str) -> str:
    """Extension of *filename*, or *default* unless it is 1-10 alphanumerics."""
    if "." not in filename:
        return default
    extension = filename.rsplit(".", 1)[-1]
    if not _EXTENSION_RE.fullmatch(extension):
        return default
    return extension


class VideoUploadService:
    """Handles the pending-moderation upload flow."""

    def __init__(
        self,
        storage: BunnyStorageClient,
        repository: VideoRepository,
        *,
        max_size_bytes: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.repository = repository
        self.max_size_bytes = max_size_bytes
        self._clock = clock

    def validate(self, video: Optional[UploadedFile], title: Optional[str]) -> None:
        """Raise ``UploadRejectedError`` if the upload cannot be accepted."""
        if video is None or not video.content or not (title or "").strip():
            raise UploadRejectedError("Video file and title are required")
        if video.content_type not in ALLOWED_VIDEO_TYPES:
            raise UploadRejectedError("Invalid video format. Allowed: MP4, WebM, MOV")
        if len(video.content) > self.max_size_bytes:
            raise UploadRejectedError(
                f"Video file too large. Maximum size is "
                f"{self.max_size_bytes // (1024 * 1024)}MB"
            )

    async def upload(
        self,
        user_id: str,
        video: Optional[UploadedFile],
        title: Optional[str],
        *,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
        thumbnail: Optional[UploadedFile] = None,
    ) -> dict:
        """Store the files and insert a pending ``videos`` row.

        Returns:
            The inserted row.

        Raises:
            UploadForbiddenError: Banned uploader.
            UploadRejectedError: Invalid input.
            StorageConfigurationError: Storage credentials missing.
            BunnyStorageError: The video upload failed.
        """
        if await self.repository.is_banned(user_id):
            raise UploadForbiddenError("Your account has been banned")

        self.validate(video, title)

        if not self.storage.is_configured:
            logger.error("Missing Bunny.net credentials")
            raise StorageConfigurationError("Server configuration error")

        title = title.strip()
        base_name = f"{int(self._clock() * 1000)}_{title_slug(title)}"
        video_name = f"{base_name}.{file_extension(video.filename, 'mp4')}"

        logger.info(f"Uploading video: {video_name}")
        video_url = await self.storage.upload(f"videos/{video_name}", video.content)

        thumbnail_url = await self._upload_thumbnail(base_name, thumbnail)

        record = VideoRecord(
            title=title,
            description=description or None,
            video_url=video_url,
            thumbnail_url=thumbnail_url,
            category_id=category_id or None,
            uploaded_by=user_id,
            status=VideoStatus.PENDING,
            video_type=VideoType.BUNNY,
        )
        row = await self.repository.insert_video(record)
        logger.info(f"Video uploaded successfully: {row.get('id')}")
        return row

    async def _upload_thumbnail(
        self, base_name: str, thumbnail: Optional[UploadedFile]
    ) -> Optional[str]:
        """Upload an optional thumbnail; failures are logged, not raised."""
        if thumbnail is None or not thumbnail.content:
            return None
        if thumbnail.content_type not in ALLOWED_IMAGE_TYPES:
            logger.warning(f"Ignoring thumbnail of type {thumbnail.content_type}")
            return None

        name = f"{base_name}_thumb.{file_extension(thumbnail.filename, 'jpg')}"
        try:
            return await self.storage.upload(f"thumbnails/{name}", thumbnail.content)
        except BunnyStorageError as e:
            logger.warning(f"Thumbnail upload failed (non-critical): {e}")
            return None


async def get_upload_service() -> VideoUploadService:
    settings = get_settings()
    repository = await get_video_repository()
    return VideoUploadService(
        get_bunny_client(),
        repository,
        max_size_bytes=settings.max_upload_size_mb * 1024 * 1024,
    )
