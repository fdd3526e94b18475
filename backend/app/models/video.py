"""Video table models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class VideoType(str, Enum):
    """How the stored ``video_url`` is played."""

    IFRAME = "iframe"
    UPLOAD = "upload"
    BUNNY = "bunny"


class VideoStatus(str, Enum):
    """Moderation state of a video."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VideoVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class VideoRecord(BaseModel):
    """Row inserted into the ``videos`` table."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    thumbnail_url: Optional[str] = Field(None)
    video_url: str = Field(..., min_length=1)
    video_type: VideoType = Field(...)
    category_id: Optional[str] = Field(None)
    is_vip: bool = Field(default=False)
    is_vietsub: bool = Field(default=False)
    is_uncensored: bool = Field(default=False)
    status: VideoStatus = Field(default=VideoStatus.PENDING)
    visibility: Optional[VideoVisibility] = Field(None)
    uploaded_by: Optional[str] = Field(None, description="Uploader user UUID")

    def to_row(self) -> dict[str, Any]:
        """Serialize for insertion, leaving unset optional columns to DB defaults."""
        row = self.model_dump(mode="json")
        for column in ("visibility", "uploaded_by"):
            if row[column] is None:
                del row[column]
        return row


class UploadResponse(BaseModel):
    """Returned from POST /videos/upload."""

    success: bool = Field(...)
    message: str = Field(...)
    video: dict = Field(default_factory=dict, description="Inserted video row")
