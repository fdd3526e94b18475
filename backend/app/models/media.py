"""Media extraction data models for the auto-leech pipeline."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MediaKind(str, Enum):
    """How a discovered video URL has to be played back."""

    FRAME = "frame"
    FILE = "file"


class ScrapedDocument(BaseModel):
    """Raw HTML of one scraped page together with the URL it came from."""

    html: str = Field(..., description="Pre-decoded page HTML (may be malformed)")
    source_url: str = Field(..., description="URL the HTML was fetched from")


class MediaCandidate(BaseModel):
    """A URL that plausibly points at playable video content."""

    url: str = Field(..., description="Absolute http(s) URL, unique within a result")
    kind: MediaKind = Field(..., description="frame (embed player) or file (raw media)")


class ExtractionResult(BaseModel):
    """
    Everything the extractor could find in one HTML document.

    Text fields are entity-decoded and never empty: absence is ``None``.
    """

    candidates: list[MediaCandidate] = Field(
        default_factory=list, description="Video URLs in discovery order"
    )
    thumbnail: Optional[str] = Field(None, description="Best-guess preview image URL")
    title: Optional[str] = Field(None, description="Page title")
    description: Optional[str] = Field(None, description="Page description")
