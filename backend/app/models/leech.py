"""Auto-leech request/response models (scrape proxy, preview, import)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.media import MediaCandidate, MediaKind


# =============================================================================
# Scrape proxy (Firecrawl envelope)
# =============================================================================


class ScrapeOptions(BaseModel):
    """Options forwarded to the scraping backend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    formats: Optional[list[str]] = Field(
        None, description="Output formats (html, rawHtml, links, markdown, ...)"
    )
    only_main_content: Optional[bool] = Field(
        None, description="Strip navigation/footer before returning content"
    )
    wait_for: Optional[int] = Field(
        None, ge=0, description="Milliseconds to wait for client-side rendering"
    )


class ScrapeRequest(BaseModel):
    """Request to scrape a single page."""

    url: str = Field(..., min_length=1, description="Page URL to scrape")
    options: Optional[ScrapeOptions] = Field(None, description="Scrape options")


class ScrapeData(BaseModel):
    """Payload returned by the scraping backend on success."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    html: Optional[str] = Field(None, description="Cleaned page HTML")
    raw_html: Optional[str] = Field(None, description="Unmodified page HTML")
    links: Optional[list[str]] = Field(None, description="Links found on the page")


class ScrapeResponse(BaseModel):
    """
    Scrape envelope.

    On failure ``success`` is false, ``error`` holds a human-readable message
    and no ``data`` is attached.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = Field(..., description="Whether the scrape succeeded")
    error: Optional[str] = Field(None, description="Failure reason")
    data: Optional[ScrapeData] = Field(None, description="Scraped content")
    html: Optional[str] = Field(None, description="Legacy top-level HTML field")

    @classmethod
    def failure(cls, error: str) -> "ScrapeResponse":
        return cls(success=False, error=error)

    def page_html(self) -> str:
        """HTML from ``data.html``, ``data.rawHtml`` or the legacy top-level field."""
        if self.data is not None:
            if self.data.html:
                return self.data.html
            if self.data.raw_html:
                return self.data.raw_html
        return self.html or ""


# =============================================================================
# Preview / import
# =============================================================================


class LeechPreview(BaseModel):
    """Extraction result for one scraped page, waiting for admin review."""

    source_url: str = Field(..., description="Scraped page URL")
    candidates: list[MediaCandidate] = Field(default_factory=list)
    thumbnail: Optional[str] = Field(None)
    title: Optional[str] = Field(None)
    description: Optional[str] = Field(None)


class LeechImportItem(BaseModel):
    """A reviewed candidate the admin chose to keep."""

    url: str = Field(..., min_length=1, description="Video URL")
    kind: MediaKind = Field(..., description="frame or file")
    title: Optional[str] = Field(None, description="Edited title")
    description: Optional[str] = Field(None)
    thumbnail: Optional[str] = Field(None)


class LeechImportRequest(BaseModel):
    """Batch of reviewed candidates plus the flags applied to all of them."""

    items: list[LeechImportItem] = Field(..., min_length=1)
    category_id: Optional[str] = Field(None, description="Category UUID")
    is_vip: bool = Field(default=False)
    is_vietsub: bool = Field(default=False)
    is_uncensored: bool = Field(default=False)


class LeechImportResult(BaseModel):
    """Per-batch import accounting."""

    imported: int = Field(default=0)
    failed: int = Field(default=0)
    video_ids: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
