from app.models.bunny import CredentialReport, CredentialTestRequest, HostTestResult
from app.models.leech import (
    LeechImportItem,
    LeechImportRequest,
    LeechImportResult,
    LeechPreview,
    ScrapeData,
    ScrapeOptions,
    ScrapeRequest,
    ScrapeResponse,
)
from app.models.media import (
    ExtractionResult,
    MediaCandidate,
    MediaKind,
    ScrapedDocument,
)
from app.models.video import (
    UploadResponse,
    VideoRecord,
    VideoStatus,
    VideoType,
    VideoVisibility,
)

__all__ = [
    # Bunny storage models
    "CredentialReport",
    "CredentialTestRequest",
    "HostTestResult",
    # Auto-leech models
    "LeechImportItem",
    "LeechImportRequest",
    "LeechImportResult",
    "LeechPreview",
    "ScrapeData",
    "ScrapeOptions",
    "ScrapeRequest",
    "ScrapeResponse",
    # Media extraction models
    "ExtractionResult",
    "MediaCandidate",
    "MediaKind",
    "ScrapedDocument",
    # Video models
    "UploadResponse",
    "VideoRecord",
    "VideoStatus",
    "VideoType",
    "VideoVisibility",
]
