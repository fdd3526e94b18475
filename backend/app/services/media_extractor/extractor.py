"""Pure HTML → ExtractionResult entry point.

No I/O and no shared mutable state: every call builds its own result from
its own input, so it is safe to call concurrently.
"""

import logging
from typing import Optional

from app.models.media import ExtractionResult, ScrapedDocument
from app.services.media_extractor.constants import MAX_HTML_LENGTH
from app.services.media_extractor.metadata import find_description, find_title
from app.services.media_extractor.thumbnails import find_thumbnail
from app.services.media_extractor.url_discovery import discover_candidates

logger = logging.getLogger(__name__)


def extract(html: Optional[str], source_url: Optional[str] = None) -> ExtractionResult:
    """Extract video candidates, thumbnail, title and description from *html*.

    Args:
        html: Raw page HTML. ``None`` is treated as an empty document.
        source_url: Where the HTML came from; only used for logging.

    Returns:
        ``ExtractionResult``. Never raises on malformed markup.
    """
    html = html or ""
    if len(html) > MAX_HTML_LENGTH:
        logger.warning(
            f"HTML from {source_url or 'unknown source'} is {len(html)} chars, "
            f"truncating to {MAX_HTML_LENGTH}"
        )
        html = html[:MAX_HTML_LENGTH]

    result = ExtractionResult(
        candidates=discover_candidates(html),
        thumbnail=find_thumbnail(html),
        title=find_title(html),
        description=find_description(html),
    )
    logger.info(
        f"Extracted {len(result.candidates)} candidate(s) from "
        f"{source_url or 'document'}"
    )
    return result


def extract_document(document: ScrapedDocument) -> ExtractionResult:
    return extract(document.html, document.source_url)
