"""Media extractor package: regex heuristics that find videos in scraped HTML.

Re-exports the public API so consumers can use::

    from app.services.media_extractor import extract
"""

from app.services.media_extractor.extractor import extract, extract_document
from app.services.media_extractor.metadata import find_description, find_title
from app.services.media_extractor.thumbnails import find_thumbnail
from app.services.media_extractor.url_discovery import discover_candidates

__all__ = [
    "discover_candidates",
    "extract",
    "extract_document",
    "find_description",
    "find_thumbnail",
    "find_title",
]
