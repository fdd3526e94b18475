"""URL normalization, classification and text cleanup shared by all passes."""

import logging
import re
from typing import Optional
from urllib.parse import urlsplit

from app.models.media import MediaCandidate, MediaKind
from app.services.media_extractor.constants import (
    HTML_ENTITIES,
    IMAGE_CDN_SUFFIXES,
    IMAGE_EXTENSIONS,
    VIDEO_FILE_EXTENSIONS,
)

logger = logging.getLogger(__name__)

_ENTITY_RE = re.compile(r"&[^;\s&]{1,10};")
_VIDEO_SUFFIXES = tuple(f".{ext}" for ext in VIDEO_FILE_EXTENSIONS)
_IMAGE_SUFFIXES = tuple(f".{ext}" for ext in IMAGE_EXTENSIONS)


def normalize_url(raw: Optional[str]) -> Optional[str]:
    """Return an absolute http(s) URL, or ``None`` if *raw* cannot be one.

    Scheme-relative URLs get an ``https:`` prefix. Relative paths are
    dropped, never resolved against the page URL.
    """
    if not raw:
        return None
    url = raw.strip()
    if url.startswith("//"):
        url = "https:" + url
    if not url.startswith(("http://", "https://")):
        return None
    if len(url) <= len("https://"):
        return None
    return url


def url_path(url: str) -> str:
    """Lower-cased path component of *url* (query and fragment removed)."""
    try:
        return urlsplit(url).path.lower()
    except ValueError:
        # urlsplit rejects malformed netlocs such as unbalanced IPv6 brackets
        return url.split("#", 1)[0].split("?", 1)[0].lower()


def url_host(url: str) -> str:
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def is_file_url(url: str) -> bool:
    """True if the URL path ends in a directly playable video extension."""
    return url_path(url).endswith(_VIDEO_SUFFIXES)


def classify(url: str) -> MediaKind:
    return MediaKind.FILE if is_file_url(url) else MediaKind.FRAME


def has_image_extension(url: str) -> bool:
    return url_path(url).endswith(_IMAGE_SUFFIXES)


def is_image_url(url: str) -> bool:
    """Heuristic: does *url* plausibly point at an image?"""
    if has_image_extension(url):
        return True
    lowered = url.lower()
    if "image" in url_path(url) or "img." in lowered:
        return True
    host = url_host(url)
    return any(
        host == suffix or host.endswith(f".{suffix}") for suffix in IMAGE_CDN_SUFFIXES
    )


def decode_entities(text: str) -> str:
    """Decode the handful of common named entities; leave the rest untouched."""
    return _ENTITY_RE.sub(lambda m: HTML_ENTITIES.get(m.group(0), m.group(0)), text)


def clean_text(raw: Optional[str]) -> Optional[str]:
    """Entity-decode and strip *raw*; empty results become ``None``."""
    if raw is None:
        return None
    text = decode_entities(raw).strip()
    return text or None


class CandidateSet:
    """Ordered, de-duplicated accumulator of media candidates.

    The file-extension test decides the final kind. When it disagrees with
    the kind the discovering rule declared, the extension wins.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._candidates: list[MediaCandidate] = []

    def add(self, raw: str, declared: Optional[MediaKind] = None) -> bool:
        url = normalize_url(raw)
        if url is None or url in self._seen:
            return False
        kind = classify(url)
        if declared is not None and declared != kind:
            logger.debug(f"Reclassified {url} from {declared.value} to {kind.value}")
        self._seen.add(url)
        self._candidates.append(MediaCandidate(url=url, kind=kind))
        return True

    def __len__(self) -> int:
        return len(self._candidates)

    def to_list(self) -> list[MediaCandidate]:
        return list(self._candidates)
