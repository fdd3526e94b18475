"""Thumbnail discovery.

Sources are tried from most to least reliable and the first URL that looks
like an image wins:

1. ``og:image`` / ``twitter:image`` meta tags
2. ``<video poster>`` and thumbnail-ish ``data-*`` attributes
3. JSON-like ``"thumbnail": "..."`` pairs in inline scripts
4. ``<img>`` tags whose class marks them as a cover/thumbnail
5. Canonical thumbnails derived from a recognised platform video ID
6. Any sufficiently large-looking ``<img>`` on the page
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from app.services.media_extractor.constants import (
    LARGE_IMAGE_KEYWORDS,
    LARGE_IMAGE_MIN_DIMENSION,
    NON_CONTENT_IMAGE_KEYWORDS,
    THUMBNAIL_CLASS_HINTS,
    THUMBNAIL_DATA_ATTRIBUTES,
    THUMBNAIL_JSON_KEYS,
    TINY_IMAGE_MAX_DIMENSION,
)
from app.services.media_extractor.normalize import (
    decode_entities,
    has_image_extension,
    is_image_url,
    normalize_url,
    url_path,
)
from app.services.media_extractor.patterns import (
    ScanKind,
    ScanRule,
    alternation,
    attr,
    class_contains,
    compile_pattern,
    json_value_pattern,
    meta_content_rule,
    quoted,
    scan,
    tag_attribute_rule,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformThumbnail:
    """Maps a platform video ID found in the page to its canonical thumbnail."""

    name: str
    id_pattern: re.Pattern
    template: str

    def derive(self, html: str) -> Optional[str]:
        match = self.id_pattern.search(html)
        if not match:
            return None
        return self.template.format(id=match.group("id"))


PLATFORM_THUMBNAILS: tuple[PlatformThumbnail, ...] = (
    PlatformThumbnail(
        name="youtube",
        id_pattern=re.compile(
            r"(?:youtube(?:-nocookie)?\.com/(?:embed/|watch\?v=|v/|shorts/)|youtu\.be/)"
            r"(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])",
            re.IGNORECASE,
        ),
        template="https://img.youtube.com/vi/{id}/hqdefault.jpg",
    ),
    PlatformThumbnail(
        name="vimeo",
        id_pattern=re.compile(
            r"(?:player\.vimeo\.com/video/|vimeo\.com/)(?P<id>\d{6,12})(?!\d)",
            re.IGNORECASE,
        ),
        template="https://vumbnail.com/{id}.jpg",
    ),
    PlatformThumbnail(
        name="dailymotion",
        id_pattern=re.compile(
            r"dailymotion\.com/(?:embed/)?video/(?P<id>[A-Za-z0-9]{5,12})(?![A-Za-z0-9])",
            re.IGNORECASE,
        ),
        template="https://www.dailymotion.com/thumbnail/video/{id}",
    ),
)


THUMBNAIL_RULES: tuple[ScanRule, ...] = (
    meta_content_rule("og_image", ("og:image",), group="url"),
    meta_content_rule("twitter_image", ("twitter:image", "twitter:image:src"), group="url"),
    tag_attribute_rule("video_poster", "video", "poster"),
    ScanRule(
        name="data_thumbnail",
        scan_kind=ScanKind.ATTRIBUTE,
        pattern=compile_pattern(
            attr("data-" + alternation(THUMBNAIL_DATA_ATTRIBUTES)) + quoted()
        ),
    ),
    ScanRule(
        name="data_src_image",
        scan_kind=ScanKind.ATTRIBUTE,
        pattern=compile_pattern(attr("data-src") + quoted()),
        accept=has_image_extension,
    ),
    ScanRule(
        name="json_thumbnail",
        scan_kind=ScanKind.JSON_KEY,
        pattern=json_value_pattern(
            alternation(THUMBNAIL_JSON_KEYS) + "(?:_url|Url)?"
        ),
        unescape_slashes=True,
    ),
    tag_attribute_rule("img_class", "img", "src", when=class_contains(THUMBNAIL_CLASS_HINTS)),
)

_IMG_SRC_RULE = tag_attribute_rule("img_src", "img", "src")

_DIMENSIONS_RE = re.compile(r"(?<!\d)(\d{1,4})x(\d{1,4})(?!\d)", re.IGNORECASE)
_SIZE_TOKEN_RE = re.compile(
    r"(?<![a-z])(?:w|h|width|height)[=_-]?(\d{3,4})(?!\d)", re.IGNORECASE
)


def _filename(url: str) -> str:
    return url_path(url).rsplit("/", 1)[-1]


def _is_non_content_image(url: str) -> bool:
    name = _filename(url)
    if any(keyword in name for keyword in NON_CONTENT_IMAGE_KEYWORDS):
        return True
    return any(
        int(w) < TINY_IMAGE_MAX_DIMENSION and int(h) < TINY_IMAGE_MAX_DIMENSION
        for w, h in _DIMENSIONS_RE.findall(name)
    )


def _looks_large(url: str) -> bool:
    path = url_path(url)
    if any(keyword in path for keyword in LARGE_IMAGE_KEYWORDS):
        return True
    for w, h in _DIMENSIONS_RE.findall(path):
        if max(int(w), int(h)) >= LARGE_IMAGE_MIN_DIMENSION:
            return True
    return any(
        int(size) >= LARGE_IMAGE_MIN_DIMENSION for size in _SIZE_TOKEN_RE.findall(url)
    )


def fallback_image(html: str) -> Optional[str]:
    """Pick the most promising plain ``<img>`` once every other source failed."""
    survivors: list[str] = []
    for raw in scan(_IMG_SRC_RULE, html):
        url = normalize_url(decode_entities(raw))
        if url is None or _is_non_content_image(url):
            continue
        if _looks_large(url):
            return url
        survivors.append(url)
    return survivors[0] if survivors else None


def find_thumbnail(html: str) -> Optional[str]:
    """Return the best-guess preview image URL for *html*, or ``None``."""
    if not html:
        return None

    for rule in THUMBNAIL_RULES:
        for raw in scan(rule, html):
            url = normalize_url(decode_entities(raw))
            if url and is_image_url(url):
                logger.debug(f"Thumbnail found via {rule.name}: {url}")
                return url

    for platform in PLATFORM_THUMBNAILS:
        url = platform.derive(html)
        if url:
            logger.debug(f"Thumbnail derived from {platform.name} video ID")
            return url

    return fallback_image(html)
