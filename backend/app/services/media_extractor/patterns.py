"""Declarative pattern table and the generic scanner that evaluates it.

Every rule names the URL it captures ``url`` (or ``value`` for text rules).
Patterns never chain two variable-length runs that can overlap, so a failed
attempt gives back at most the run it just consumed and each scan stays
linear on untrusted HTML:

* tag rules match an opening tag once, up to the next ``<`` or ``>``, and
  read attributes out of it with one flat attribute pattern
* literal and bare-URL rules tokenize first and test the token afterwards
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from app.models.media import MediaKind
from app.services.media_extractor.constants import (
    CDN_HOSTS,
    DISCOVERY_FILE_EXTENSIONS,
    LITERAL_IMAGE_HINTS,
    MAX_TAG_LENGTH,
    MAX_URL_LENGTH,
    PLATFORM_EMBED_PATHS,
    PLAYER_PATH_SEGMENTS,
    VIDEO_DATA_ATTRIBUTES,
    VIDEO_HOST_INDICATORS,
    VIDEO_JSON_KEYS,
)
from app.services.media_extractor.normalize import is_file_url


class ScanKind(str, Enum):
    """Where in the document a rule looks."""

    ATTRIBUTE = "attribute"
    TAG_CONTENT = "tag_content"
    JSON_KEY = "json_key"
    LITERAL = "literal"
    HOST = "host"


@dataclass(frozen=True)
class ScanRule:
    """One entry of a pattern table.

    Tag rules set ``attribute``: ``pattern`` then matches whole opening tags,
    ``when`` filters on the parsed attributes and the named attribute is the
    value. ``locate`` narrows a matched token down to the URL inside it.
    """

    name: str
    scan_kind: ScanKind
    pattern: re.Pattern
    classify: Optional[MediaKind] = None
    accept: Optional[Callable[[str], bool]] = None
    group: str = "url"
    unescape_slashes: bool = False
    attribute: Optional[str] = None
    when: Optional[Callable[[dict[str, str]], bool]] = None
    locate: Optional[Callable[[str], Optional[str]]] = None


# ---------------------------------------------------------------------------
# Pattern fragments
# ---------------------------------------------------------------------------

_URL_CHAR = r"""[^\s"'<>]"""
_EQ = r"\s{0,5}=\s{0,5}"
_SCHEME = r"(?:https?:)?//"


def quoted(group: str = "url", max_length: int = MAX_URL_LENGTH) -> str:
    """Single- or double-quoted attribute value captured as *group*."""
    q = f"{group}_q"
    return (
        rf"""(?P<{q}>["'])(?P<{group}>(?:(?!(?P={q}))[^<>]){{1,{max_length}}})(?P={q})"""
    )


def attr(name: str) -> str:
    """Attribute name not preceded by a word char or dash (``src`` != ``data-src``)."""
    return rf"(?<![\w-]){name}{_EQ}"


def alternation(options: tuple[str, ...]) -> str:
    return "(?:" + "|".join(options) + ")"


def compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def json_value_pattern(keys: str, group: str = "url") -> re.Pattern:
    """Pattern for a JSON-ish ``"key": "value"`` pair (either quote style)."""
    return compile_pattern(
        rf"""["']{keys}["']\s{{0,5}}:\s{{0,5}}["'](?P<{group}>[^"'\s]{{1,{MAX_URL_LENGTH}}})["']"""
    )


# ---------------------------------------------------------------------------
# Tags and attributes
# ---------------------------------------------------------------------------

_ATTRIBUTE_RE = re.compile(
    rf"""(?<![^\s"'/])(?P<name>[^\s"'<>/=]{{1,64}}){_EQ}"""
    rf"""(?:"(?P<dq>[^"]{{0,{MAX_TAG_LENGTH}}})"|'(?P<sq>[^']{{0,{MAX_TAG_LENGTH}}})'"""
    rf"""|(?P<bare>[^\s"'=<>`]{{1,{MAX_TAG_LENGTH}}}))"""
)


def opening_tag_pattern(tags: str) -> re.Pattern:
    """Pattern for ``<TAG ...`` capturing its attribute text as ``attrs``."""
    return compile_pattern(rf"<{tags}\b(?P<attrs>[^<>]{{0,{MAX_TAG_LENGTH}}})")


def parse_attributes(text: str) -> dict[str, str]:
    """Attribute name (lower-cased) to raw value; the first occurrence wins."""
    attributes: dict[str, str] = {}
    for match in _ATTRIBUTE_RE.finditer(text):
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        attributes.setdefault(match.group("name").lower(), value)
    return attributes


def meta_key_in(keys: tuple[str, ...]) -> Callable[[dict[str, str]], bool]:
    """``when`` filter for ``<meta property|name=KEY>``."""
    wanted = {key.lower() for key in keys}

    def check(attributes: dict[str, str]) -> bool:
        return any(
            attributes.get(name, "").strip().lower() in wanted
            for name in ("property", "name")
        )

    return check


def class_contains(hints: tuple[str, ...]) -> Callable[[dict[str, str]], bool]:
    """``when`` filter for tags whose class attribute mentions one of *hints*."""

    def check(attributes: dict[str, str]) -> bool:
        classes = attributes.get("class", "").lower()
        return any(hint in classes for hint in hints)

    return check


def tag_attribute_rule(
    name: str,
    tags: str,
    attribute: str,
    *,
    when: Optional[Callable[[dict[str, str]], bool]] = None,
    classify: Optional[MediaKind] = None,
    accept: Optional[Callable[[str], bool]] = None,
    group: str = "url",
) -> ScanRule:
    """Rule reading *attribute* from every ``<tags ...>`` opening tag."""
    return ScanRule(
        name=name,
        scan_kind=ScanKind.ATTRIBUTE,
        pattern=opening_tag_pattern(tags),
        classify=classify,
        accept=accept,
        group=group,
        attribute=attribute,
        when=when,
    )


def meta_content_rule(name: str, keys: tuple[str, ...], group: str = "value") -> ScanRule:
    """Rule for ``<meta property|name=KEY content=...>`` in either attribute order."""
    return tag_attribute_rule(name, "meta", "content", when=meta_key_in(keys), group=group)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

# Zero-width so a rejected literal does not swallow the opening quote of the next one
QUOTED_LITERAL_PATTERN = compile_pattern(
    rf"""(?=["'](?P<url>{_URL_CHAR}{{1,{MAX_URL_LENGTH}}})["'])"""
)
URL_TOKEN_PATTERN = compile_pattern(rf"(?P<url>{_SCHEME}{_URL_CHAR}{{1,{MAX_URL_LENGTH}}})")
_SCHEME_RE = compile_pattern(_SCHEME)


def embedded_url(host_pattern: re.Pattern) -> Callable[[str], Optional[str]]:
    """``locate`` returning the URL inside a token whose host part matches *host_pattern*."""

    def locate(token: str) -> Optional[str]:
        for scheme in _SCHEME_RE.finditer(token):
            if host_pattern.match(token, scheme.end()):
                return token[scheme.start():]
        return None

    return locate


# ---------------------------------------------------------------------------
# Acceptance filters
# ---------------------------------------------------------------------------

_VIDEO_HOST_RE = compile_pattern(alternation(VIDEO_HOST_INDICATORS))
_DISCOVERY_EXT_RE = compile_pattern(
    r"\." + alternation(DISCOVERY_FILE_EXTENSIONS) + r"(?:$|[?#&/])"
)
_FILE_EXT_IN_TOKEN_RE = compile_pattern(
    r"\." + alternation(DISCOVERY_FILE_EXTENSIONS) + r"(?![\w.])"
)
_HLS_RE = compile_pattern(r"\.m3u8")
_MP4_WEBM_RE = compile_pattern(r"\.(?:mp4|webm)")
_PLAYER_SEGMENTS = frozenset(PLAYER_PATH_SEGMENTS)
_MAX_PLAYER_DEPTH = 17


def is_video_host(url: str) -> bool:
    """Host/path allowlist test used to keep only video iframes."""
    return bool(_VIDEO_HOST_RE.search(url) or _DISCOVERY_EXT_RE.search(url))


def not_image_literal(url: str) -> bool:
    lowered = url.lower()
    return not any(hint in lowered for hint in LITERAL_IMAGE_HINTS)


def is_hls_literal(value: str) -> bool:
    return bool(_HLS_RE.search(value))


def is_video_literal(value: str) -> bool:
    return bool(_MP4_WEBM_RE.search(value)) and not_image_literal(value)


def has_file_extension(token: str) -> bool:
    return bool(_FILE_EXT_IN_TOKEN_RE.search(token))


def has_player_path(url: str) -> bool:
    """True for ``http(s)://host/.../stream|player|video|embed/...`` URLs."""
    if not url.lower().startswith(("http://", "https://")):
        return False
    parts = url.split("/")
    if not 0 < len(parts[2]) <= 253:
        return False
    # Only segments followed by another "/" count
    return any(
        segment.lower() in _PLAYER_SEGMENTS
        for segment in parts[3:-1][:_MAX_PLAYER_DEPTH]
    )


# ---------------------------------------------------------------------------
# URL discovery table (evaluated in order)
# ---------------------------------------------------------------------------

VIDEO_URL_RULES: tuple[ScanRule, ...] = (
    tag_attribute_rule(
        "iframe_src",
        "iframe",
        "src",
        classify=MediaKind.FRAME,
        accept=is_video_host,
    ),
    tag_attribute_rule(
        "media_tag_src",
        "(?:video|source)",
        "src",
        classify=MediaKind.FILE,
    ),
    ScanRule(
        name="data_attribute",
        scan_kind=ScanKind.ATTRIBUTE,
        pattern=compile_pattern(
            attr("data-" + alternation(VIDEO_DATA_ATTRIBUTES)) + quoted()
        ),
        classify=MediaKind.FILE,
        accept=is_file_url,
    ),
    ScanRule(
        name="hls_literal",
        scan_kind=ScanKind.LITERAL,
        pattern=QUOTED_LITERAL_PATTERN,
        classify=MediaKind.FILE,
        accept=is_hls_literal,
        unescape_slashes=True,
    ),
    ScanRule(
        name="mp4_webm_literal",
        scan_kind=ScanKind.LITERAL,
        pattern=QUOTED_LITERAL_PATTERN,
        classify=MediaKind.FILE,
        accept=is_video_literal,
        unescape_slashes=True,
    ),
    ScanRule(
        name="platform_embed",
        scan_kind=ScanKind.HOST,
        pattern=URL_TOKEN_PATTERN,
        classify=MediaKind.FRAME,
        locate=embedded_url(
            compile_pattern(rf"(?:www\.)?{alternation(PLATFORM_EMBED_PATHS)}.")
        ),
    ),
    ScanRule(
        name="file_extension_url",
        scan_kind=ScanKind.HOST,
        pattern=URL_TOKEN_PATTERN,
        classify=MediaKind.FILE,
        accept=has_file_extension,
    ),
    ScanRule(
        name="streaming_cdn",
        scan_kind=ScanKind.HOST,
        pattern=URL_TOKEN_PATTERN,
        classify=MediaKind.FRAME,
        locate=embedded_url(compile_pattern(rf"{alternation(CDN_HOSTS)}.")),
    ),
    ScanRule(
        name="player_path",
        scan_kind=ScanKind.HOST,
        pattern=URL_TOKEN_PATTERN,
        classify=MediaKind.FRAME,
        accept=has_player_path,
    ),
    ScanRule(
        name="json_video_key",
        scan_kind=ScanKind.JSON_KEY,
        pattern=json_value_pattern(alternation(VIDEO_JSON_KEYS)),
        unescape_slashes=True,
    ),
)


def _raw_value(rule: ScanRule, match: re.Match) -> Optional[str]:
    if rule.attribute is None:
        return match.group(rule.group)
    attributes = parse_attributes(match.group("attrs"))
    if rule.when is not None and not rule.when(attributes):
        return None
    return attributes.get(rule.attribute)


def scan(rule: ScanRule, html: str) -> Iterator[str]:
    """Yield every raw value *rule* captures in *html*, in document order."""
    for match in rule.pattern.finditer(html):
        value = _raw_value(rule, match)
        if not value:
            continue
        if rule.unescape_slashes:
            value = value.replace("\\/", "/")
        if rule.locate is not None:
            value = rule.locate(value)
            if not value:
                continue
        if rule.accept is not None and not rule.accept(value):
            continue
        yield value
