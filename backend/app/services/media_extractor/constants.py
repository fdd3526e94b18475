"""Named constants for the media extractor package.

Keyword lists and limits live here so the heuristics can be tuned from one
place without touching the scanning code.
"""

# ---------------------------------------------------------------------------
# Input limits (characters)
# ---------------------------------------------------------------------------
MAX_HTML_LENGTH = 5_000_000  # Longer documents are truncated before scanning
MAX_URL_LENGTH = 2_048  # Longest URL a single pattern will consume
MAX_TAG_LENGTH = 4_096  # Attributes read from one opening tag
MAX_TEXT_LENGTH = 2_048  # Longest title / description captured

# ---------------------------------------------------------------------------
# Video file extensions
# ---------------------------------------------------------------------------
# Extensions that make a URL a directly playable file (final classification)
VIDEO_FILE_EXTENSIONS: tuple[str, ...] = (
    "mp4",
    "m3u8",
    "webm",
    "ogg",
    "flv",
    "avi",
    "mov",
    "mkv",
)
# Extensions searched for when scanning free text for media URLs
DISCOVERY_FILE_EXTENSIONS: tuple[str, ...] = ("mp4", "m3u8", "webm", "ogg", "flv")

# ---------------------------------------------------------------------------
# Iframe host allowlist (substring / regex fragments, case-insensitive)
# ---------------------------------------------------------------------------
VIDEO_HOST_INDICATORS: tuple[str, ...] = (
    r"youtube\.com",
    r"youtu\.be",
    r"vimeo\.com",
    r"dailymotion\.com",
    r"player\.",
    r"embed",
    r"video",
    r"stream",
    r"mediadelivery\.net",
    r"streamable\.com",
    r"ok\.ru",
    r"vk\.com",
)

# Embed paths of well-known video platforms
PLATFORM_EMBED_PATHS: tuple[str, ...] = (
    r"youtube\.com/embed/",
    r"youtube-nocookie\.com/embed/",
    r"player\.vimeo\.com/video/",
    r"dailymotion\.com/embed/",
    r"ok\.ru/videoembed/",
    r"vk\.com/video_ext\.php",
    r"streamable\.com/[oe]/",
    r"pornhub\.com/embed/",
    r"xvideos\.com/embedframe/",
    r"xnxx\.com/embedframe/",
)

# Streaming / social-video CDN hosts
CDN_HOSTS: tuple[str, ...] = (
    r"iframe\.mediadelivery\.net",
    r"video-[a-z0-9-]{1,64}\.xx\.fbcdn\.net",
    r"[a-z0-9-]{1,64}\.googlevideo\.com",
)

# Path segments that mark a player or stream page on any host
PLAYER_PATH_SEGMENTS: tuple[str, ...] = ("stream", "player", "video", "embed")

# Script literals with these words are images sitting next to a video URL
LITERAL_IMAGE_HINTS: tuple[str, ...] = ("poster", "thumb", "preview")

# JSON keys whose string values are video sources
VIDEO_JSON_KEYS: tuple[str, ...] = (
    "video_url",
    "videoUrl",
    "src",
    "file",
    "source",
    "stream",
    "hls",
    "mp4",
)

# data-* attributes that carry video sources
VIDEO_DATA_ATTRIBUTES: tuple[str, ...] = (
    "src",
    "video",
    "stream",
    "file",
    "url",
    "source",
)

# ---------------------------------------------------------------------------
# Thumbnails
# ---------------------------------------------------------------------------
IMAGE_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp", "avif", "bmp")
IMAGE_CDN_SUFFIXES: tuple[str, ...] = (
    "ytimg.com",
    "vimeocdn.com",
    "dmcdn.net",
    "phncdn.com",
    "cloudinary.com",
    "imgix.net",
    "twimg.com",
    "fbcdn.net",
    "googleusercontent.com",
)
THUMBNAIL_DATA_ATTRIBUTES: tuple[str, ...] = (
    "poster",
    "thumb",
    "thumbnail",
    "preview",
    "image",
)
THUMBNAIL_JSON_KEYS: tuple[str, ...] = ("thumbnail", "thumb", "poster", "preview", "image")
THUMBNAIL_CLASS_HINTS: tuple[str, ...] = ("thumb", "poster", "preview", "cover", "featured")

# Fallback <img> filtering
NON_CONTENT_IMAGE_KEYWORDS: tuple[str, ...] = (
    "icon",
    "logo",
    "sprite",
    "nav",
    "social",
    "avatar",
    "emoji",
    "pixel",
    "spacer",
    "badge",
    "button",
)
LARGE_IMAGE_KEYWORDS: tuple[str, ...] = (
    "large",
    "big",
    "full",
    "hd",
    "1080",
    "720",
    "poster",
    "thumb",
)
TINY_IMAGE_MAX_DIMENSION = 100  # NxN in the filename below this is an icon
LARGE_IMAGE_MIN_DIMENSION = 400  # Width/height token at or above this is "large"

# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------
HTML_ENTITIES: dict[str, str] = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&nbsp;": " ",
}
