"""Tests for app.services.media_extractor.normalize."""

import pytest

from app.models.media import MediaKind
from app.services.media_extractor.normalize import (
    CandidateSet,
    clean_text,
    decode_entities,
    is_file_url,
    is_image_url,
    normalize_url,
)


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://cdn.example.com/a.mp4", "https://cdn.example.com/a.mp4"),
            ("  http://example.com/v  ", "http://example.com/v"),
            ("//cdn.example.com/clip.mp4", "https://cdn.example.com/clip.mp4"),
        ],
    )
    def test_absolute_and_scheme_relative(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            None,
            "/videos/local.mp4",
            "videos/local.mp4",
            "data:image/png;base64,AAAA",
            "javascript:void(0)",
            "httpfoo://example.com",
            "https://",
        ],
    )
    def test_rejected(self, raw):
        assert normalize_url(raw) is None


class TestIsFileUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://cdn.example.com/a.mp4",
            "https://cdn.example.com/live/index.m3u8?token=abc",
            "https://cdn.example.com/a.WEBM",
            "https://cdn.example.com/a.mkv#t=10",
            "https://cdn.example.com/a.mov",
        ],
    )
    def test_video_extensions(self, url):
        assert is_file_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/embed/abc",
            "https://cdn.example.com/a.mp4.jpg",
            "https://cdn.example.com/page?file=a.mp4",
            "https://example.mp4/",
        ],
    )
    def test_not_video_files(self, url):
        assert not is_file_url(url)

    def test_malformed_netloc_does_not_raise(self):
        assert is_file_url("https://[broken/a.mp4")


class TestIsImageUrl:
    def test_extension(self):
        assert is_image_url("https://img.example.com/a.jpg")

    def test_image_in_path(self):
        assert is_image_url("https://example.com/images/123")

    def test_image_cdn_host(self):
        assert is_image_url("https://i.ytimg.com/vi/abc/default")

    def test_plain_page(self):
        assert not is_image_url("https://example.com/share/123")


class TestEntities:
    def test_known_entities_decoded(self):
        assert decode_entities("a &amp; b &lt;c&gt; &quot;d&quot; &#39;e&#39;") == (
            "a & b <c> \"d\" 'e'"
        )

    def test_unknown_entities_untouched(self):
        assert decode_entities("x &hellip; &#8217; &copy;") == "x &hellip; &#8217; &copy;"

    def test_single_pass(self):
        assert decode_entities("&amp;lt;") == "&lt;"

    def test_clean_text_strips_and_nulls(self):
        assert clean_text("  Hello&nbsp;") == "Hello"
        assert clean_text("&nbsp; ") is None
        assert clean_text("") is None
        assert clean_text(None) is None


class TestCandidateSet:
    def test_dedup_after_normalization(self):
        found = CandidateSet()
        assert found.add("//cdn.example.com/a.mp4")
        assert not found.add("https://cdn.example.com/a.mp4")
        assert len(found) == 1

    def test_case_sensitive_dedup(self):
        found = CandidateSet()
        found.add("https://cdn.example.com/A.mp4")
        found.add("https://cdn.example.com/a.mp4")
        assert len(found) == 2

    def test_extension_wins_over_declared_kind(self):
        found = CandidateSet()
        found.add("https://player.example.com/embed/a.mp4", MediaKind.FRAME)
        found.add("https://cdn.example.com/stream/live", MediaKind.FILE)
        kinds = [c.kind for c in found.to_list()]
        assert kinds == [MediaKind.FILE, MediaKind.FRAME]

    def test_invalid_urls_dropped(self):
        found = CandidateSet()
        assert not found.add("/relative/path.mp4")
        assert found.to_list() == []

    def test_to_list_is_a_copy(self):
        found = CandidateSet()
        found.add("https://cdn.example.com/a.mp4")
        found.to_list().clear()
        assert len(found) == 1
