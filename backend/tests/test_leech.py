"""Tests for the auto-leech service and endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_current_user, require_admin
from app.main import app
from app.models.leech import (
    LeechImportItem,
    LeechImportRequest,
    ScrapeData,
    ScrapeOptions,
    ScrapeRequest,
    ScrapeResponse,
)
from app.models.media import MediaKind
from app.models.video import VideoStatus, VideoType, VideoVisibility
from app.services.leech import (
    DEFAULT_SCRAPE_OPTIONS,
    LeechService,
    ScrapeFailedError,
    build_video_record,
    get_leech_service,
)

PAGE_HTML = (
    "<html><head><title>Clip hay</title>"
    '<meta property="og:image" content="https://img.example.com/a.jpg"></head>'
    '<body><iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe></body></html>'
)


async def mock_admin():
    return {"user_id": "admin-user-id", "email": "admin@example.com", "role": "authenticated"}


def _make_service(scrape_response=None, insert_side_effect=None) -> LeechService:
    scraper = MagicMock()
    scraper.scrape = AsyncMock(return_value=scrape_response)
    repository = MagicMock()
    repository.insert_video = AsyncMock(side_effect=insert_side_effect)
    return LeechService(scraper, repository)


def _ok(html: str = PAGE_HTML) -> ScrapeResponse:
    return ScrapeResponse(success=True, data=ScrapeData(html=html, links=[]))


def _import_request(*urls: str, **flags) -> LeechImportRequest:
    return LeechImportRequest(
        items=[
            LeechImportItem(
                url=url,
                kind=MediaKind.FILE if url.endswith(".mp4") else MediaKind.FRAME,
                title=f"Video {i}",
            )
            for i, url in enumerate(urls)
        ],
        **flags,
    )


class TestBuildVideoRecord:
    def test_frame_maps_to_iframe(self):
        request = _import_request("https://www.youtube.com/embed/x", is_vip=True)
        record = build_video_record(request.items[0], request)

        assert record.video_type == VideoType.IFRAME
        assert record.status == VideoStatus.APPROVED
        assert record.visibility == VideoVisibility.PUBLIC
        assert record.is_vip is True

    def test_file_maps_to_upload(self):
        request = _import_request("https://cdn.example.com/a.mp4")
        record = build_video_record(request.items[0], request)
        assert record.video_type == VideoType.UPLOAD

    def test_blank_title_defaults(self):
        item = LeechImportItem(url="https://cdn.example.com/a.mp4", kind=MediaKind.FILE, title="  ")
        request = LeechImportRequest(items=[item], category_id="")
        record = build_video_record(item, request)

        assert record.title == "Untitled Video"
        assert record.category_id is None

    def test_row_shape(self):
        request = _import_request("https://www.youtube.com/embed/x", category_id="cat-1")
        row = build_video_record(request.items[0], request).to_row()

        assert row["video_type"] == "iframe"
        assert row["status"] == "approved"
        assert row["visibility"] == "public"
        assert row["category_id"] == "cat-1"
        assert "uploaded_by" not in row


class TestLeechService:
    @pytest.mark.asyncio
    async def test_scrape_applies_default_options(self):
        service = _make_service(_ok())
        await service.scrape(ScrapeRequest(url=" https://example.com/p "))
        service.scraper.scrape.assert_awaited_once_with(
            "https://example.com/p", DEFAULT_SCRAPE_OPTIONS
        )

    @pytest.mark.asyncio
    async def test_scrape_keeps_explicit_options(self):
        service = _make_service(_ok())
        options = ScrapeOptions(formats=["rawHtml"])
        await service.scrape(ScrapeRequest(url="https://example.com/p", options=options))
        service.scraper.scrape.assert_awaited_once_with("https://example.com/p", options)

    @pytest.mark.asyncio
    async def test_preview_extracts(self):
        service = _make_service(_ok())
        preview = await service.preview(ScrapeRequest(url="https://example.com/p"))

        assert preview.source_url == "https://example.com/p"
        assert [c.url for c in preview.candidates] == [
            "https://www.youtube.com/embed/dQw4w9WgXcQ"
        ]
        assert preview.thumbnail == "https://img.example.com/a.jpg"
        assert preview.title == "Clip hay"
        service.repository.insert_video.assert_not_called()

    @pytest.mark.asyncio
    async def test_preview_reads_legacy_html(self):
        service = _make_service(ScrapeResponse(success=True, html=PAGE_HTML))
        preview = await service.preview(ScrapeRequest(url="https://example.com/p"))
        assert len(preview.candidates) == 1

    @pytest.mark.asyncio
    async def test_preview_scrape_failure(self):
        service = _make_service(ScrapeResponse.failure("Blocked"))
        with pytest.raises(ScrapeFailedError, match="Blocked"):
            await service.preview(ScrapeRequest(url="https://example.com/p"))

    @pytest.mark.asyncio
    async def test_import_continues_after_failure(self):
        service = _make_service(
            insert_side_effect=[{"id": "v1"}, RuntimeError("duplicate key"), {"id": "v3"}]
        )
        result = await service.import_items(
            _import_request(
                "https://www.youtube.com/embed/a",
                "https://www.youtube.com/embed/b",
                "https://cdn.example.com/c.mp4",
            )
        )

        assert result.imported == 2
        assert result.failed == 1
        assert result.video_ids == ["v1", "v3"]
        assert result.errors == ["https://www.youtube.com/embed/b: duplicate key"]
        assert service.repository.insert_video.await_count == 3


class TestLeechEndpoints:
    @pytest.fixture
    def service(self):
        return _make_service(_ok(), insert_side_effect=[{"id": "v1"}])

    @pytest.fixture
    def client(self, service):
        app.dependency_overrides[require_admin] = mock_admin
        app.dependency_overrides[get_leech_service] = lambda: service
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_scrape_success(self, client):
        response = client.post("/leech/scrape", json={"url": "https://example.com/p"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["html"] == PAGE_HTML
        assert "error" not in body

    def test_scrape_failure_is_200_envelope(self, client, service):
        service.scraper.scrape.return_value = ScrapeResponse.failure("Timeout")

        response = client.post("/leech/scrape", json={"url": "https://example.com/p"})

        assert response.status_code == 200
        assert response.json() == {"success": False, "error": "Timeout"}

    def test_scrape_forwards_camel_case_options(self, client, service):
        client.post(
            "/leech/scrape",
            json={"url": "https://example.com/p", "options": {"waitFor": 1000}},
        )
        _, options = service.scraper.scrape.await_args.args
        assert options.wait_for == 1000

    def test_preview(self, client):
        response = client.post("/leech/preview", json={"url": "https://example.com/p"})

        assert response.status_code == 200
        assert response.json()["candidates"] == [
            {"url": "https://www.youtube.com/embed/dQw4w9WgXcQ", "kind": "frame"}
        ]

    def test_preview_failure_is_502(self, client, service):
        service.scraper.scrape.return_value = ScrapeResponse.failure("Blocked")

        response = client.post("/leech/preview", json={"url": "https://example.com/p"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Blocked"

    def test_import(self, client):
        response = client.post(
            "/leech/import",
            json={"items": [{"url": "https://www.youtube.com/embed/a", "kind": "frame"}]},
        )

        assert response.status_code == 200
        assert response.json()["imported"] == 1
        assert response.json()["video_ids"] == ["v1"]

    def test_import_requires_items(self, client):
        response = client.post("/leech/import", json={"items": []})
        assert response.status_code == 422


class TestAdminGuard:
    @pytest.fixture
    def client(self):
        async def mock_user():
            return {"user_id": "plain-user", "email": "u@example.com", "role": "authenticated"}

        app.dependency_overrides[get_current_user] = mock_user
        app.dependency_overrides[get_leech_service] = lambda: _make_service(_ok())
        yield TestClient(app)
        app.dependency_overrides.clear()

    def _supabase(self, is_admin: bool) -> MagicMock:
        supabase = MagicMock()
        supabase.rpc.return_value.execute = AsyncMock(return_value=MagicMock(data=is_admin))
        return supabase

    def test_non_admin_forbidden(self, client):
        supabase = self._supabase(False)
        with patch(
            "app.db.supabase.get_async_supabase_client_async",
            AsyncMock(return_value=supabase),
        ):
            response = client.post("/leech/scrape", json={"url": "https://example.com/p"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"
        supabase.rpc.assert_called_once_with(
            "has_role", {"_user_id": "plain-user", "_role": "admin"}
        )

    def test_admin_allowed(self, client):
        with patch(
            "app.db.supabase.get_async_supabase_client_async",
            AsyncMock(return_value=self._supabase(True)),
        ):
            response = client.post("/leech/scrape", json={"url": "https://example.com/p"})

        assert response.status_code == 200

    def test_missing_token(self):
        response = TestClient(app).post("/leech/scrape", json={"url": "https://example.com/p"})
        assert response.status_code in (401, 403)
