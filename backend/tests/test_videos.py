"""Tests for the video upload service and endpoint."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_current_user
from app.main import app
from app.models.video import VideoStatus, VideoType
from app.services.bunny_storage import BunnyStorageError
from app.services.video_upload import (
    StorageConfigurationError,
    UploadedFile,
    UploadForbiddenError,
    UploadRejectedError,
    VideoUploadService,
    file_extension,
    get_upload_service,
    title_slug,
)

MB = 1024 * 1024


async def mock_get_current_user():
    return {"user_id": "test-user-id", "email": "test@example.com", "role": "authenticated"}


def _make_service(*, banned=False, configured=True, upload_side_effect=None, max_mb=500):
    storage = MagicMock()
    storage.is_configured = configured
    storage.upload = AsyncMock(
        side_effect=upload_side_effect
        or (lambda path, content: f"https://myzone.b-cdn.net/{path}")
    )
    repository = MagicMock()
    repository.is_banned = AsyncMock(return_value=banned)
    repository.insert_video = AsyncMock(side_effect=lambda record: {"id": "vid-1", **record.to_row()})
    return VideoUploadService(
        storage, repository, max_size_bytes=max_mb * MB, clock=lambda: 1700000000.0
    )


def _video(content=b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4", filename="clip.mp4"):
    return UploadedFile(filename=filename, content_type=content_type, content=content)


class TestHelpers:
    def test_title_slug(self):
        assert title_slug("My Video!") == "My_Video_"
        assert title_slug("Phim hay") == "Phim_hay"
        assert len(title_slug("x" * 80)) == 50

    def test_file_extension(self):
        assert file_extension("clip.webm", "mp4") == "webm"
        assert file_extension("clip", "mp4") == "mp4"
        assert file_extension("archive.tar.mov", "mp4") == "mov"

    def test_file_extension_rejects_path_characters(self):
        assert file_extension("x.mp4/../../y", "mp4") == "mp4"
        assert file_extension("clip.", "mp4") == "mp4"
        assert file_extension("clip.m p4", "mp4") == "mp4"
        assert file_extension("clip.abcdefghijk", "jpg") == "jpg"


class TestValidate:
    def test_missing_video(self):
        with pytest.raises(UploadRejectedError, match="Video file and title are required"):
            _make_service().validate(None, "Title")

    def test_blank_title(self):
        with pytest.raises(UploadRejectedError, match="Video file and title are required"):
            _make_service().validate(_video(), "   ")

    def test_wrong_type(self):
        with pytest.raises(UploadRejectedError, match="Invalid video format"):
            _make_service().validate(_video(content_type="video/x-msvideo"), "Title")

    def test_too_large(self):
        service = _make_service(max_mb=1)
        with pytest.raises(UploadRejectedError, match="Maximum size is 1MB"):
            service.validate(_video(content=b"x" * (MB + 1)), "Title")

    def test_valid(self):
        _make_service().validate(_video(content_type="video/quicktime"), "Title")


class TestUpload:
    @pytest.mark.asyncio
    async def test_success(self):
        service = _make_service()
        row = await service.upload(
            "user-1", _video(), " My Video ", description="desc", category_id="cat-1"
        )

        service.storage.upload.assert_awaited_once_with(
            "videos/1700000000000_My_Video.mp4", b"\x00\x00\x00\x18ftypmp42"
        )
        record = service.repository.insert_video.await_args.args[0]
        assert record.title == "My Video"
        assert record.status == VideoStatus.PENDING
        assert record.video_type == VideoType.BUNNY
        assert record.uploaded_by == "user-1"
        assert record.thumbnail_url is None
        assert row["video_url"] == "https://myzone.b-cdn.net/videos/1700000000000_My_Video.mp4"

    @pytest.mark.asyncio
    async def test_thumbnail_uploaded(self):
        service = _make_service()
        thumb = UploadedFile(filename="t.png", content_type="image/png", content=b"png")

        row = await service.upload("user-1", _video(), "My Video", thumbnail=thumb)

        assert row["thumbnail_url"] == (
            "https://myzone.b-cdn.net/thumbnails/1700000000000_My_Video_thumb.png"
        )

    @pytest.mark.asyncio
    async def test_thumbnail_failure_is_not_fatal(self):
        async def upload(path, content):
            if path.startswith("thumbnails/"):
                raise BunnyStorageError("Upload failed with status 500")
            return f"https://myzone.b-cdn.net/{path}"

        service = _make_service(upload_side_effect=upload)
        thumb = UploadedFile(filename="t.jpg", content_type="image/jpeg", content=b"jpg")

        row = await service.upload("user-1", _video(), "My Video", thumbnail=thumb)

        assert row["thumbnail_url"] is None
        service.repository.insert_video.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsupported_thumbnail_ignored(self):
        service = _make_service()
        thumb = UploadedFile(filename="t.gif", content_type="image/gif", content=b"gif")

        await service.upload("user-1", _video(), "My Video", thumbnail=thumb)

        assert service.storage.upload.await_count == 1

    @pytest.mark.asyncio
    async def test_banned_checked_first(self):
        service = _make_service(banned=True)
        with pytest.raises(UploadForbiddenError):
            await service.upload("user-1", None, None)
        service.storage.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_not_configured(self):
        service = _make_service(configured=False)
        with pytest.raises(StorageConfigurationError, match="Server configuration error"):
            await service.upload("user-1", _video(), "My Video")

    @pytest.mark.asyncio
    async def test_video_upload_failure_propagates(self):
        service = _make_service(upload_side_effect=BunnyStorageError("boom"))
        with pytest.raises(BunnyStorageError):
            await service.upload("user-1", _video(), "My Video")
        service.repository.insert_video.assert_not_called()


class TestUploadEndpoint:
    @pytest.fixture
    def service(self):
        return _make_service()

    @pytest.fixture
    def client(self, service):
        app.dependency_overrides[get_current_user] = mock_get_current_user
        app.dependency_overrides[get_upload_service] = lambda: service
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_upload(self, client):
        response = client.post(
            "/videos/upload",
            files={"video": ("clip.mp4", b"videobytes", "video/mp4")},
            data={"title": "My Video", "description": "desc"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["video"]["status"] == "pending"
        assert body["video"]["uploaded_by"] == "test-user-id"

    def test_missing_title(self, client):
        response = client.post(
            "/videos/upload", files={"video": ("clip.mp4", b"videobytes", "video/mp4")}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Video file and title are required"

    def test_wrong_type(self, client):
        response = client.post(
            "/videos/upload",
            files={"video": ("clip.avi", b"videobytes", "video/x-msvideo")},
            data={"title": "My Video"},
        )
        assert response.status_code == 400

    def test_banned(self, client, service):
        service.repository.is_banned.return_value = True

        response = client.post(
            "/videos/upload",
            files={"video": ("clip.mp4", b"videobytes", "video/mp4")},
            data={"title": "My Video"},
        )

        assert response.status_code == 403

    def test_storage_failure(self, client, service):
        service.storage.upload.side_effect = BunnyStorageError("boom")

        response = client.post(
            "/videos/upload",
            files={"video": ("clip.mp4", b"videobytes", "video/mp4")},
            data={"title": "My Video"},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to upload video to storage"

    def test_database_failure(self, client, service):
        service.repository.insert_video.side_effect = RuntimeError("Insert returned no row")

        response = client.post(
            "/videos/upload",
            files={"video": ("clip.mp4", b"videobytes", "video/mp4")},
            data={"title": "My Video"},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to save video information"
