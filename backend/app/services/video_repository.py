"""Supabase access for video rows and uploader profiles."""

import logging

from supabase import AsyncClient

from app.models.video import VideoRecord

logger = logging.getLogger(__name__)


class VideoRepository:
    """Reads and writes the ``videos`` and ``profiles`` tables."""

    def __init__(self, supabase: AsyncClient) -> None:
        self.supabase = supabase

    async def insert_video(self, record: VideoRecord) -> dict:
        """Insert *record* and return the stored row."""
        result = await self.supabase.table("videos").insert(record.to_row()).execute()
        if not result.data:
            raise RuntimeError("Insert returned no row")
        return result.data[0]

    async def is_banned(self, user_id: str) -> bool:
        result = await (
            self.supabase.table("profiles")
            .select("is_banned")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return False
        return bool(result.data[0].get("is_banned"))


async def get_video_repository() -> VideoRepository:
    from app.db.supabase import get_async_supabase_client_async

    supabase = await get_async_supabase_client_async()
    return VideoRepository(supabase)
