"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str
    supabase_key: str
    supabase_service_key: str
    # JWT secret for legacy HS256 tokens (falls back to supabase_key)
    supabase_jwt_secret: Optional[str] = None

    # Firecrawl (optional - only required for auto-leech)
    firecrawl_api_key: Optional[str] = None
    firecrawl_api_url: str = "https://api.firecrawl.dev"
    firecrawl_timeout: int = 90  # seconds, covers the scraper's own waitFor

    # Bunny.net storage (optional - only required for uploads)
    bunny_api_key: Optional[str] = None
    bunny_storage_zone: Optional[str] = None
    bunny_storage_host: str = "storage.bunnycdn.com"
    # Comma-separated hosts probed by the credential check
    bunny_test_hosts: str = "storage.bunnycdn.com,sg.storage.bunnycdn.com"
    bunny_timeout: int = 300  # 5 minutes for large uploads

    # Upload limits
    max_upload_size_mb: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def bunny_test_host_list(self) -> list[str]:
        return [h.strip() for h in self.bunny_test_hosts.split(",") if h.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings for testing."""
    global _settings
    _settings = None
