"""Bunny.net storage client: credential checks and file uploads."""

import asyncio
import logging
from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import get_settings
from app.models.bunny import CredentialReport, HostTestResult

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_HOST = "storage.bunnycdn.com"
DEFAULT_TEST_HOSTS = ("storage.bunnycdn.com", "sg.storage.bunnycdn.com")

_client: Optional["BunnyStorageClient"] = None


class BunnyStorageError(Exception):
    """Upload to the storage zone failed."""


class BunnyStorageClient:
    """Talks to the Bunny storage API with a storage zone's ``AccessKey``."""

    def __init__(
        self,
        api_key: Optional[str],
        storage_zone: Optional[str],
        *,
        storage_host: str = DEFAULT_STORAGE_HOST,
        test_hosts: tuple[str, ...] | list[str] = DEFAULT_TEST_HOSTS,
        timeout: float = 300,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = (api_key or "").strip() or None
        self.storage_zone = (storage_zone or "").strip() or None
        self.storage_host = storage_host
        self.test_hosts = tuple(test_hosts)
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.storage_zone)

    # ------------------------------------------------------------------
    # Credential checks
    # ------------------------------------------------------------------

    async def test_host(self, host: str, storage_zone: str, api_key: str) -> HostTestResult:
        """List the zone root on *host* and report whether the key works."""
        url = f"https://{host}/{storage_zone}/"
        try:
            response = await self._http.get(
                url, headers={"AccessKey": api_key, "Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            logger.warning(f"Host {host} request failed: {e}")
            return HostTestResult(host=host, success=False, message=str(e) or "Network error")

        if response.is_success:
            return HostTestResult(
                host=host,
                success=True,
                status=response.status_code,
                message="Connection successful!",
            )

        logger.warning(f"Host {host} returned {response.status_code}")
        if response.status_code == 401:
            message = "Invalid API Key (Password)"
        elif response.status_code == 404:
            message = "Storage zone not found"
        else:
            message = f"Error {response.status_code}"
        return HostTestResult(
            host=host, success=False, status=response.status_code, message=message
        )

    async def check_credentials(
        self,
        storage_zone: Optional[str] = None,
        api_key: Optional[str] = None,
        note: Optional[str] = None,
    ) -> CredentialReport:
        """Probe every test host concurrently with the given (or configured) pair."""
        zone = (storage_zone if storage_zone is not None else self.storage_zone or "").strip()
        key = (api_key if api_key is not None else self.api_key or "").strip()

        report = CredentialReport(
            has_api_key=bool(key),
            has_storage_zone=bool(zone),
            storage_zone_name=zone or None,
            api_key_length=len(key),
            api_key_preview=api_key_preview(key),
            note=note,
        )

        if not key or not zone:
            missing = []
            if not key:
                missing.append("BUNNY_API_KEY")
            if not zone:
                missing.append("BUNNY_STORAGE_ZONE")
            report.host_tests = [
                HostTestResult(
                    host="N/A",
                    success=False,
                    message=f"Missing credentials: {' '.join(missing)}",
                )
            ]
            return report

        logger.info(f"Testing Bunny connection to zone: {zone}")
        report.host_tests = list(
            await asyncio.gather(*(self.test_host(h, zone, key) for h in self.test_hosts))
        )
        report.recommended_host = next(
            (result.host for result in report.host_tests if result.success), None
        )
        return report

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def public_url(self, path: str) -> str:
        """CDN pull-zone URL for an object stored at *path*."""
        return f"https://{self.storage_zone}.b-cdn.net/{path.lstrip('/')}"

    async def upload(self, path: str, content: bytes) -> str:
        """Store *content* at *path* in the zone and return its public URL.

        Raises:
            BunnyStorageError: If the client is unconfigured or the upload fails.
        """
        if not self.is_configured:
            raise BunnyStorageError("Bunny storage credentials are not configured")

        try:
            response = await self._put(path.lstrip("/"), content)
        except httpx.HTTPError as e:
            raise BunnyStorageError(f"Upload request failed: {e!s}") from e

        if not response.is_success:
            logger.error(f"Bunny upload error {response.status_code}: {response.text}")
            raise BunnyStorageError(f"Upload failed with status {response.status_code}")

        return self.public_url(path)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def _put(self, path: str, content: bytes) -> httpx.Response:
        return await self._http.put(
            f"https://{self.storage_host}/{self.storage_zone}/{path}",
            content=content,
            headers={
                "AccessKey": self.api_key or "",
                "Content-Type": "application/octet-stream",
            },
        )

    async def close(self) -> None:
        await self._http.aclose()


def api_key_preview(api_key: str) -> Optional[str]:
    """``abcd...wxyz`` style preview that never reveals the whole key."""
    if not api_key:
        return None
    return f"{api_key[:4]}...{api_key[-4:]}"


def get_bunny_client() -> BunnyStorageClient:
    """Get or create the singleton ``BunnyStorageClient``."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = BunnyStorageClient(
            api_key=settings.bunny_api_key,
            storage_zone=settings.bunny_storage_zone,
            storage_host=settings.bunny_storage_host,
            test_hosts=settings.bunny_test_host_list,
            timeout=settings.bunny_timeout,
        )
    return _client


def reset_bunny_client() -> None:
    """Reset client for testing."""
    global _client
    _client = None
