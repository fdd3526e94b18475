"""Firecrawl scrape client.

Fetches a page through the Firecrawl API and returns the scrape envelope
unchanged in shape: on any failure the caller gets
``ScrapeResponse(success=False, error=...)`` instead of an exception.
"""

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import get_settings
from app.models.leech import ScrapeOptions, ScrapeResponse
from app.services.media_extractor.constants import MAX_HTML_LENGTH

logger = logging.getLogger(__name__)

_client: Optional["FirecrawlClient"] = None


class FirecrawlClient:
    """Thin async wrapper around ``POST /v1/scrape``."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def scrape(
        self, url: str, options: Optional[ScrapeOptions] = None
    ) -> ScrapeResponse:
        """Scrape *url* and return the envelope.

        Retries transport errors and timeouts; HTTP error statuses and
        ``success: false`` bodies are reported as failures without retry.
        """
        if not self.api_key:
            return ScrapeResponse.failure("Firecrawl API key is not configured")

        payload: dict[str, Any] = {"url": url}
        if options is not None:
            payload.update(options.model_dump(by_alias=True, exclude_none=True))

        logger.info(f"Scraping {url}")
        try:
            body = await self._post("/v1/scrape", payload)
        except httpx.HTTPStatusError as e:
            logger.error(f"Firecrawl returned {e.response.status_code} for {url}")
            return ScrapeResponse.failure(
                _error_from_response(e.response)
                or f"Scrape failed with status {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            logger.error(f"Firecrawl request failed for {url}: {e}")
            return ScrapeResponse.failure(f"Scrape request failed: {e!s}")
        except ValueError as e:
            logger.error(f"Firecrawl returned invalid JSON for {url}: {e}")
            return ScrapeResponse.failure("Scrape service returned an invalid response")

        if not isinstance(body, dict):
            return ScrapeResponse.failure("Scrape service returned an invalid response")

        if not body.get("success"):
            return ScrapeResponse.failure(body.get("error") or "Scrape failed")

        result = ScrapeResponse.model_validate(body)
        _cap_html(result, url)
        return result

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _post(self, path: str, payload: dict) -> Any:
        response = await self._http.post(
            f"{self.base_url}{path}",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        await self._http.aclose()


def _cap_html(result: ScrapeResponse, url: str) -> None:
    """Truncate every HTML field of *result* to ``MAX_HTML_LENGTH`` in place."""
    targets = [result]
    if result.data is not None:
        targets.append(result.data)
    for target in targets:
        for field in ("html", "raw_html"):
            value = getattr(target, field, None)
            if value and len(value) > MAX_HTML_LENGTH:
                logger.warning(
                    f"Scraped {field} for {url} is {len(value)} chars, "
                    f"truncating to {MAX_HTML_LENGTH}"
                )
                setattr(target, field, value[:MAX_HTML_LENGTH])


def _error_from_response(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None


def get_firecrawl_client() -> FirecrawlClient:
    """Get or create the singleton ``FirecrawlClient``."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = FirecrawlClient(
            api_key=settings.firecrawl_api_key,
            base_url=settings.firecrawl_api_url,
            timeout=settings.firecrawl_timeout,
        )
    return _client


def reset_firecrawl_client() -> None:
    """Reset client for testing."""
    global _client
    _client = None
