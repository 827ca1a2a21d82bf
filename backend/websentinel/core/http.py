import logging
import httpx
from contextlib import asynccontextmanager
from typing import Optional
from websentinel.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Base class for failures that prevent a report from being produced."""


class InvalidTargetError(ScanError):
    pass


class FetchError(ScanError):
    pass


def normalize_target(raw: str) -> str:
    """
    Turn operator input ("example.com", " https://example.com/path ") into an
    absolute http(s) URL. Bare domains default to https.
    """
    target = (raw or "").strip()
    if not target:
        raise InvalidTargetError("Please enter a URL.")
    if "://" not in target:
        target = f"https://{target}"
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL as e:
        raise InvalidTargetError(f"Invalid URL: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidTargetError(f"Invalid URL: {raw.strip()}")
    return target


@asynccontextmanager
async def client_for(settings: Optional[Settings] = None):
    settings = settings or get_settings()
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout, connect=settings.connect_timeout),
        headers={"User-Agent": settings.user_agent, "Accept": "text/html, */*"},
        follow_redirects=True,
        http2=True,
        verify=True,
    ) as client:
        yield client


async def fetch_headers(client: httpx.AsyncClient, url: str) -> httpx.Headers:
    try:
        resp = await client.get(url)
    except httpx.TimeoutException as e:
        logger.warning("Timed out fetching %s: %r", url, e)
        raise FetchError(f"Timed out while connecting to {url}.") from e
    except httpx.HTTPError as e:
        logger.warning("Failed to fetch %s: %r", url, e)
        raise FetchError(f"Failed to fetch {url}: {e}") from e

    if not resp.is_success:
        logger.warning("Fetch of %s returned HTTP %s", url, resp.status_code)
        raise FetchError(f"{resp.url} responded with HTTP {resp.status_code}.")
    return resp.headers
