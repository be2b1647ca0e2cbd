"""HTTP fetching with browser-like headers and a bounded retry."""

import logging
from dataclasses import dataclass

import httpx

from recipe_intake.config import settings

from .errors import RecipeImportError

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

LOGIN_INDICATORS = [
    "sign in to continue",
    "log in to view",
    "log in to see",
    "subscribe to read",
    "subscription required",
    "please log in",
    "members only",
]

LOGIN_WALL_MESSAGE = "This recipe requires login to view"


class FetchError(RecipeImportError):
    """A network call failed after its retry."""


class PageBlocked(FetchError):
    """The site refused access (HTTP 403 or a login wall)."""


@dataclass
class FetchedPage:
    """A fetched HTML page. `url` is the final URL after redirects."""

    url: str
    status_code: int
    html: str
    login_wall: bool = False


def create_http_client() -> httpx.AsyncClient:
    """Shared client configuration for every outbound call."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=settings.http_timeout_seconds,
        headers=BROWSER_HEADERS,
    )


def _is_transient_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


async def get_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict | None = None,
    headers: dict | None = None,
    retries: int | None = None,
) -> httpx.Response:
    """
    GET a URL, retrying transient failures.

    Timeouts, transport errors, 429 and 5xx are retried up to `retries`
    times (default from settings). 403 raises PageBlocked; any other
    non-2xx status raises FetchError without a retry.
    """
    retries = settings.http_retries if retries is None else retries
    last_error: Exception | None = None

    for attempt in range(retries + 1):
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            last_error = e
            logger.debug(f"Timeout fetching {url} (attempt {attempt + 1})")
            continue
        except httpx.TransportError as e:
            last_error = e
            logger.debug(f"Transport error fetching {url} (attempt {attempt + 1}): {e}")
            continue

        if response.status_code == 403:
            raise PageBlocked(f"This website blocked our request ({url})")

        if _is_transient_status(response.status_code):
            last_error = FetchError(f"HTTP {response.status_code}")
            logger.debug(f"Transient HTTP {response.status_code} from {url} (attempt {attempt + 1})")
            continue

        if response.status_code >= 400:
            raise FetchError(f"Failed to fetch page: HTTP {response.status_code}")

        return response

    if isinstance(last_error, httpx.TimeoutException):
        raise FetchError("Request timed out") from last_error
    raise FetchError(f"Failed to fetch {url}: {last_error}") from last_error


async def fetch_page(client: httpx.AsyncClient, url: str) -> FetchedPage:
    """
    Fetch an HTML page.

    Login and paywall pages come back with `login_wall` set.

    Raises:
        PageBlocked: 403
        FetchError: network failure after retry, or a non-2xx status
    """
    response = await get_with_retry(client, url)
    html = response.text
    return FetchedPage(
        url=str(response.url),
        status_code=response.status_code,
        html=html,
        login_wall=is_login_page(html),
    )


def is_login_page(html: str) -> bool:
    """Detect if the page is a login/paywall page."""
    html_lower = html.lower()
    return any(indicator in html_lower for indicator in LOGIN_INDICATORS)
