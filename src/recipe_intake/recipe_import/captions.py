"""Caption extraction for social video platforms."""

import logging
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from .fetch import get_with_retry

logger = logging.getLogger(__name__)

OEMBED_ENDPOINTS = {
    "tiktok": "https://www.tiktok.com/oembed",
    "youtube": "https://www.youtube.com/oembed",
}

# Platforms whose captions only live in page meta tags
META_CAPTION_PLATFORMS = {"instagram", "facebook"}


@dataclass
class VideoCaption:
    """Caption text plus the creator, when the platform reports one."""

    text: str
    creator: str | None = None


async def fetch_oembed_caption(client: httpx.AsyncClient, platform: str, url: str) -> VideoCaption | None:
    """
    Fetch a caption through the platform's public oEmbed endpoint.

    TikTok puts the full caption in `title`; YouTube only exposes the
    video title there.

    Raises:
        FetchError: endpoint unreachable after retry
    """
    endpoint = OEMBED_ENDPOINTS.get(platform)
    if endpoint is None:
        return None

    params = {"url": url}
    if platform == "youtube":
        params["format"] = "json"

    response = await get_with_retry(client, endpoint, params=params, headers={"Accept": "application/json"})

    try:
        data = response.json()
    except ValueError:
        logger.debug(f"{platform} oEmbed returned non-JSON for {url}")
        return None

    title = data.get("title") if isinstance(data, dict) else None
    if not isinstance(title, str) or not title.strip():
        return None

    return VideoCaption(text=title.strip(), creator=data.get("author_name") or None)


def caption_from_page(html: str) -> VideoCaption | None:
    """Read a caption from og:description or the description meta tag."""
    soup = BeautifulSoup(html, "lxml")

    for attrs in ({"property": "og:description"}, {"name": "description"}):
        tag = soup.find("meta", attrs=attrs)
        content = (tag.get("content") or "").strip() if tag else ""
        if content:
            return VideoCaption(text=content)

    return None
