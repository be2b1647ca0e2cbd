"""URL parsing, platform detection, and tracking-parameter normalization."""

import re
from dataclasses import dataclass
from urllib.parse import unquote_plus, urlsplit, urlunsplit


@dataclass(frozen=True)
class PlatformSignature:
    """URL patterns identifying one platform."""

    name: str
    patterns: tuple[re.Pattern, ...]
    video_patterns: tuple[re.Pattern, ...] = ()
    is_social_media: bool = False
    confidence: float = 0.95


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


_TIKTOK = _compile(
    r"^https?://(?:www\.|vm\.|vt\.|m\.)?tiktok\.com/",
)
_TIKTOK_VIDEO = _compile(
    r"^https?://(?:www\.|m\.)?tiktok\.com/@[^/]+/video/\d+",
    r"^https?://m\.tiktok\.com/v/\d+",
    r"^https?://(?:www\.)?tiktok\.com/t/[A-Za-z0-9]+",
    r"^https?://(?:vm|vt)\.tiktok\.com/[A-Za-z0-9]+",
)
_INSTAGRAM = _compile(
    r"^https?://(?:www\.)?instagram\.com/(?:p|reel|reels|tv)/",
    r"^https?://(?:www\.)?instagram\.com/stories/",
)
_YOUTUBE = _compile(
    r"^https?://(?:www\.|m\.)?youtube\.com/watch\?(?:.*&)?v=",
    r"^https?://(?:www\.|m\.)?youtube\.com/shorts/",
    r"^https?://youtu\.be/[A-Za-z0-9_-]+",
)
_FACEBOOK = _compile(
    r"^https?://(?:www\.|m\.)?facebook\.com/.*/videos/",
    r"^https?://(?:www\.|m\.)?facebook\.com/(?:watch|reel)/",
    r"^https?://fb\.watch/[A-Za-z0-9_-]+",
)
_PINTEREST = _compile(
    r"^https?://(?:[a-z]{2}\.|www\.)?pinterest\.[a-z.]+/pin/",
    r"^https?://pin\.it/[A-Za-z0-9]+",
)

# Ordered: the first matching platform wins
PLATFORM_SIGNATURES: tuple[PlatformSignature, ...] = (
    PlatformSignature("tiktok", _TIKTOK, video_patterns=_TIKTOK_VIDEO, is_social_media=True),
    PlatformSignature(
        "instagram",
        _INSTAGRAM,
        video_patterns=_compile(r"^https?://(?:www\.)?instagram\.com/(?:reel|reels|tv)/"),
        is_social_media=True,
    ),
    PlatformSignature("youtube", _YOUTUBE, video_patterns=_YOUTUBE, is_social_media=True),
    PlatformSignature("facebook", _FACEBOOK, video_patterns=_FACEBOOK, is_social_media=True),
    PlatformSignature("pinterest", _PINTEREST),
    PlatformSignature(
        "recipe-site",
        _compile(
            r"^https?://(?:[^/]+\.)?allrecipes\.com",
            r"^https?://(?:[^/]+\.)?foodnetwork\.com",
            r"^https?://(?:[^/]+\.)?epicurious\.com",
            r"^https?://(?:[^/]+\.)?bonappetit\.com",
            r"^https?://(?:[^/]+\.)?seriouseats\.com",
            r"^https?://(?:[^/]+\.)?food\.com",
            r"^https?://(?:[^/]+\.)?delish\.com",
            r"^https?://(?:[^/]+\.)?tasteofhome\.com",
            r"^https?://(?:[^/]+\.)?bbcgoodfood\.com",
            r"^https?://cooking\.nytimes\.com",
            r"^https?://[^/?#]*recipe",
            r"^https?://[^?#]*/recipes?(?:/|-|$)",
        ),
        confidence=0.9,
    ),
)

SOCIAL_PLATFORMS = frozenset(s.name for s in PLATFORM_SIGNATURES if s.is_social_media)

# Query keys stripped before any network call (plus every utm_* key)
TRACKING_PARAMS = frozenset(
    {"fbclid", "gclid", "dclid", "msclkid", "igshid", "mc_cid", "mc_eid", "_ga"}
)

_HOSTNAME_RE = re.compile(r"^(?:localhost|(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,63})$", re.IGNORECASE)


def _try_parse(candidate: str):
    if any(ch.isspace() for ch in candidate):
        return None
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        if parts.port is not None and not 0 < parts.port < 65536:
            return None
    except ValueError:
        # Malformed port or IPv6 literal
        return None
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        return None
    if not _HOSTNAME_RE.match(hostname):
        return None
    return parts


def parse_url(text: str):
    """
    Parse text as an http(s) URL.

    Tries the text as-is, then with an assumed https:// prefix so bare
    domains like "example.com/recipe" are accepted.

    Returns:
        urllib SplitResult, or None if the text is not a URL
    """
    text = (text or "").strip()
    if not text:
        return None
    parts = _try_parse(text)
    if parts is None and "://" not in text:
        parts = _try_parse(f"https://{text}")
    return parts


def is_tracking_param(key: str) -> bool:
    key = key.lower()
    return key.startswith("utm_") or key in TRACKING_PARAMS


def normalize_url(url: str) -> str:
    """
    Normalize a URL for fetching.

    Adds https:// when missing and strips tracking parameters (every
    utm_* key plus known click IDs) while preserving every other
    parameter, the path, and the fragment.

    Examples:
        "https://x.com/r?utm_source=x&recipe_id=456" -> "https://x.com/r?recipe_id=456"
        "example.com/recipe?fbclid=abc" -> "https://example.com/recipe"
    """
    parts = parse_url(url)
    if parts is None:
        return url.strip()

    # Kept parameters stay byte-for-byte as written
    query = "&".join(
        segment
        for segment in parts.query.split("&")
        if segment and not is_tracking_param(unquote_plus(segment.split("=", 1)[0]))
    )
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, query, parts.fragment))


def match_platform(url: str) -> PlatformSignature | None:
    """Return the first platform signature matching a normalized URL."""
    for signature in PLATFORM_SIGNATURES:
        if any(p.search(url) for p in signature.patterns):
            return signature
    return None


def is_video_url(url: str, signature: PlatformSignature | None = None) -> bool:
    signature = signature or match_platform(url)
    if signature is None:
        return False
    return any(p.search(url) for p in signature.video_patterns)
