"""
URL canonicalization for deduplication and comparison.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from sitecrawl.errors import InvalidUrl

# Static assets that are never worth handing to a page analyzer
ASSET_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".ico",
    ".pdf", ".zip", ".rar", ".7z",
    ".mp4", ".mp3", ".wav", ".webm",
    ".css", ".js", ".map",
    ".woff", ".woff2", ".ttf", ".eot",
))


def normalize_url(raw: str, ignore_query: bool = True) -> str:
    """
    Normalize URL for deduplication and comparison.

    - Lowercases scheme and host, keeps an explicit port
    - Strips trailing slashes from the path, but keeps the root path "/"
    - Drops the fragment, and the query too when ``ignore_query`` is set
    - Leaves path and query bytes verbatim (no percent-decoding)

    Raises:
        InvalidUrl: if ``raw`` is not an absolute URL with a host.
    """
    try:
        parts = urlsplit(raw.strip())
        hostname = parts.hostname
        port = parts.port
    except (ValueError, AttributeError) as exc:
        raise InvalidUrl(str(raw), str(exc)) from None

    if not parts.scheme or not hostname:
        raise InvalidUrl(raw)

    if ":" in hostname:
        hostname = f"[{hostname}]"
    netloc = f"{hostname}:{port}" if port is not None else hostname

    path = parts.path.rstrip("/") or "/"
    query = "" if ignore_query or not parts.query else f"?{parts.query}"

    return f"{parts.scheme.lower()}://{netloc}{path}{query}"


def hostname_of(url: str) -> Optional[str]:
    """Return the lowercased hostname of a URL, or None if there is none."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def robots_url_for(url: str) -> str:
    """Return the robots.txt URL for the origin of ``url``."""
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidUrl(url, str(exc)) from None
    if not parts.scheme or not parts.netloc:
        raise InvalidUrl(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}/robots.txt"


def is_asset(url: str) -> bool:
    """Check if the URL path ends with a static-asset extension."""
    try:
        path_lower = urlsplit(url).path.lower()
    except ValueError:
        return False
    return any(path_lower.endswith(ext) for ext in ASSET_EXTENSIONS)
