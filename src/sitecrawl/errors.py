"""
Exceptions raised while crawling.
"""
from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for crawler errors."""


class InvalidUrl(CrawlError, ValueError):
    """A URL string could not be parsed as an absolute URL."""

    def __init__(self, url: str, reason: str = "not an absolute URL") -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class RobotsFetchFailed(CrawlError):
    """robots.txt could not be retrieved for a host."""

    def __init__(self, robots_url: str, cause: str) -> None:
        super().__init__(f"Could not fetch {robots_url}: {cause}")
        self.robots_url = robots_url
        self.cause = cause


class FetchFailed(CrawlError):
    """A page fetch failed on every attempt."""

    def __init__(
        self,
        url: str,
        cause: str,
        attempts: int,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(cause)
        self.url = url
        self.cause = cause
        self.attempts = attempts
        self.status_code = status_code


class AnalyzerFailed(CrawlError):
    """The page analyzer callback raised."""

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"analyzer failed: {cause}")
        self.url = url
        self.cause = cause
