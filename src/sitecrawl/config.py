"""
Crawl options and their defaults.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

DEFAULT_USER_AGENT = "SiteAuditBot/1.0"


@dataclass(frozen=True)
class CrawlConfig:
    # Budgets
    max_pages: int = 20
    max_depth: int = 3

    # Politeness
    respect_robots: bool = True
    delay: float = 1.0  # seconds, after each fetch, per concurrent slot
    user_agent: str = DEFAULT_USER_AGENT
    robots_timeout: float = 5.0

    # Transport
    timeout: float = 30.0
    concurrency: int = 3
    max_retries: int = 2
    retry_delay: float = 1.0
    follow_redirects: bool = True
    max_redirects: int = 5

    # Link policy
    ignore_query: bool = True
    skip_assets: bool = False

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must not be negative")
        for name in ("delay", "timeout", "retry_delay", "robots_timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def with_overrides(self, **kwargs) -> "CrawlConfig":
        """Return a copy with specific fields overridden."""
        return replace(self, **kwargs)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "CrawlConfig":
        """Build a config from an options dict, keeping defaults for missing or None values."""
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ValueError(f"Unknown crawl options: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in options.items() if v is not None})
