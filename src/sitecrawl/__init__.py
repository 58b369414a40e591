"""
Site crawler that performs breadth-first traversal of same-host links from a
start URL and hands every fetched page to an analyzer callback.
"""
from sitecrawl.config import CrawlConfig
from sitecrawl.core import (
    CrawlReport,
    CrawlStats,
    FrontierEntry,
    PageResult,
    ProgressSnapshot,
    crawl,
)
from sitecrawl.errors import AnalyzerFailed, CrawlError, FetchFailed, InvalidUrl, RobotsFetchFailed
from sitecrawl.links import Links, extract_links
from sitecrawl.robots import AllowAll, ParsedRules, RobotsChecker
from sitecrawl.urls import normalize_url

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "CrawlConfig",
    "CrawlReport",
    "CrawlStats",
    "FrontierEntry",
    "PageResult",
    "ProgressSnapshot",
    "CrawlError",
    "InvalidUrl",
    "RobotsFetchFailed",
    "FetchFailed",
    "AnalyzerFailed",
    "Links",
    "extract_links",
    "AllowAll",
    "ParsedRules",
    "RobotsChecker",
    "normalize_url",
]
