"""
Crawl scheduling: frontier, budgets, batching and result collection.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict, deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional, Set

import requests
from bs4 import BeautifulSoup

from sitecrawl.config import CrawlConfig
from sitecrawl.errors import AnalyzerFailed, FetchFailed, InvalidUrl
from sitecrawl.fetcher import build_session, fetch
from sitecrawl.links import extract_links
from sitecrawl.robots import RobotsChecker, RobotsRules
from sitecrawl.urls import is_asset, normalize_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FrontierEntry:
    """A URL waiting to be fetched, with its link distance from the start URL."""
    url: str
    depth: int


@dataclass(frozen=True, slots=True)
class PageResult:
    """Outcome of fetching and analyzing a single page."""
    url: str
    depth: int
    success: bool
    analysis: Any = None
    internal_link_count: int = 0
    external_link_count: int = 0
    status_code: Optional[int] = None
    error: Optional[str] = None
    scanned_at: Optional[str] = None


@dataclass(slots=True)
class CrawlStats:
    """Counters collected during a crawl."""
    pages_discovered: int = 0
    pages_crawled: int = 0
    pages_failed: int = 0
    pages_skipped: int = 0
    max_depth_reached: int = 0
    crawl_duration_seconds: float = 0.0
    urls_by_depth: Dict[int, List[str]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Crawl progress, emitted before each batch is dispatched."""
    pages_discovered: int
    pages_crawled: int
    max_depth_reached: int
    remaining: int
    in_progress: int
    percent_complete: int


@dataclass(slots=True)
class CrawlReport:
    """Everything one crawl produced: per-page results and overall stats."""
    start_url: str
    results: List[PageResult]
    stats: CrawlStats
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class CrawlState:
    """
    Mutable state of one crawl invocation.

    Only the scheduling loop touches it; fetch tasks return outcomes and never
    mutate it directly.
    """
    frontier: Deque[FrontierEntry] = field(default_factory=deque)
    queued: Set[str] = field(default_factory=set)
    visited: Set[str] = field(default_factory=set)
    failed: Set[str] = field(default_factory=set)
    robots_cache: Dict[str, RobotsRules] = field(default_factory=dict)
    results: List[PageResult] = field(default_factory=list)
    urls_by_depth: Dict[int, List[str]] = field(default_factory=lambda: defaultdict(list))
    pages_discovered: int = 0
    pages_crawled: int = 0
    pages_skipped: int = 0
    max_depth_reached: int = 0

    def enqueue(self, url: str, depth: int) -> bool:
        """Queue a URL unless it was already dispatched, queued or failed."""
        if url in self.visited or url in self.queued or url in self.failed:
            return False
        self.frontier.append(FrontierEntry(url=url, depth=depth))
        self.queued.add(url)
        return True

    def pop_batch(self, size: int) -> List[FrontierEntry]:
        """Take up to ``size`` entries off the front of the frontier."""
        batch: List[FrontierEntry] = []
        while self.frontier and len(batch) < size:
            entry = self.frontier.popleft()
            self.queued.discard(entry.url)
            batch.append(entry)
        return batch


@dataclass(slots=True)
class _Outcome:
    """What a worker hands back to the scheduling loop for one entry."""
    result: PageResult
    internal_links: List[str] = field(default_factory=list)


Analyzer = Callable[[str, BeautifulSoup, requests.Response], Any]
ProgressCallback = Callable[[ProgressSnapshot], None]


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def percent_complete(pages_crawled: int, max_pages: int) -> int:
    """Share of the page budget used so far, rounded half up and capped at 100."""
    return min(100, int(pages_crawled * 100 / max_pages + 0.5))


def _normalize_or_raw(url: str, ignore_query: bool) -> str:
    try:
        return normalize_url(url, ignore_query)
    except InvalidUrl as e:
        logger.warning("%s; using it unnormalized", e)
        return url


def _process_entry(
    entry: FrontierEntry,
    config: CrawlConfig,
    session: requests.Session,
    analyze_page: Analyzer,
) -> _Outcome:
    """Fetch, parse and analyze one page. Runs on a worker thread."""
    try:
        resp = fetch(
            session,
            entry.url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            follow_redirects=config.follow_redirects,
            user_agent=config.user_agent,
            retry_delay=config.retry_delay,
        )
        soup = BeautifulSoup(resp.text, "lxml")
        links = extract_links(soup, entry.url)
        try:
            analysis = analyze_page(entry.url, soup, resp)
        except Exception as e:
            raise AnalyzerFailed(entry.url, str(e)) from e

        outcome = _Outcome(
            result=PageResult(
                url=entry.url,
                depth=entry.depth,
                success=True,
                analysis=analysis,
                internal_link_count=len(links.internal),
                external_link_count=len(links.external),
                status_code=resp.status_code,
                scanned_at=utc_now_iso(),
            ),
            internal_links=links.internal,
        )
    except (FetchFailed, AnalyzerFailed) as e:
        logger.warning("Failed to crawl %s: %s", entry.url, e)
        outcome = _Outcome(
            result=PageResult(
                url=entry.url,
                depth=entry.depth,
                success=False,
                status_code=getattr(e, "status_code", None),
                error=str(e),
                scanned_at=utc_now_iso(),
            )
        )

    # Throttle this slot before it takes more work
    if config.delay:
        time.sleep(config.delay)
    return outcome


def _emit_progress(on_progress: Optional[ProgressCallback], snapshot: ProgressSnapshot) -> None:
    if on_progress is None:
        return
    try:
        on_progress(snapshot)
    except Exception:
        logger.exception("Progress callback raised; continuing crawl")


def _apply_outcome(state: CrawlState, config: CrawlConfig, entry: FrontierEntry, outcome: _Outcome) -> None:
    state.results.append(outcome.result)

    if not outcome.result.success:
        state.failed.add(entry.url)
        return

    state.pages_crawled += 1
    state.urls_by_depth[entry.depth].append(entry.url)

    next_depth = entry.depth + 1
    if next_depth > config.max_depth:
        return
    for link in outcome.internal_links:
        target = _normalize_or_raw(link, config.ignore_query)
        if config.skip_assets and is_asset(target):
            continue
        if state.enqueue(target, next_depth):
            state.pages_discovered += 1


def crawl(
    start_url: str,
    config: Optional[CrawlConfig] = None,
    analyze_page: Optional[Analyzer] = None,
    on_progress: Optional[ProgressCallback] = None,
    *,
    session: Optional[requests.Session] = None,
    cancel: Optional[threading.Event] = None,
) -> CrawlReport:
    """
    Crawl same-host links breadth-first from ``start_url``.

    The frontier is consumed in batches of at most ``config.concurrency``
    entries. Each batch is fetched in parallel and fully joined before the
    next one starts; results are recorded in dispatch order.

    Args:
        start_url: The URL to start crawling from.
        config: Crawl options; defaults to ``CrawlConfig()``.
        analyze_page: Called as ``analyze_page(url, soup, response)`` for every
            fetched page. Its return value is stored on the ``PageResult``.
            If it raises, the page is recorded as failed.
        on_progress: Optional callback receiving a ``ProgressSnapshot``
            before each batch.
        session: HTTP session to use. A new one is created (and closed)
            when omitted.
        cancel: When set, no further batch is started and the report
            returned so far is marked ``cancelled``.

    Returns:
        The crawl report. Per-page failures never raise.

    Raises:
        TypeError: if ``analyze_page`` or ``on_progress`` is not callable.
    """
    if not callable(analyze_page):
        raise TypeError("analyze_page must be a callable")
    if on_progress is not None and not callable(on_progress):
        raise TypeError("on_progress must be a callable")
    config = config or CrawlConfig()

    started = time.monotonic()
    state = CrawlState()
    start_url_normalized = _normalize_or_raw(start_url, config.ignore_query)
    state.enqueue(start_url_normalized, 0)

    owns_session = session is None
    if session is None:
        session = build_session(config.user_agent, config.max_redirects)
    robots = RobotsChecker(session, config.user_agent, config.robots_timeout, cache=state.robots_cache)

    logger.info(
        "Starting crawl of %s with max %d pages at depth %d",
        start_url_normalized, config.max_pages, config.max_depth,
    )

    cancelled = False
    try:
        with ThreadPoolExecutor(max_workers=config.concurrency, thread_name_prefix="sitecrawl") as pool:
            while state.frontier and state.pages_crawled < config.max_pages:
                if cancel is not None and cancel.is_set():
                    cancelled = True
                    logger.info("Crawl cancelled with %d URLs still queued", len(state.frontier))
                    break

                budget = config.max_pages - state.pages_crawled
                batch = state.pop_batch(min(config.concurrency, budget))

                _emit_progress(on_progress, ProgressSnapshot(
                    pages_discovered=state.pages_discovered,
                    pages_crawled=state.pages_crawled,
                    max_depth_reached=state.max_depth_reached,
                    remaining=len(state.frontier),
                    in_progress=len(batch),
                    percent_complete=percent_complete(state.pages_crawled, config.max_pages),
                ))

                dispatched: List[FrontierEntry] = []
                for entry in batch:
                    state.max_depth_reached = max(state.max_depth_reached, entry.depth)
                    state.visited.add(entry.url)
                    if config.respect_robots and not robots.is_allowed(entry.url):
                        state.pages_skipped += 1
                        continue
                    dispatched.append(entry)

                logger.debug(
                    "Dispatching batch of %d URLs (crawled so far: %d)",
                    len(dispatched), state.pages_crawled,
                )
                outcomes = pool.map(
                    lambda e: _process_entry(e, config, session, analyze_page),
                    dispatched,
                )
                for entry, outcome in zip(dispatched, outcomes):
                    _apply_outcome(state, config, entry, outcome)
    finally:
        if owns_session:
            session.close()

    stats = CrawlStats(
        pages_discovered=state.pages_discovered,
        pages_crawled=state.pages_crawled,
        pages_failed=len(state.failed),
        pages_skipped=state.pages_skipped,
        max_depth_reached=state.max_depth_reached,
        crawl_duration_seconds=round(time.monotonic() - started, 3),
        urls_by_depth={depth: list(urls) for depth, urls in sorted(state.urls_by_depth.items())},
    )
    logger.info(
        "Crawl completed. Discovered %d pages, crawled %d, failed %d",
        stats.pages_discovered, stats.pages_crawled, stats.pages_failed,
    )
    return CrawlReport(
        start_url=start_url_normalized,
        results=state.results,
        stats=stats,
        cancelled=cancelled,
    )
