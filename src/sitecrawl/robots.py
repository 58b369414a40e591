"""
robots.txt compliance checks, cached per host for the lifetime of one crawl.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Union
from urllib.robotparser import RobotFileParser

import requests

from sitecrawl.errors import InvalidUrl, RobotsFetchFailed
from sitecrawl.urls import robots_url_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParsedRules:
    """Rules parsed from a host's robots.txt."""
    robots_url: str
    parser: RobotFileParser


@dataclass(frozen=True, slots=True)
class AllowAll:
    """Permissive fallback installed when robots.txt could not be fetched."""
    robots_url: str
    reason: str = ""


RobotsRules = Union[ParsedRules, AllowAll]


def rules_allow(rules: RobotsRules, url: str, user_agent: str) -> bool:
    """Answer allow/deny for ``url`` under a cached ruleset."""
    match rules:
        case AllowAll():
            return True
        case ParsedRules(parser=parser):
            return parser.can_fetch(user_agent, url)
    raise TypeError(f"Unknown robots ruleset: {rules!r}")


def load_rules(session: requests.Session, robots_url: str, user_agent: str, timeout: float) -> ParsedRules:
    """
    Fetch and parse a robots.txt file.

    Raises:
        RobotsFetchFailed: on network errors, timeouts and non-2xx responses.
    """
    try:
        resp = session.get(
            robots_url,
            timeout=timeout,
            headers={"User-Agent": user_agent},
            allow_redirects=True,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        raise RobotsFetchFailed(robots_url, str(e)) from e

    parser = RobotFileParser(robots_url)
    parser.parse(resp.text.splitlines())
    return ParsedRules(robots_url=robots_url, parser=parser)


class RobotsChecker:
    """
    Gatekeeper that fetches each host's robots.txt once and answers allow/deny.

    The cache is keyed by robots.txt URL (one entry per scheme+host). A host
    whose robots.txt cannot be fetched gets an ``AllowAll`` entry so the crawl
    never stalls on it.
    """

    def __init__(
        self,
        session: requests.Session,
        user_agent: str,
        timeout: float = 5.0,
        cache: Dict[str, RobotsRules] | None = None,
    ) -> None:
        self.session = session
        self.user_agent = user_agent
        self.timeout = timeout
        self.cache: Dict[str, RobotsRules] = cache if cache is not None else {}

    def rules_for(self, url: str) -> RobotsRules:
        """Return the cached ruleset for the URL's origin, fetching it on a miss."""
        robots_url = robots_url_for(url)
        rules = self.cache.get(robots_url)
        if rules is None:
            try:
                rules = load_rules(self.session, robots_url, self.user_agent, self.timeout)
                logger.debug("Loaded %s", robots_url)
            except RobotsFetchFailed as e:
                logger.warning("%s; allowing all URLs on this host", e)
                rules = AllowAll(robots_url=robots_url, reason=e.cause)
            self.cache[robots_url] = rules
        return rules

    def is_allowed(self, url: str) -> bool:
        """Check if ``url`` may be fetched. Never raises."""
        try:
            allowed = rules_allow(self.rules_for(url), url, self.user_agent)
        except InvalidUrl as e:
            logger.warning("Robots check skipped: %s", e)
            return True
        if not allowed:
            logger.info("Skipping %s - disallowed by robots.txt", url)
        return allowed
