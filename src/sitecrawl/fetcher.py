"""
HTTP fetching with a fixed retry policy.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import requests

from sitecrawl.errors import FetchFailed

logger = logging.getLogger(__name__)

ACCEPT = "text/html,application/xhtml+xml"
ACCEPT_LANGUAGE = "en-US,en;q=0.5"


def build_session(user_agent: str, max_redirects: int = 5) -> requests.Session:
    """Create an HTTP session that identifies itself with ``user_agent``."""
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    session.max_redirects = max_redirects
    return session


def fetch(
    session: requests.Session,
    url: str,
    timeout: float,
    max_retries: int,
    follow_redirects: bool,
    user_agent: str,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    GET a page, retrying transport errors and error statuses.

    A redirect response is returned as-is when ``follow_redirects`` is off.
    Between attempts the fetcher waits ``retry_delay`` seconds regardless of
    ``timeout``.

    Raises:
        FetchFailed: after ``max_retries + 1`` unsuccessful attempts, with the
            last error's message as the cause.
    """
    headers = {
        "User-Agent": user_agent,
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }
    attempts = 0

    while True:
        attempts += 1
        status_code: Optional[int] = None
        try:
            resp = session.get(
                url,
                timeout=timeout,
                headers=headers,
                allow_redirects=follow_redirects,
            )
            status_code = resp.status_code
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            if attempts > max_retries:
                raise FetchFailed(url, str(e), attempts, status_code) from e
            logger.debug("Attempt %d for %s failed: %s", attempts, url, e)
            sleep(retry_delay)
