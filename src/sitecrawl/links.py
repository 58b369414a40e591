"""
Hyperlink extraction from parsed pages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from sitecrawl.urls import hostname_of

# href prefixes that never point at another page
IGNORED_PREFIXES: tuple[str, ...] = ("#", "javascript:", "mailto:")


@dataclass(slots=True)
class Links:
    """Links found on one page, split by host. Each list is unique, in document order."""
    internal: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)


def extract_links(soup: BeautifulSoup, base_url: str) -> Links:
    """
    Collect ``<a href>`` targets from a page, resolved against ``base_url``.

    Links whose hostname equals the base hostname are internal, everything
    else is external. Fragment-only, ``javascript:`` and ``mailto:`` hrefs are
    skipped, as is any href that cannot be resolved. Duplicates are detected
    on the resolved URL, not on the raw href.
    """
    links = Links()
    seen: Set[str] = set()
    base_host = hostname_of(base_url)

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.lower().startswith(IGNORED_PREFIXES):
            continue
        try:
            resolved = urljoin(base_url, href)
        except ValueError:
            continue
        if resolved in seen:
            continue
        seen.add(resolved)

        if base_host and hostname_of(resolved) == base_host:
            links.internal.append(resolved)
        else:
            links.external.append(resolved)

    return links
