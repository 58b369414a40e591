"""
Default page analyzer: basic on-page metadata.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup


def parse_metadata(soup: BeautifulSoup) -> Dict[str, Any]:
    """Extract title, meta description and H1 tags from a parsed page."""
    title: Optional[str] = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    meta_description: Optional[str] = None
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        meta_description = meta["content"].strip() or None

    h1_tags = soup.find_all("h1")
    h1_texts: List[str] = [
        text for h in h1_tags
        if (text := h.get_text(separator=" ", strip=True))
    ]

    return {
        "title": title,
        "meta_description": meta_description,
        "h1_present": bool(h1_tags),
        "h1_contents": h1_texts,
    }


def analyze_page(url: str, soup: BeautifulSoup, response: requests.Response) -> Dict[str, Any]:
    """Analyzer used by the command line: page metadata plus response basics."""
    analysis = parse_metadata(soup)
    analysis["final_url"] = response.url or url
    analysis["content_type"] = response.headers.get("content-type")
    return analysis
