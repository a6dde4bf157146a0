# content_scout/crawler/discovery.py
"""
URL discovery: sitemap mode (recursive through sitemap indexes) and HTML mode.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Set
from urllib.parse import urlparse, urlunparse

from content_scout.crawler.fetcher import Fetcher
from content_scout.crawler.link_extractor import extract_links, unique
from content_scout.crawler.models import CancelToken
from content_scout.logger import get_logger
from content_scout.parser.sitemap_parser import parse_sitemap

__all__ = ("is_sitemap_source", "sitemap_url_for", "fetch_sitemap_urls", "discover_urls")

logger = get_logger("discovery")


def is_sitemap_source(source: str) -> bool:
    return urlparse(source).path.lower().endswith(".xml") or source.lower().endswith(".xml")


def sitemap_url_for(base_url: str) -> str:
    """``<scheme>://<host>/sitemap.xml`` for *base_url*."""
    parsed = urlparse(base_url)
    return urlunparse((parsed.scheme, parsed.netloc, "/sitemap.xml", "", "", ""))


async def fetch_sitemap_urls(
    sitemap_url: str,
    fetcher: Fetcher,
    cancel_token: Optional[CancelToken] = None,
    _seen: Optional[Set[str]] = None,
) -> List[str]:
    """
    Fetch one sitemap and return every page ``<loc>`` it leads to.

    Sitemap indexes are expanded concurrently, without a depth bound. A child
    that cannot be fetched or parsed contributes nothing. Failures are logged,
    never raised.
    """
    seen = _seen if _seen is not None else set()
    if sitemap_url in seen:
        logger.debug("Sitemap %s already visited, skipping", sitemap_url)
        return []
    seen.add(sitemap_url)

    result = await fetcher.fetch(sitemap_url, cancel_token)
    if result is None or not result.content:
        logger.warning("Failed to fetch sitemap content from %s", sitemap_url)
        return []
    if not result.content_type or "xml" not in result.content_type.lower():
        logger.warning(
            "Unexpected content type for sitemap (%s) at %s. Attempting to parse anyway.",
            result.content_type,
            sitemap_url,
        )

    try:
        document = parse_sitemap(result.content)
    except ValueError as exc:
        logger.error("Error parsing sitemap %s: %s", sitemap_url, exc)
        return []

    if document.kind == "urlset":
        return document.locs
    if document.is_index:
        logger.info("Found sitemap index at %s. Fetching %d sub-sitemaps…", sitemap_url, len(document.locs))
        nested = await asyncio.gather(
            *(fetch_sitemap_urls(child, fetcher, cancel_token, seen) for child in document.locs)
        )
        return [url for urls in nested for url in urls]

    logger.warning("Unrecognized sitemap structure at %s", sitemap_url)
    return []


async def discover_urls(
    html: Optional[str],
    base_url: str,
    source: str,
    use_sitemap: bool = True,
    *,
    fetcher: Fetcher,
    cancel_token: Optional[CancelToken] = None,
) -> List[str]:
    """Discover absolute URLs from a sitemap, from *html*, or fall back to *source*.

    The sitemap (``source`` itself when it ends in ``.xml``, else
    ``/sitemap.xml`` of *base_url*) wins whenever it yields anything; HTML
    links are scanned only otherwise.
    """
    source_is_sitemap = is_sitemap_source(source)

    if use_sitemap:
        sitemap_url = source if source_is_sitemap else sitemap_url_for(base_url)
        logger.info("Attempting to fetch and parse sitemap: %s", sitemap_url)
        sitemap_urls = unique(await fetch_sitemap_urls(sitemap_url, fetcher, cancel_token))
        if sitemap_urls:
            logger.info("Found %d URLs in sitemap.", len(sitemap_urls))
            return sitemap_urls

    if html:
        logger.debug("Parsing HTML from %s for links.", base_url)
        links = extract_links(html, base_url)
        logger.debug("Found %d potential URLs in HTML.", len(links))
        return links

    if not source_is_sitemap and not use_sitemap:
        logger.debug("No HTML or sitemap, adding source URL: %s", source)
        return [source]
    return []
