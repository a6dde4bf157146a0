# content_scout/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for ContentScout.
"""
from __future__ import annotations

import posixpath
import re
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__ = ("extract_links", "normalize_url", "same_host", "match_path", "glob_to_regex", "is_http_url", "unique")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def is_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def normalize_url(url: str) -> str:
    """
    Canonical form used as the crawl dedup key.

    Lowercases scheme and host, drops default ports and the fragment,
    resolves dot segments, re-quotes the path and sorts query parameters.
    A trailing slash is significant and kept.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    netloc = host
    if parsed.port is not None and _DEFAULT_PORTS.get(scheme) != parsed.port:
        netloc = f"{host}:{parsed.port}"
    if parsed.username:
        auth = parsed.username + (f":{parsed.password}" if parsed.password else "")
        netloc = f"{auth}@{netloc}"

    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    # posixpath keeps a leading "//"
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    norm = quote(norm, safe="/:@!$&'()*+,;=-._~")

    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, "", query, ""))


def same_host(url: str, other: str) -> bool:
    return (urlparse(url).hostname or "").lower() == (urlparse(other).hostname or "").lower()


def glob_to_regex(pattern: str) -> str:
    """
    Translate a path glob into a regular expression.

    ``*`` and ``?`` stay within one path segment, ``**`` as a whole segment
    spans any number of segments (including none), ``[...]`` is a character
    class (``[!...]`` negated). The result ends with ``\\Z``.
    """
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**", i):
            at_segment_start = i == 0 or pattern[i - 1] == "/"
            rest = pattern[i + 2:]
            if at_segment_start and rest.startswith("/"):
                out.append("(?:.*/)?")
                i += 3
                continue
            if at_segment_start and not rest:
                if out and out[-1] == "/":
                    # "a/**" also matches "a" itself
                    out[-1] = "(?:/.*)?"
                else:
                    out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
            i += 2
        elif c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                out.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1:end]
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append("[" + body.replace("\\", "\\\\") + "]")
            i = end + 1
        else:
            out.append(re.escape(c))
            i += 1
    return "(?s:" + "".join(out) + r")\Z"


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(glob_to_regex(pattern))


def match_path(path: str, patterns: Optional[Sequence[str]]) -> bool:
    """
    Glob match of a URL path (or relative file path) against *patterns*.

    Wildcards follow :func:`glob_to_regex`: ``/docs/*`` matches ``/docs/a``
    but not ``/docs/a/b``, ``/docs/**`` matches both.
    No patterns means everything matches.
    """
    if not patterns:
        return True
    return any(_compiled(pattern).match(path) for pattern in patterns)


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract same-host HTTP(S) links from *html*.

    Relative links are resolved against *base_url*. Ignores mailto:,
    javascript: and other non-HTTP schemes, links carrying a fragment and
    external hosts. Result is deduplicated, first-seen order.
    """
    soup = BeautifulSoup(html, "html.parser")
    base_host = (urlparse(base_url).hostname or "").lower()
    seen: set[str] = set()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            absolute = urljoin(base_url, raw)
            parsed = urlparse(absolute)
            host = (parsed.hostname or "").lower()
        except ValueError:
            # malformed netloc, e.g. an unterminated IPv6 literal
            continue
        if parsed.scheme not in ("http", "https") or "#" in absolute:
            continue
        if host != base_host or absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)
    return links


def unique(urls: Iterable[str]) -> List[str]:
    """Remove duplicates while keeping order."""
    return list(dict.fromkeys(urls))
