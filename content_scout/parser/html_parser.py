# === FILE: content_scout/parser/html_parser.py ===
"""Readable-content extraction for fetched HTML pages.

Extraction steps:

* optional narrowing to a CSS selector (falls back to the whole document
  when nothing matches);
* main-article detection with ``readability-lxml``;
* relative ``href``/``src`` rewritten to absolute URLs of the page;
* conversion of the article fragment to Markdown with ``html2text``
  (ATX headings, pipe tables, lists, links and images kept).

:func:`extract_readable_content` returns ``None`` when no article could be
identified; callers treat that as "no text content", not as a failure.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import html2text
from bs4 import BeautifulSoup
from readability import Document

from content_scout.logger import get_logger

__all__: Sequence[str] = ("ExtractedPage", "narrow_html", "html_to_markdown", "extract_readable_content")

logger = get_logger("readability")

_BLANK_RUNS = re.compile(r"\n{3,}")
_URL_ATTRS = (("a", "href"), ("img", "src"), ("source", "src"), ("video", "src"), ("audio", "src"))


@dataclass(slots=True)
class ExtractedPage:
    """Article title and its Markdown rendition."""

    title: str
    markdown: str


def narrow_html(html: str, selector: Optional[str], url: str = "") -> str:
    """Return ``<body>`` wrapping every element matching *selector*, or *html* unchanged."""
    if not selector:
        return html
    try:
        soup = BeautifulSoup(html, "lxml")
        matches = soup.select(selector)
    except ValueError as exc:
        # soupsieve raises SelectorSyntaxError, a ValueError subclass
        logger.warning(
            "Error applying content selector %r on %s: %s. Falling back to full page.", selector, url, exc
        )
        return html
    inner = "".join(el.decode_contents() for el in matches)
    if not inner.strip():
        logger.warning(
            "Content selector %r did not match any content on %s. Falling back to full page.", selector, url
        )
        return html
    logger.debug("Using content from selector: %s", selector)
    return f"<body>{inner}</body>"


def _absolutize(fragment: str, url: str) -> str:
    if not url:
        return fragment
    soup = BeautifulSoup(fragment, "lxml")
    for tag_name, attr in _URL_ATTRS:
        for tag in soup.find_all(tag_name):
            value = tag.get(attr)
            if isinstance(value, str) and value and not value.startswith(("#", "data:", "mailto:")):
                tag[attr] = urljoin(url, value)
    body = soup.body
    return body.decode_contents() if body is not None else str(soup)


def html_to_markdown(fragment: str) -> str:
    """Convert an HTML fragment to Markdown (ATX headings, pipe tables, no wrapping)."""
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_links = False
    converter.ignore_images = False
    converter.bypass_tables = False
    converter.unicode_snob = True
    converter.mark_code = False
    markdown = converter.handle(fragment)
    return _BLANK_RUNS.sub("\n\n", markdown).strip()


def extract_readable_content(html: str, url: str, content_selector: Optional[str] = None) -> ExtractedPage | None:
    """Reduce *html* to its main article and convert it to Markdown.

    Parameters
    ----------
    html
        Raw page markup.
    url
        Page URL, used to resolve relative links and images.
    content_selector
        Optional CSS selector narrowing the document before extraction.
    """
    logger.debug("Extracting content for %s", url)
    target = narrow_html(html, content_selector, url)
    try:
        document = Document(target, url=url or None)
        summary = document.summary(html_partial=True)
        title = (document.short_title() or "").strip() or "Untitled"
    except Exception as exc:
        # readability raises its own Unparseable as well as lxml errors
        logger.error("Error during Readability processing for %s: %s", url, exc)
        return None

    if not summary or not BeautifulSoup(summary, "lxml").get_text(strip=True):
        logger.warning("Readability could not parse article for %s", url)
        return None

    markdown = html_to_markdown(_absolutize(summary, url))
    logger.debug("Extracted %r from %s (%d chars of Markdown)", title, url, len(markdown))
    return ExtractedPage(title=title, markdown=markdown)
