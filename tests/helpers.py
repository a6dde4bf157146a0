# File: tests/helpers.py
"""Shared helpers for the test-suite (local servers, sample pages)."""
from __future__ import annotations

from collections.abc import AsyncIterator
from typing import List, Optional

from aiohttp import web

from content_scout.models import ContentItem
from content_scout.parser.html_parser import ExtractedPage


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def article(title: str, *links: str, body: Optional[str] = None) -> str:
    """A page readability recognises as an article, with optional links."""
    text = body or (
        f"{title} explains the topic in detail, with several sentences of text, "
        "commas, and enough words for a content scorer to pick this paragraph. "
        "It continues for a while so that the article is clearly the main content."
    )
    anchors = "".join(f'<li><a href="{href}">{href}</a></li>' for href in links)
    return (
        f"<html><head><title>{title}</title></head><body>"
        f"<article><h1>{title}</h1><p>{text}</p><p>{text}</p></article>"
        f"<ul>{anchors}</ul></body></html>"
    )


def html_response(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


def stub_extractor(html: str, url: str, selector: Optional[str] = None) -> ExtractedPage:
    """Extractor stand-in: every HTML page yields a page titled by its URL."""
    return ExtractedPage(title=url, markdown=f"content of {url}")


async def collect(stream: AsyncIterator[ContentItem]) -> List[ContentItem]:
    return [item async for item in stream]
