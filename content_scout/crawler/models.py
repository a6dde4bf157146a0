# content_scout/crawler/models.py
"""
Data models for the ContentScout crawler.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional

from content_scout.errors import CrawlCancelled


@dataclass(slots=True)
class FetchResult:
    """Successful HTTP response after redirects have been followed."""

    final_url: str
    content: str
    status: int
    content_type: Optional[str]
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_html(self) -> bool:
        return bool(self.content_type) and "html" in self.content_type.lower()

    @property
    def is_image(self) -> bool:
        return bool(self.content_type) and "image" in self.content_type.lower()


@dataclass(slots=True)
class CrawlTask:
    """Frontier entry: a URL waiting to be fetched."""

    url: str
    depth: int
    from_sitemap: bool = False


class CancelToken:
    """Cancellation flag shared by every worker of one crawl.

    Setting it is idempotent: the first reason wins. Suspendable calls race
    their work against :meth:`wait`.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        """Set the flag. Returns True only for the call that actually set it."""
        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CrawlCancelled(self.reason or "cancelled")

    def __repr__(self) -> str:
        state = f"cancelled:{self.reason}" if self.cancelled else "active"
        return f"<CancelToken {state}>"
