# content_scout/adapters/website.py
"""
Website adapter: crawls a site (or its sitemap) and streams one item per page.
"""
from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterator, Optional

from content_scout.adapters.base import Adapter
from content_scout.config import AdapterOptions
from content_scout.crawler.crawler import CrawlScheduler
from content_scout.crawler.models import CancelToken
from content_scout.logger import get_logger
from content_scout.models import ContentItem

__all__ = ("ADAPTER_NAME", "WebsiteAdapter", "create_website_adapter")

ADAPTER_NAME = "website"

logger = get_logger("adapter.website")


class WebsiteAdapter:
    """Wraps :class:`CrawlScheduler` behind the Adapter contract."""

    name = ADAPTER_NAME

    def __init__(self, cancel_token: Optional[CancelToken] = None) -> None:
        self.cancel_token = cancel_token

    async def get_stream(self, source: str, options: Optional[AdapterOptions] = None) -> AsyncIterator[ContentItem]:
        options = options or AdapterOptions()
        logger.info("[%s] Starting stream for source: %s", self.name, source)
        logger.debug("[%s] Adapter options: %s", self.name, options.model_dump_json(exclude={"ignore_patterns"}))

        scheduler = CrawlScheduler(source, options, adapter_name=self.name, cancel_token=self.cancel_token)
        count = 0
        async with aclosing(scheduler.stream()) as items:
            async for item in items:
                count += 1
                yield item
        logger.info("[%s] Finished streaming %d items.", self.name, count)


def create_website_adapter(cancel_token: Optional[CancelToken] = None) -> Adapter:
    """Factory used by the adapter registry and the CLI."""
    return WebsiteAdapter(cancel_token)
