# === FILE: content_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, List, Optional, Set, Tuple, Union
from urllib.parse import urlparse

from aiohttp import ClientSession

from content_scout.config import AdapterOptions
from content_scout.crawler.discovery import discover_urls, is_sitemap_source
from content_scout.crawler.fetcher import Fetcher
from content_scout.crawler.link_extractor import extract_links, is_http_url, match_path, normalize_url, same_host
from content_scout.crawler.models import CancelToken, CrawlTask, FetchResult
from content_scout.errors import AdapterError, ExtractionError, FetchError
from content_scout.logger import get_logger
from content_scout.models import ContentItem, ItemKind
from content_scout.parser.html_parser import ExtractedPage, extract_readable_content

__all__ = ("CrawlState", "CrawlScheduler")

logger = get_logger("crawler")

Extractor = Callable[[str, str, Optional[str]], Optional[ExtractedPage]]


class _EndOfStream:
    pass


@dataclass(slots=True)
class _WorkerFailure:
    exc: BaseException


_END = _EndOfStream()
_Emitted = Union[ContentItem, _EndOfStream, _WorkerFailure]


@dataclass
class CrawlState:
    """Mutable state of one crawl; owned by the scheduler and discarded afterwards.

    All mutation happens on the event loop between suspension points, so no
    extra locking is needed.
    """

    token: CancelToken
    visited: Set[str] = field(default_factory=set)
    fetched_count: int = 0
    in_flight: int = 0
    frontier: asyncio.Queue[CrawlTask] = field(default_factory=asyncio.Queue)
    emitted: int = 0
    errors: int = 0
    skipped: int = 0

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def stats(self) -> Dict[str, int]:
        return {
            "visited": len(self.visited),
            "fetched": self.fetched_count,
            "emitted": self.emitted,
            "errors": self.errors,
            "skipped": self.skipped,
        }


class CrawlScheduler:
    """Bounded-concurrency crawler streaming one ContentItem per fetched page.

    A pool of ``concurrency`` workers drains the frontier; each worker runs
    fetch → extract → discover children → emit for one URL, then takes the
    next entry. Items go to the consumer through a bounded queue as soon as
    they are ready, so a slow consumer slows the crawl down instead of
    piling results up in memory.
    """

    def __init__(
        self,
        source: str,
        options: Optional[AdapterOptions] = None,
        *,
        fetcher: Optional[Fetcher] = None,
        adapter_name: str = "website",
        cancel_token: Optional[CancelToken] = None,
        extractor: Extractor = extract_readable_content,
    ) -> None:
        self.source = source
        self.options = options or AdapterOptions()
        self.adapter_name = adapter_name
        self.extractor = extractor
        self.fetcher: Optional[Fetcher] = fetcher
        self._token = cancel_token or CancelToken()
        self.state: Optional[CrawlState] = None

    # ------------------------------------------------------------------ #
    # public API                                                           #
    # ------------------------------------------------------------------ #

    @property
    def concurrency(self) -> int:
        return max(1, self.options.concurrency)

    @property
    def limit(self) -> Optional[int]:
        return self.options.limit

    @property
    def max_depth(self) -> int:
        return self.options.depth

    def cancel(self, reason: str = "caller") -> None:
        """Stop the crawl: no new fetches start, in-flight ones are aborted."""
        self._token.cancel(reason)

    async def stream(self) -> AsyncIterator[ContentItem]:
        if not is_http_url(self.source):
            raise AdapterError(f"Website source must be an absolute http(s) URL: {self.source!r}")

        logger.info("Starting crawl: %s", self.source)
        started = time.monotonic()
        self.state = state = CrawlState(token=self._token)

        async with AsyncExitStack() as stack:
            fetcher = self.fetcher
            if fetcher is None:
                session = await stack.enter_async_context(
                    ClientSession(headers={"User-Agent": self.options.user_agent})
                )
                fetcher = Fetcher(session, user_agent=self.options.user_agent, timeout=self.options.timeout)
            self.fetcher = fetcher

            seeds = await self._bootstrap()
            if not seeds:
                logger.warning("No initial URLs found from source: %s", self.source)
                return
            for url, from_sitemap in seeds:
                self._admit(url, 0, from_sitemap=from_sitemap)

            output: asyncio.Queue[_Emitted] = asyncio.Queue(maxsize=2 * self.concurrency)
            tasks = [asyncio.create_task(self._worker(output)) for _ in range(self.concurrency)]
            tasks.append(asyncio.create_task(self._supervise(output)))
            try:
                while True:
                    emitted = await output.get()
                    if isinstance(emitted, _EndOfStream):
                        break
                    if isinstance(emitted, _WorkerFailure):
                        raise emitted.exc
                    yield emitted
            finally:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                duration = time.monotonic() - started
                logger.info(
                    "Crawl finished in %.2f s: %s", duration, ", ".join(f"{k}={v}" for k, v in state.stats().items())
                )

    # ------------------------------------------------------------------ #
    # bootstrap & admission                                                #
    # ------------------------------------------------------------------ #

    async def _bootstrap(self) -> List[Tuple[str, bool]]:
        source_is_sitemap = is_sitemap_source(self.source)
        use_sitemap = self.options.use_sitemap or source_is_sitemap
        initial = await discover_urls(
            None,
            self.source,
            self.source,
            use_sitemap,
            fetcher=self.fetcher,
            cancel_token=self._token,
        )
        if initial:
            logger.info("Starting crawl/fetch with %d initial URLs.", len(initial))
            return [(url, use_sitemap) for url in initial]
        if source_is_sitemap:
            return []
        logger.info("Treating source as single URL to fetch: %s", self.source)
        return [(self.source, False)]

    def _admit(self, url: str, depth: int, *, from_sitemap: bool = False) -> bool:
        """Dedup / limit / host / pattern / depth checks; enqueue on success."""
        state = self.state
        assert state is not None
        try:
            key = normalize_url(url)
        except ValueError:
            logger.debug("Skipping malformed URL: %s", url)
            return False

        if key in state.visited:
            return False
        if self.limit is not None and state.fetched_count >= self.limit:
            self._limit_reached()
            return False
        if state.cancelled:
            return False
        if depth > self.max_depth:
            return False
        if not same_host(key, self.source):
            logger.debug("Skipping URL on different host: %s", url)
            return False
        path = urlparse(key).path or "/"
        if self.options.match and not match_path(path, self.options.match):
            logger.debug("Skipping non-matching URL path: %s (from %s)", path, url)
            return False

        state.visited.add(key)
        state.frontier.put_nowait(CrawlTask(key, depth, from_sitemap))
        return True

    def _limit_reached(self) -> None:
        state = self.state
        assert state is not None
        if not self._token.cancel("limit"):
            return
        logger.info("Fetch limit (%d) reached. Aborting further fetches.", self.limit)
        dropped = 0
        while True:
            try:
                state.frontier.get_nowait()
            except asyncio.QueueEmpty:
                break
            state.frontier.task_done()
            dropped += 1
        state.skipped += dropped
        if dropped:
            logger.debug("Discarded %d queued URLs", dropped)

    # ------------------------------------------------------------------ #
    # workers                                                              #
    # ------------------------------------------------------------------ #

    async def _supervise(self, output: asyncio.Queue[_Emitted]) -> None:
        assert self.state is not None
        await self.state.frontier.join()
        await output.put(_END)

    async def _worker(self, output: asyncio.Queue[_Emitted]) -> None:
        assert self.state is not None
        frontier = self.state.frontier
        while True:
            task = await frontier.get()
            try:
                item = await self._process(task)
                if item is not None:
                    await output.put(item)
            except Exception as exc:
                logger.exception("Crawler worker failed on %s", task.url)
                await output.put(_WorkerFailure(exc))
            finally:
                frontier.task_done()

    def _reserve(self) -> bool:
        """Claim a fetch slot; never lets started fetches exceed the limit."""
        state = self.state
        assert state is not None
        if state.cancelled:
            return False
        if self.limit is not None and state.fetched_count + state.in_flight >= self.limit:
            if state.fetched_count >= self.limit:
                self._limit_reached()
            return False
        state.in_flight += 1
        return True

    async def _process(self, task: CrawlTask) -> Optional[ContentItem]:
        state = self.state
        assert state is not None
        if not self._reserve():
            state.skipped += 1
            return None

        logger.info("Fetching: %s (depth %d)", task.url, task.depth)
        try:
            result = await self.fetcher.fetch(task.url, self._token)
        finally:
            state.in_flight -= 1

        if result is None and state.cancelled:
            logger.debug("Fetch aborted for %s", task.url)
            return None

        state.fetched_count += 1
        logger.debug("Processed %s. Count: %d/%s", task.url, state.fetched_count, self.limit or "unlimited")
        if self.limit is not None and state.fetched_count >= self.limit:
            self._limit_reached()

        error: Optional[BaseException] = None
        page: Optional[ExtractedPage] = None
        if result is None:
            error = FetchError(f"Fetch failed: {task.url}")
        elif result.is_html:
            try:
                page = await asyncio.to_thread(
                    self.extractor, result.content, result.final_url or task.url, self.options.content_selector
                )
            except Exception as exc:
                logger.warning("Readability failed for %s: %s", task.url, exc)
                error = ExtractionError(f"Readability failed: {exc}")
                error.__cause__ = exc
        else:
            logger.debug("Skipping content processing for non-HTML type (%s): %s", result.content_type, task.url)

        if result is not None and page is not None and not task.from_sitemap and task.depth < self.max_depth:
            await self._discover_children(task, result)

        item = self._build_item(task, result, page, error)
        state.emitted += 1
        if error is not None:
            state.errors += 1
        return item

    async def _discover_children(self, task: CrawlTask, result: FetchResult) -> None:
        base = result.final_url or task.url
        try:
            links = await asyncio.to_thread(extract_links, result.content, base)
        except Exception as exc:
            logger.warning("Error discovering links on %s: %s", task.url, exc)
            return
        queued = sum(1 for link in links if self._admit(link, task.depth + 1))
        assert self.state is not None
        logger.debug(
            "Discovered %d URLs from %s, queued %d. Queue size: %d",
            len(links),
            task.url,
            queued,
            self.state.frontier.qsize(),
        )

    def _build_item(
        self,
        task: CrawlTask,
        result: Optional[FetchResult],
        page: Optional[ExtractedPage],
        error: Optional[BaseException],
    ) -> ContentItem:
        if page is not None:
            kind = ItemKind.TEXT
        elif result is not None and result.is_image:
            kind = ItemKind.IMAGE
        else:
            kind = ItemKind.OTHER
        return ContentItem(
            id=task.url,
            source=self.source,
            adapter_name=self.adapter_name,
            kind=kind,
            content=page.markdown if page is not None else None,
            metadata={
                "title": page.title if page is not None else None,
                "original_url": task.url,
                "fetch_url": result.final_url if result is not None else None,
                "content_type": result.content_type if result is not None else None,
                "http_status": result.status if result is not None else None,
                "headers": result.headers if result is not None else None,
                "depth": task.depth,
            },
            error=error,
        )
