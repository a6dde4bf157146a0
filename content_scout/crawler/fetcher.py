# content_scout/crawler/fetcher.py
"""
Fetcher module: one HTTP GET with timeout, manual redirects and cancellation.

The fetcher never retries. Any failure (network error, timeout, non-2xx
status, broken redirect chain, cancellation) is reported as ``None``; the
reason is logged, callers only need to know that no body is available.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin, urlparse

from aiohttp import ClientError, ClientSession, ClientTimeout

from content_scout.config import DEFAULT_USER_AGENT, FETCH_TIMEOUT
from content_scout.crawler.models import CancelToken, FetchResult
from content_scout.errors import CrawlCancelled
from content_scout.logger import get_logger

__all__ = ("MAX_REDIRECTS", "Fetcher", "fetch_url")

MAX_REDIRECTS = 5

logger = get_logger("fetch")

# (status, location, result) of a single request without redirect handling
_Attempt = Tuple[int, Optional[str], Optional[FetchResult]]


def _flatten_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Lower-case header names; repeated headers are joined with ``", "``."""
    flat: Dict[str, str] = {}
    for key, value in headers.items():
        name = key.lower()
        flat[name] = f"{flat[name]}, {value}" if name in flat else value
    return flat


class Fetcher:
    """Handles HTTP fetching with per-request timeout and manual redirects."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = FETCH_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
    ) -> None:
        self.session = session
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects

    async def fetch(self, url: str, cancel_token: Optional[CancelToken] = None) -> FetchResult | None:
        """
        Fetch *url*, following up to ``max_redirects`` redirects.

        Returns FetchResult on a 2xx response, or None on failure/cancellation.
        """
        if self.session is not None:
            return await self._fetch_with(self.session, url, cancel_token)
        async with ClientSession(headers={"User-Agent": self.user_agent}) as session:
            return await self._fetch_with(session, url, cancel_token)

    async def _fetch_with(
        self, session: ClientSession, url: str, token: Optional[CancelToken]
    ) -> FetchResult | None:
        current = url
        redirects = 0
        while True:
            if token is not None and token.cancelled:
                logger.debug("Aborted before fetching %s", current)
                return None
            logger.debug("Fetching %s (redirects: %d)", current, redirects)
            try:
                status, location, result = await self._race(self._request(session, current), token)
            except CrawlCancelled:
                logger.warning("Fetch aborted externally for %s", current)
                return None
            except asyncio.TimeoutError:
                logger.warning("Fetch timed out for %s after %.1f s", current, self.timeout)
                return None
            except (ClientError, UnicodeDecodeError, ValueError) as exc:
                logger.warning("Network error fetching %s: %s", current, exc)
                return None

            if 300 <= status < 400:
                if not location:
                    logger.warning("Redirect status %d without Location header from %s", status, current)
                    return None
                target = urljoin(current, location)
                if urlparse(target).scheme not in ("http", "https"):
                    logger.warning("Invalid redirect location from %s: %s", current, location)
                    return None
                redirects += 1
                if redirects > self.max_redirects:
                    logger.warning("Maximum redirects (%d) exceeded for %s", self.max_redirects, url)
                    return None
                logger.debug("Following redirect %d to %s", status, target)
                current = target
                continue

            if result is None:
                logger.warning("HTTP error status %d for %s", status, current)
                return None
            return result

    async def _request(self, session: ClientSession, url: str) -> _Attempt:
        async with session.get(
            url,
            allow_redirects=False,
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
        ) as resp:
            if 300 <= resp.status < 400:
                return resp.status, resp.headers.get("Location"), None
            if not 200 <= resp.status < 300:
                return resp.status, None, None
            text = await resp.text(errors="replace")
            return resp.status, None, FetchResult(
                final_url=str(resp.url),
                content=text,
                status=resp.status,
                content_type=resp.headers.get("Content-Type"),
                headers=_flatten_headers(resp.headers),
            )

    @staticmethod
    async def _race(coro, token: Optional[CancelToken]) -> _Attempt:
        """Await *coro* unless *token* fires first; then cancel it and raise CrawlCancelled."""
        if token is None:
            return await coro
        task = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for fut in (task, waiter):
                if not fut.done():
                    fut.cancel()
            await asyncio.gather(task, waiter, return_exceptions=True)
        if task.cancelled():
            token.raise_if_cancelled()
        return task.result()


async def fetch_url(
    url: str,
    cancel_token: Optional[CancelToken] = None,
    *,
    session: Optional[ClientSession] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: Union[int, float] = FETCH_TIMEOUT,
) -> FetchResult | None:
    """Convenience wrapper: one-off :class:`Fetcher` call."""
    fetcher = Fetcher(session, user_agent=user_agent, timeout=float(timeout))
    return await fetcher.fetch(url, cancel_token)
