# File: tests/conftest.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import List, Optional

import pytest
import pytest_asyncio
from aiohttp import web

from content_scout.models import ContentItem
from helpers import _serve_app


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture(autouse=True)
def _restore_project_logger():
    """CLI tests call init_logging(); undo it so later tests do not log to a closed stream."""
    lg = logging.getLogger("ContentScout")
    handlers, level, propagate = list(lg.handlers), lg.level, lg.propagate
    yield
    for handler in list(lg.handlers):
        if handler not in handlers:
            lg.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in lg.handlers:
            lg.addHandler(handler)
    lg.setLevel(level)
    lg.propagate = propagate


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[[web.Application], Awaitable[str]]]:
    """Factory fixture: ``base = await serve(app)`` starts a local server."""
    servers: List[AsyncIterator[str]] = []

    async def _start(app: web.Application) -> str:
        server = _serve_app(app, unused_tcp_port_factory())
        servers.append(server)
        return await server.__anext__()

    yield _start

    for server in servers:
        await server.aclose()


@pytest.fixture()
def make_item():
    """Build a ContentItem with sensible defaults."""

    def _make(
        id: str = "a.txt",
        content: Optional[str] = "hello",
        adapter: str = "filesystem",
        **kwargs,
    ) -> ContentItem:
        return ContentItem(id=id, source="src", adapter_name=adapter, content=content, **kwargs)

    return _make
