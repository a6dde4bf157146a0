# File: tests/test_fetcher.py
"""Fetch client: redirects, statuses, timeouts, cancellation."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import ClientSession, web

from content_scout.crawler.fetcher import MAX_REDIRECTS, Fetcher, _flatten_headers, fetch_url
from content_scout.crawler.models import CancelToken
from content_scout.errors import CrawlCancelled
from helpers import html_response


def redirect_chain_app(hops: int) -> web.Application:
    """``/r0`` redirects to ``/r1`` … ``/r{hops}`` which answers 200."""
    app = web.Application()

    async def hop(request: web.Request):
        n = int(request.match_info["n"])
        if n < hops:
            raise web.HTTPFound(f"/r{n + 1}")
        return html_response(f"<p>end of chain {n}</p>")

    app.router.add_get("/r{n}", hop)
    return app


@pytest.mark.asyncio()
async def test_fetch_ok_returns_body_and_headers(serve):
    app = web.Application()

    async def root(_):
        resp = html_response("<h1>Hello</h1>")
        resp.headers["X-Test"] = "yes"
        return resp

    app.router.add_get("/", root)
    base = await serve(app)

    result = await fetch_url(f"{base}/")
    assert result is not None
    assert result.status == 200
    assert "<h1>Hello</h1>" in result.content
    assert result.is_html
    assert result.headers["x-test"] == "yes"
    assert result.final_url == f"{base}/"


@pytest.mark.asyncio()
async def test_follows_relative_redirect_and_reports_final_url(serve):
    base = await serve(redirect_chain_app(2))
    result = await fetch_url(f"{base}/r0")
    assert result is not None
    assert result.final_url == f"{base}/r2"
    assert "end of chain 2" in result.content


@pytest.mark.asyncio()
async def test_max_redirects_allowed(serve):
    base = await serve(redirect_chain_app(MAX_REDIRECTS))
    result = await fetch_url(f"{base}/r0")
    assert result is not None
    assert result.final_url.endswith(f"/r{MAX_REDIRECTS}")


@pytest.mark.asyncio()
async def test_too_many_redirects_fails(serve):
    base = await serve(redirect_chain_app(MAX_REDIRECTS + 1))
    assert await fetch_url(f"{base}/r0") is None


@pytest.mark.asyncio()
async def test_redirect_without_location_fails(serve):
    app = web.Application()

    async def broken(_):
        return web.Response(status=302)

    app.router.add_get("/", broken)
    base = await serve(app)
    assert await fetch_url(f"{base}/") is None


@pytest.mark.asyncio()
async def test_redirect_to_non_http_scheme_fails(serve):
    app = web.Application()

    async def to_ftp(_):
        return web.Response(status=301, headers={"Location": "ftp://example.com/file"})

    app.router.add_get("/", to_ftp)
    base = await serve(app)
    assert await fetch_url(f"{base}/") is None


@pytest.mark.asyncio()
@pytest.mark.parametrize("status", [404, 500, 503])
async def test_error_status_returns_none(serve, status):
    app = web.Application()

    async def failing(_):
        return web.Response(status=status, text="nope")

    app.router.add_get("/", failing)
    base = await serve(app)
    assert await fetch_url(f"{base}/") is None


@pytest.mark.asyncio()
async def test_no_retry_on_server_error(serve):
    calls = {"n": 0}
    app = web.Application()

    async def flaky(_):
        calls["n"] += 1
        return web.Response(status=500)

    app.router.add_get("/", flaky)
    base = await serve(app)
    assert await fetch_url(f"{base}/") is None
    assert calls["n"] == 1


@pytest.mark.asyncio()
async def test_timeout_returns_none(serve):
    app = web.Application()

    async def slow(_):
        await asyncio.sleep(1)
        return html_response("late")

    app.router.add_get("/", slow)
    base = await serve(app)
    assert await fetch_url(f"{base}/", timeout=0.2) is None


@pytest.mark.asyncio()
async def test_connection_error_returns_none(unused_tcp_port):
    assert await fetch_url(f"http://localhost:{unused_tcp_port}/", timeout=2) is None


@pytest.mark.asyncio()
async def test_cancel_token_aborts_in_flight_request(serve):
    app = web.Application()

    async def slow(_):
        await asyncio.sleep(1.5)
        return html_response("late")

    app.router.add_get("/", slow)
    base = await serve(app)
    token = CancelToken()

    async with ClientSession() as session:
        fetcher = Fetcher(session, timeout=10)
        task = asyncio.create_task(fetcher.fetch(f"{base}/", token))
        await asyncio.sleep(0.2)
        token.cancel("caller")
        result = await asyncio.wait_for(task, timeout=2)

    assert result is None
    assert token.reason == "caller"


@pytest.mark.asyncio()
async def test_cancelled_token_skips_request(serve):
    calls = {"n": 0}
    app = web.Application()

    async def root(_):
        calls["n"] += 1
        return html_response("hi")

    app.router.add_get("/", root)
    base = await serve(app)
    token = CancelToken()
    token.cancel("limit")
    assert await fetch_url(f"{base}/", token) is None
    assert calls["n"] == 0


def test_cancel_token_first_reason_wins():
    token = CancelToken()
    assert token.cancel("limit") is True
    assert token.cancel("caller") is False
    assert token.reason == "limit"
    assert token.cancelled


def test_raise_if_cancelled_carries_reason():
    token = CancelToken()
    token.raise_if_cancelled()
    token.cancel("caller")
    with pytest.raises(CrawlCancelled, match="caller"):
        token.raise_if_cancelled()


def test_flatten_headers_joins_repeated_values():
    from multidict import CIMultiDict

    headers = CIMultiDict([("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("Content-Type", "text/html")])
    flat = _flatten_headers(headers)
    assert flat == {"set-cookie": "a=1, b=2", "content-type": "text/html"}
