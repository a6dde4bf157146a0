# File: tests/test_link_extractor.py
import pytest

from content_scout.crawler.link_extractor import extract_links, is_http_url, match_path, normalize_url, same_host


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HTTP://Example.COM", "http://example.com/"),
        ("http://example.com:80/a", "http://example.com/a"),
        ("https://example.com:443/a/", "https://example.com/a/"),
        ("http://example.com:8080/a", "http://example.com:8080/a"),
        ("http://example.com/a/./b/../c", "http://example.com/a/c"),
        ("http://example.com/a#section", "http://example.com/a"),
        ("http://example.com/p?b=2&a=1", "http://example.com/p?a=1&b=2"),
        ("http://example.com/a%20b", "http://example.com/a%20b"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_normalize_is_idempotent():
    once = normalize_url("http://Example.com/x/../y/?z=1&a=2#top")
    assert normalize_url(once) == once


def test_extract_links_filters_and_resolves():
    html = """
    <a href="/docs">Docs</a>
    <a href="guide/intro">Relative</a>
    <a href="https://example.com/docs">Duplicate absolute</a>
    <a href="https://other.com/page">External</a>
    <a href="mailto:me@example.com">Mail</a>
    <a href="javascript:void(0)">JS</a>
    <a href="#top">Anchor</a>
    <a href="/page#part">Fragment</a>
    <a>No href</a>
    <a href="   ">Blank</a>
    """
    links = extract_links(html, "https://example.com/base/")
    assert links == ["https://example.com/docs", "https://example.com/base/guide/intro"]


def test_extract_links_survives_malformed_href():
    html = '<a href="http://[::1">bad</a><a href="/ok">ok</a>'
    assert extract_links(html, "http://example.com/") == ["http://example.com/ok"]


@pytest.mark.parametrize(
    "path,patterns,expected",
    [
        ("/docs/intro", None, True),
        ("/docs/intro", [], True),
        ("/docs/intro", ["/docs/*"], True),
        ("/docs/a/b/c", ["/docs/**"], True),
        ("/blog/post", ["/docs/**"], False),
        ("/blog/post", ["/docs/**", "/blog/*"], True),
        ("/docs/b/c", ["/docs/*"], False),
        ("/docs/b/c", ["/docs/**"], True),
        ("/docs", ["/docs/**"], True),
        ("/docs/a.html", ["/docs/?.html"], True),
        ("/docs/ab.html", ["/docs/?.html"], False),
        ("/api/v2/users", ["/api/v[0-9]/*"], True),
        ("/api/vx/users", ["/api/v[!0-9]/*"], True),
        ("src/app.py", ["*.py"], False),
        ("src/app.py", ["**/*.py"], True),
        ("app.py", ["**/*.py"], True),
        ("src/a/b/app.py", ["src/**/app.py"], True),
        ("/docs/a+b(1).html", ["/docs/a+b(1).html"], True),
    ],
)
def test_match_path(path, patterns, expected):
    assert match_path(path, patterns) is expected


def test_same_host_and_http_check():
    assert same_host("http://Example.com/a", "https://example.com/b")
    assert not same_host("http://a.example.com/", "http://example.com/")
    assert is_http_url("https://example.com")
    assert not is_http_url("ftp://example.com")
    assert not is_http_url("/relative/path")
