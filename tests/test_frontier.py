# File: tests/test_frontier.py
import logging

import pytest

from dep_scout.frontier import Frontier
from dep_scout.utils import file_extension, is_excluded_url, normalize_url, strip_query

URLS = [
    "HTTP://Example.COM:80/a/./b/../c/?b=2&a=1#frag",
    "https://example.com:443//x//y/",
    "example.com/app.js",
    "https://example.com/",
    "https://example.com:8443/%7euser/%2f",
    "https://example.com/%2e%2e/x/%2E/y",
    "https://user:pw@Example.com./a?z=&y=1",
    "http://[::1]:8080/a/../b",
]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HTTP://Example.COM:80/a/./b/../c/?b=2&a=1#frag", "http://example.com/a/c?a=1&b=2"),
        ("https://example.com:443//x//y/", "https://example.com/x/y"),
        ("example.com/app.js", "https://example.com/app.js"),
        ("https://example.com/", "https://example.com"),
        ("https://example.com:8443/%7euser/%2f", "https://example.com:8443/~user/%2F"),
        ("http://[::1]:8080/a/../b", "http://[::1]:8080/b"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", URLS)
def test_normalize_is_idempotent(raw):
    once = normalize_url(raw)
    assert normalize_url(once) == once


@pytest.mark.parametrize("raw", ["ftp://example.com/file", "https://", "http://example.com:99999/"])
def test_normalize_rejects(raw):
    with pytest.raises(ValueError):
        normalize_url(raw)


def test_strip_query():
    assert strip_query("https://example.com/a?x=1&y=2") == "https://example.com/a"
    assert strip_query("https://example.com/a") == "https://example.com/a"


@pytest.mark.parametrize(
    "url,ext",
    [
        ("https://x.io/logo.PNG", ".png"),
        ("https://x.io/a/archive.tar.gz", ".gz"),
        ("https://x.io/.babelrc", ".babelrc"),
        ("https://x.io/Dockerfile", ""),
        ("https://x.io/v1.2/download", ""),
    ],
)
def test_file_extension(url, ext):
    assert file_extension(url) == ext


def test_excluded_extensions():
    assert is_excluded_url("https://x.io/logo.png")
    assert is_excluded_url("https://x.io/font.woff2")
    assert not is_excluded_url("https://x.io/app.js")
    assert not is_excluded_url("https://x.io/Makefile")


def test_admit_once():
    frontier = Frontier()
    url, ok = frontier.admit("https://Example.com/app.js?v=1")
    assert (url, ok) == ("https://example.com/app.js", True)
    # same target, different query and host case
    assert frontier.admit("https://EXAMPLE.com/app.js?v=2") == ("https://example.com/app.js", False)
    assert url in frontier
    assert len(frontier) == 1


def test_admit_excluded_extension_marks_visited():
    frontier = Frontier()
    url, ok = frontier.admit("https://example.com/img/logo.png")
    assert not ok
    assert url in frontier


def test_admit_unparsable_logs_warning(caplog):
    frontier = Frontier(logging.getLogger("test.frontier"))
    with caplog.at_level(logging.WARNING, logger="test.frontier"):
        assert frontier.admit("ftp://example.com/x") == ("", False)
    assert "Skipping" in caplog.text
    assert len(frontier) == 0
