from __future__ import annotations

import httpx
import pytest

from news_digest.errors import FetchError, ParseError
from news_digest.feed_reader import fetch_items, parse_feed

FEED_URL = "https://feeds.example.com/news.xml"


def rss(*items: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Example News</title>'
        + "".join(items)
        + "</channel></rss>"
    )


def rss_item(n: int, link: bool = True) -> str:
    link_xml = f"<link>https://news.example.com/{n}</link>" if link else ""
    return (
        f"<item><title>Story {n}</title>{link_xml}"
        f"<description>Description {n}</description>"
        f"<pubDate>Mon, 19 Oct 2026 0{n % 10}:00:00 GMT</pubDate></item>"
    )


def _client(status: int, body: str) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(status, text=body)))


def test_fetch_items_preserves_order_and_limit():
    body = rss(*(rss_item(n) for n in range(1, 8)))
    with _client(200, body) as client:
        items = fetch_items(FEED_URL, 5, client=client)
    assert [i.title for i in items] == ["Story 1", "Story 2", "Story 3", "Story 4", "Story 5"]
    assert items[0].link == "https://news.example.com/1"
    assert items[0].description == "Description 1"
    assert items[0].pub_date == "Mon, 19 Oct 2026 01:00:00 GMT"


def test_missing_fields_default_to_empty_string():
    items = parse_feed(rss("<item><title>Only a title</title></item>"))
    assert len(items) == 1
    assert items[0].title == "Only a title"
    assert items[0].link == ""
    assert items[0].description == ""
    assert items[0].pub_date == ""


def test_item_without_link_is_still_parsed():
    items = parse_feed(rss(rss_item(1), rss_item(2, link=False)))
    assert [i.link for i in items] == ["https://news.example.com/1", ""]


def test_empty_feed_yields_no_items():
    with _client(200, rss()) as client:
        assert fetch_items(FEED_URL, 5, client=client) == []


def test_non_success_status_raises_fetch_error():
    with _client(503, "unavailable") as client:
        with pytest.raises(FetchError) as excinfo:
            fetch_items(FEED_URL, 5, client=client)
    assert "status=503" in str(excinfo.value)


@pytest.mark.parametrize("body", ["this is not a feed <<<", "<html><body><p>Hello</p></body></html>"])
def test_malformed_body_raises_parse_error(body: str):
    with _client(200, body) as client:
        with pytest.raises(ParseError):
            fetch_items(FEED_URL, 5, client=client)
