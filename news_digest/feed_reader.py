from __future__ import annotations

import logging
from typing import Any, List

import feedparser
import httpx

from .config import DEFAULT_ITEM_LIMIT
from .errors import FetchError, ParseError
from .models import FeedItem

logger = logging.getLogger(__name__)


def fetch_items(feed_url: str, limit: int = DEFAULT_ITEM_LIMIT, *, client: httpx.Client) -> List[FeedItem]:
    logger.info("Fetching feed: %s", feed_url)
    try:
        response = client.get(feed_url)
    except httpx.RequestError as exc:
        raise FetchError(f"Feed request failed: {exc}") from exc
    if not response.is_success:
        raise FetchError(f"Feed fetch failed: status={response.status_code} url={feed_url}")

    items = parse_feed(response.content)[:limit]
    logger.info("Fetched %s feed items (limit=%s)", len(items), limit)
    return items


def parse_feed(body: bytes | str) -> List[FeedItem]:
    parsed = feedparser.parse(body)
    entries = parsed.get("entries") or []
    if parsed.get("bozo") and not entries:
        reason = parsed.get("bozo_exception")
        raise ParseError(f"Feed document is not well-formed: {reason}")
    if not parsed.get("version") and not entries:
        raise ParseError("Response body is not a feed document.")
    return [_to_model(entry) for entry in entries]


def _to_model(entry: Any) -> FeedItem:
    return FeedItem(
        title=_field(entry, "title"),
        link=_field(entry, "link"),
        description=_field(entry, "summary"),
        pub_date=_field(entry, "published"),
    )


def _field(entry: Any, name: str) -> str:
    value = entry.get(name)
    if not isinstance(value, str):
        return ""
    return value.strip()
