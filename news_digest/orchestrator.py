from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from . import config
from .config import LEDGER_KEY
from .delivery import WebhookChannel
from .digest_formatter import build_digest_message
from .feed_reader import fetch_items
from .ledger import KeyValueStore, filter_new, load_ledger, merge_links, save_ledger
from .models import Article, RunOutcome
from .summarizer import GeminiSummarizer
from .text_extractor import extract_text

logger = logging.getLogger(__name__)


def run(
    settings: config.Settings,
    *,
    store: KeyValueStore,
    client: Optional[httpx.Client] = None,
    now: Optional[datetime] = None,
) -> RunOutcome:
    """
    Execute one digest run.

    Every failure is caught here, logged, and reported as a failed outcome. The
    ledger is written only after the whole digest has been delivered.
    """
    owns_client = client is None
    http = client or httpx.Client(timeout=20.0, follow_redirects=True)
    step = "read_feed"
    try:
        items = fetch_items(settings.feed_url, settings.item_limit, client=http)

        step = "filter_new"
        posted = load_ledger(store, LEDGER_KEY)
        targets = filter_new(items, posted)
        logger.info("Found %s new items (from %s fetched, ledger=%s)", len(targets), len(items), len(posted))
        if not targets:
            logger.info("No new items to deliver; run finished.")
            return RunOutcome(status="no_new_items")

        step = "extract"
        articles: List[Article] = []
        for idx, item in enumerate(targets, start=1):
            logger.info("---- Extracting item %s/%s ----", idx, len(targets))
            logger.info("title=%s link=%s", item.title, item.link)
            content = extract_text(item.link, client=http)
            articles.append(Article(item=item, content=content))

        step = "summarize"
        summarizer = GeminiSummarizer(settings.gemini_api_key, settings.gemini_api_url, client=http)
        summary = summarizer.summarize(articles)

        step = "compose"
        message = build_digest_message(now or datetime.now(timezone.utc), summary, articles)

        step = "deliver"
        channel = WebhookChannel(settings.webhook_url, client=http)
        chunks_sent = channel.deliver(message)

        step = "persist_ledger"
        delivered_links = [article.link for article in articles]
        save_ledger(store, LEDGER_KEY, merge_links(delivered_links, posted, settings.posted_max))

        logger.info("Run completed. Delivered=%s Chunks=%s", len(delivered_links), chunks_sent)
        return RunOutcome(status="delivered", delivered_links=delivered_links, chunks_sent=chunks_sent)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Run failed during %s: %s", step, exc)
        return RunOutcome(status="failed", error=f"{step}: {exc}")
    finally:
        if owns_client:
            http.close()
