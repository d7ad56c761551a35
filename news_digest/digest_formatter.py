from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from .models import Article


def build_header(run_at: datetime, article_count: int) -> str:
    stamp = run_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    noun = "article" if article_count == 1 else "articles"
    return f"**News digest** {stamp} ({article_count} {noun})"


def build_digest_message(run_at: datetime, summary: str, articles: Sequence[Article]) -> str:
    lines = [build_header(run_at, len(articles)), "", summary.strip(), "", "**Sources**"]
    for idx, article in enumerate(articles, start=1):
        lines.append(f"{idx}. {article.link}")
    return "\n".join(lines)
