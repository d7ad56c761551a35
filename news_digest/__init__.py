"""Scheduled RSS digest: summarize unseen articles and post them to a webhook."""

__all__ = [
    "config",
    "errors",
    "models",
    "feed_reader",
    "ledger",
    "text_extractor",
    "summarizer",
    "digest_formatter",
    "delivery",
    "orchestrator",
]
