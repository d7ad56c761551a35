from __future__ import annotations

import os
from dataclasses import dataclass

# --------------------------------
# Settings

# Feed polled when FEED_URL is not set
DEFAULT_FEED_URL = "https://feeds.bbci.co.uk/news/rss.xml"

# Gemini generateContent endpoint used when GEMINI_API_URL is not set
DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
)

# Number of feed items considered per run
DEFAULT_ITEM_LIMIT = 5

# Maximum number of links remembered in the ledger
DEFAULT_POSTED_MAX = 50

# Ledger file and the key the ledger is stored under
DEFAULT_LEDGER_PATH = "state/ledger.json"
LEDGER_KEY = "posted_links"

# Characters per webhook message (Discord rejects content over 2000)
CHUNK_SIZE = 1800

# Strict extraction shorter than this falls back to the article container
MIN_CONTENT_CHARS = 200

# Maximum characters of one article passed to the summarizer
MAX_EXTRACT_CHARS = 10_000

# Gemini decoding settings
TEMPERATURE = 0.4
MAX_OUTPUT_TOKENS = 1200

SUMMARY_INSTRUCTIONS = """
You are a news editor writing a short digest for a chat channel.
Summarize the articles below into one combined digest.

- Use one short paragraph or 2-4 bullet points per article, in the order given.
- Stick to facts stated in the articles. Do not speculate or editorialize.
- Keep names, numbers and dates exact.
- Write plain text with simple Markdown only (bold, bullets).
""".strip()
# --------------------------------


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


@dataclass
class Settings:
    gemini_api_key: str
    webhook_url: str
    feed_url: str = DEFAULT_FEED_URL
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    item_limit: int = DEFAULT_ITEM_LIMIT
    posted_max: int = DEFAULT_POSTED_MAX
    ledger_path: str = DEFAULT_LEDGER_PATH

    @staticmethod
    def from_env() -> "Settings":
        def require(name: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                raise ConfigError(f"Environment variable {name} is required.")
            return value.strip()

        def optional_with_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        def int_with_default(name: str, default: int) -> int:
            raw = optional_with_default(name, str(default))
            try:
                value = int(raw)
            except ValueError as exc:
                raise ConfigError(f"Environment variable {name} must be an integer, got {raw!r}.") from exc
            if value <= 0:
                raise ConfigError(f"Environment variable {name} must be positive, got {value}.")
            return value

        return Settings(
            gemini_api_key=require("GEMINI_API_KEY"),
            webhook_url=require("DISCORD_WEBHOOK_URL"),
            feed_url=optional_with_default("FEED_URL", DEFAULT_FEED_URL),
            gemini_api_url=optional_with_default("GEMINI_API_URL", DEFAULT_GEMINI_API_URL),
            item_limit=int_with_default("ITEM_LIMIT", DEFAULT_ITEM_LIMIT),
            posted_max=int_with_default("POSTED_MAX", DEFAULT_POSTED_MAX),
            ledger_path=optional_with_default("LEDGER_PATH", DEFAULT_LEDGER_PATH),
        )
