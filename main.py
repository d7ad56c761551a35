from __future__ import annotations

import logging
import os
import sys

from news_digest import config
from news_digest.ledger import JsonFileStore
from news_digest.orchestrator import run


def log_level_from_env() -> int:
    name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def main() -> None:
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        settings = config.Settings.from_env()
    except config.ConfigError as exc:
        logging.error("Missing configuration: %s", exc)
        sys.exit(1)

    outcome = run(settings, store=JsonFileStore(settings.ledger_path))
    if not outcome.is_success():
        logging.error("Digest run failed: %s", outcome.error)
        sys.exit(1)


if __name__ == "__main__":
    main()
