from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .errors import PersistenceError
from .models import FeedItem

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """
    Key-value store backed by a single JSON object file.

    Writes go to a temporary sibling file that replaces the original, so a
    crash mid-write leaves the previous contents in place.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        data = self._read_all()
        value = data.get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def _read_all(self) -> Dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Store file %s is unreadable; treating as empty: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}


def load_ledger(store: KeyValueStore, key: str) -> List[str]:
    try:
        raw = store.get(key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Ledger read failed; starting from an empty ledger: %s", exc)
        return []
    if raw is None:
        logger.info("No ledger stored under %s; starting empty.", key)
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ledger under %s is not valid JSON; starting empty.", key)
        return []
    if not isinstance(data, list):
        logger.warning("Ledger under %s is not a list; starting empty.", key)
        return []
    links = [entry for entry in data if isinstance(entry, str) and entry]
    logger.info("Loaded ledger with %s links", len(links))
    return links


def filter_new(items: Iterable[FeedItem], posted: Iterable[str]) -> List[FeedItem]:
    """
    Keep items that have a link and whose link has not been delivered yet.

    A link repeated within the feed is kept once, at its first position.
    """
    seen = set(posted)
    fresh: List[FeedItem] = []
    for item in items:
        if not item.link or item.link in seen:
            continue
        seen.add(item.link)
        fresh.append(item)
    return fresh


def merge_links(new_links: Sequence[str], previous: Sequence[str], max_size: int) -> List[str]:
    """
    Build the next ledger: new links first, then the previous ledger.

    A link present in both keeps its newest position. Stops at max_size, which
    evicts the oldest links from the tail.
    """
    merged: List[str] = []
    seen: set[str] = set()
    for link in [*new_links, *previous]:
        if len(merged) >= max_size:
            break
        if not link or link in seen:
            continue
        seen.add(link)
        merged.append(link)
    return merged


def save_ledger(store: KeyValueStore, key: str, links: Sequence[str]) -> None:
    try:
        store.put(key, json.dumps(list(links)))
    except Exception as exc:  # noqa: BLE001
        raise PersistenceError(f"Ledger write failed: {exc}") from exc
    logger.info("Saved ledger with %s links", len(links))
