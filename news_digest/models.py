from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    description: str = ""
    pub_date: str = ""


@dataclass(frozen=True)
class Article:
    item: FeedItem
    content: str

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def link(self) -> str:
        return self.item.link


@dataclass
class RunOutcome:
    status: str  # "delivered" | "no_new_items" | "failed"
    delivered_links: List[str] = field(default_factory=list)
    chunks_sent: int = 0
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status != "failed"
