from __future__ import annotations

from typing import Dict, Optional

import pytest


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.puts = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.puts += 1
        self.data[key] = value


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
