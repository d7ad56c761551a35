from __future__ import annotations

import logging
from typing import List

import httpx

from .config import CHUNK_SIZE
from .errors import DigestError

logger = logging.getLogger(__name__)


class DeliveryError(DigestError):
    """Raised when a chunk could not be delivered to the webhook."""


def split_chunks(text: str, size: int = CHUNK_SIZE) -> List[str]:
    if size <= 0:
        raise ValueError("Chunk size must be positive.")
    return [text[start : start + size] for start in range(0, len(text), size)]


class WebhookChannel:
    provider = "discord-webhook"

    def __init__(self, webhook_url: str, *, client: httpx.Client, chunk_size: int = CHUNK_SIZE):
        if not webhook_url or not webhook_url.strip():
            raise ValueError("Webhook URL must be provided.")
        self._webhook_url = webhook_url.strip()
        self._client = client
        self._chunk_size = chunk_size

    def deliver(self, text: str) -> int:
        """Post text as ordered chunks, one request at a time. Returns the number of chunks sent."""
        chunks = split_chunks(text, self._chunk_size)
        logger.info("Delivering %s chars in %s chunks", len(text), len(chunks))
        for idx, chunk in enumerate(chunks, start=1):
            try:
                response = self._client.post(self._webhook_url, json={"content": chunk})
            except httpx.RequestError as exc:
                raise DeliveryError(f"Chunk {idx}/{len(chunks)} request failed: {exc}") from exc
            if not response.is_success:
                raise DeliveryError(
                    f"Chunk {idx}/{len(chunks)} rejected: status={response.status_code} body={response.text}"
                )
            logger.info("Chunk %s/%s sent with status %s", idx, len(chunks), response.status_code)
        return len(chunks)
