from __future__ import annotations

import logging
from typing import Any, List, Sequence

import httpx

from .config import DEFAULT_GEMINI_API_URL, MAX_OUTPUT_TOKENS, SUMMARY_INSTRUCTIONS, TEMPERATURE
from .errors import DigestError
from .models import Article

logger = logging.getLogger(__name__)


class SummarizationError(DigestError):
    """Raised when the summarization service fails or returns no text."""


class GeminiSummarizer:
    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_GEMINI_API_URL,
        *,
        client: httpx.Client,
        instructions: str = SUMMARY_INSTRUCTIONS,
    ):
        if not api_key or not api_key.strip():
            raise ValueError("Gemini API key must be provided.")
        self._api_key = api_key.strip()
        self._api_url = api_url
        self._client = client
        self._instructions = instructions.strip()

    def summarize(self, articles: Sequence[Article]) -> str:
        prompt = build_prompt(articles, self._instructions)
        logger.info("Summarization request: articles=%s prompt_chars=%s", len(articles), len(prompt))
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }
        try:
            response = self._client.post(self._api_url, params={"key": self._api_key}, json=payload)
        except httpx.RequestError as exc:
            raise SummarizationError(f"Gemini request failed: {exc}") from exc
        if not response.is_success:
            raise SummarizationError(
                f"Gemini API call failed: status={response.status_code} body={response.text}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise SummarizationError(
                f"Gemini returned a non-JSON body: status={response.status_code} body={response.text}"
            ) from exc

        segments = extract_text_segments(data)
        if not segments:
            raise SummarizationError(
                f"Gemini response has no text: status={response.status_code} body={response.text}"
            )
        summary = "".join(segments).strip()
        if not summary:
            raise SummarizationError(f"Gemini returned empty text: status={response.status_code}")
        logger.info("Summary generated (%s chars)", len(summary))
        return summary


def build_prompt(articles: Sequence[Article], instructions: str = SUMMARY_INSTRUCTIONS) -> str:
    blocks = [instructions]
    for article in articles:
        lines = [f"## {article.title or article.link}"]
        if article.item.description:
            lines.append(f"Description: {article.item.description}")
        if article.item.pub_date:
            lines.append(f"Published: {article.item.pub_date}")
        lines.append("")
        lines.append(article.content)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def extract_text_segments(data: Any) -> List[str]:
    """
    Collect text parts from a generateContent response.

    `content` is normally an object holding `parts`; older API variants return a
    list of such objects. The first candidate with any text wins.
    """
    if not isinstance(data, dict):
        return []
    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        return []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content")
        if isinstance(content, dict):
            nodes = [content]
        elif isinstance(content, list):
            nodes = content
        else:
            continue
        segments: List[str] = []
        for node in nodes:
            if not isinstance(node, dict):
                continue
            parts = node.get("parts")
            if not isinstance(parts, list):
                continue
            for part in parts:
                if isinstance(part, dict) and isinstance(part.get("text"), str):
                    segments.append(part["text"])
        if segments:
            return segments
    return []
