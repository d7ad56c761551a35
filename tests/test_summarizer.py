from __future__ import annotations

import json
from typing import Any, List

import httpx
import pytest

from news_digest.models import Article, FeedItem
from news_digest.summarizer import GeminiSummarizer, SummarizationError, build_prompt, extract_text_segments

API_URL = "https://gemini.example.com/v1beta/models/test:generateContent"


def _articles() -> List[Article]:
    return [
        Article(
            item=FeedItem(
                title="First story",
                link="https://news.example.com/1",
                description="Short description",
                pub_date="Mon, 19 Oct 2026 08:00:00 GMT",
            ),
            content="Body of the first story.",
        ),
        Article(item=FeedItem(title="Second story", link="https://news.example.com/2"), content="Second body."),
    ]


def _ok_body(*texts: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_summarize_sends_one_batched_request():
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_ok_body("  digest text  "))

    with _client(handler) as client:
        summary = GeminiSummarizer("secret", API_URL, client=client).summarize(_articles())

    assert summary == "digest text"
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert request.url.params["key"] == "secret"
    body = json.loads(request.content)
    assert body["generationConfig"] == {"temperature": 0.4, "maxOutputTokens": 1200}
    assert body["contents"][0]["role"] == "user"
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "## First story" in prompt
    assert "Body of the first story." in prompt
    assert "## Second story" in prompt
    assert "Second body." in prompt


def test_build_prompt_includes_optional_fields_only_when_present():
    prompt = build_prompt(_articles(), "INSTRUCTIONS")
    assert prompt.startswith("INSTRUCTIONS")
    assert "Description: Short description" in prompt
    assert "Published: Mon, 19 Oct 2026 08:00:00 GMT" in prompt
    second = prompt.split("## Second story", 1)[1]
    assert "Description:" not in second
    assert "Published:" not in second


def test_summarize_joins_multiple_segments_in_order():
    with _client(lambda request: httpx.Response(200, json=_ok_body("Part one. ", "Part two."))) as client:
        summary = GeminiSummarizer("secret", API_URL, client=client).summarize(_articles())
    assert summary == "Part one. Part two."


def test_summarize_error_includes_status_and_body():
    with _client(lambda request: httpx.Response(429, text="quota exceeded")) as client:
        with pytest.raises(SummarizationError) as excinfo:
            GeminiSummarizer("secret", API_URL, client=client).summarize(_articles())
    assert "status=429" in str(excinfo.value)
    assert "quota exceeded" in str(excinfo.value)


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"candidates": []},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
    ],
)
def test_summarize_raises_when_no_text(body: dict[str, Any]):
    with _client(lambda request: httpx.Response(200, json=body)) as client:
        with pytest.raises(SummarizationError):
            GeminiSummarizer("secret", API_URL, client=client).summarize(_articles())


def test_summarize_raises_on_non_json_body():
    with _client(lambda request: httpx.Response(200, text="<html>oops</html>")) as client:
        with pytest.raises(SummarizationError):
            GeminiSummarizer("secret", API_URL, client=client).summarize(_articles())


def test_extract_text_segments_accepts_list_shaped_content():
    data = {"candidates": [{"content": [{"parts": [{"text": "a"}]}, {"parts": [{"text": "b"}]}]}]}
    assert extract_text_segments(data) == ["a", "b"]


def test_extract_text_segments_skips_candidates_without_text():
    data = {"candidates": [{"content": None}, {"content": {"parts": [{"text": "second"}]}}]}
    assert extract_text_segments(data) == ["second"]


def test_rejects_blank_api_key():
    with _client(lambda request: httpx.Response(200)) as client:
        with pytest.raises(ValueError):
            GeminiSummarizer("  ", API_URL, client=client)
