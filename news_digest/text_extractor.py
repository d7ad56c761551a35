from __future__ import annotations

import copy
import logging
import os
import re
from typing import List, Optional

import httpx
from lxml import etree, html
from readability import Document

from .config import MAX_EXTRACT_CHARS, MIN_CONTENT_CHARS
from .errors import FetchError

logger = logging.getLogger(__name__)

# NOTE:
# Many news sites answer a bot-like User-Agent with 403 or a stripped page.
# Default to a common browser UA; HTTP_USER_AGENT overrides it.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

HEADING_XPATHS = (
    "//*[@data-component='headline-block']//h1",
    "//article//h1",
    "//h1",
)
SUBHEADING_XPATHS = (
    "//*[contains(@class, 'standfirst')]",
    "//*[contains(@class, 'subheadline') or contains(@class, 'sub-headline')]",
    "//article//*[contains(@class, 'dek') or contains(@class, 'summary')]",
)
SECTION_XPATH = (
    "//*[@data-component='text-block']"
    " | //*[@data-component='subheadline-block']"
    " | //*[@itemprop='articleBody']"
    " | //*[contains(@class, 'article-body') or contains(@class, 'article__body')]"
)
TEXT_NODE_XPATH = ".//p[not(ancestor::li)] | .//h2 | .//h3 | .//h4 | .//li[not(ancestor::li)]"

CONTAINER_XPATHS = ("//article", "//main", "//*[@role='main']")
NON_CONTENT_XPATH = " | ".join(
    [
        ".//script",
        ".//style",
        ".//noscript",
        ".//nav",
        ".//aside",
        ".//form",
        ".//figure",
        ".//figcaption",
        ".//iframe",
        ".//video",
        ".//audio",
        ".//embed",
        ".//object",
        ".//*[contains(@class, 'breadcrumb')]",
        ".//*[contains(@class, 'share') or contains(@class, 'social')]",
        ".//*[contains(@class, 'advert') or contains(@class, 'ad-slot') or contains(@class, 'ad-container')]",
        ".//*[contains(@class, 'related')]",
        ".//*[contains(@class, 'sidebar')]",
        ".//*[contains(@class, 'media-player') or contains(@class, 'video-player')]",
        ".//*[@data-component='links-block' or @data-component='ad-slot' or @data-component='tags']",
    ]
)
BLOCK_TAGS = {"p", "div", "section", "li", "br", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote"}

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def _request_headers(user_agent: str) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


def _user_agent() -> str:
    env_user_agent = (os.getenv("HTTP_USER_AGENT") or "").strip()
    return env_user_agent or DEFAULT_USER_AGENT


def fetch_html(url: str, *, client: httpx.Client) -> bytes:
    logger.info("Fetching URL: %s", url)
    try:
        response = client.get(url, headers=_request_headers(_user_agent()))
    except httpx.RequestError as exc:
        raise FetchError(f"HTTP request failed for {url}: {exc}") from exc
    if not response.is_success:
        hint = ""
        if response.status_code == 403:
            hint = " (site may block automated fetch; try setting HTTP_USER_AGENT to a browser UA)"
        raise FetchError(f"HTTP fetch failed: status={response.status_code} url={url}{hint}")
    return response.content


def extract_text(url: str, *, client: httpx.Client) -> str:
    page = fetch_html(url, client=client)
    text = extract_article_text(page)
    if not text:
        logger.warning("No article text extracted from %s", url)
    trimmed = trim_text(text, MAX_EXTRACT_CHARS)
    logger.info("Extracted %s characters from %s", len(trimmed), url)
    return trimmed


def extract_article_text(page: str | bytes) -> str:
    """
    Extract normalized article text from a page.

    The strict pass reads heading, subheading and known content sections. When
    that yields fewer than MIN_CONTENT_CHARS, the broader article container is
    used instead, with navigation, share widgets, players, ads and related
    blocks removed. Readability is the last resort for pages with neither.
    """
    if not page.strip():
        return ""
    try:
        tree = html.fromstring(page)
    except etree.ParserError as exc:
        logger.warning("Page markup could not be parsed: %s", exc)
        return ""

    candidate = _extract_strict(tree)
    if len(candidate.strip()) < MIN_CONTENT_CHARS:
        logger.info("Strict extraction yielded %s chars; using container fallback", len(candidate.strip()))
        fallback = _extract_container(tree)
        if fallback is not None:
            candidate = fallback
        else:
            readable = _extract_readability(page)
            if len(readable.strip()) > len(candidate.strip()):
                candidate = readable
    return normalize_whitespace(candidate)


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def trim_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def _extract_strict(tree: html.HtmlElement) -> str:
    parts: List[str] = []
    heading = _first_text(tree, HEADING_XPATHS)
    if heading:
        parts.append(heading)
    subheading = _first_text(tree, SUBHEADING_XPATHS)
    if subheading and subheading != heading:
        parts.append(subheading)

    for section in _outermost(tree.xpath(SECTION_XPATH)):
        for node in section.xpath(TEXT_NODE_XPATH):
            text = node.text_content().strip()
            if text:
                parts.append(text)
    return "\n\n".join(parts)


def _extract_container(tree: html.HtmlElement) -> Optional[str]:
    for xpath in CONTAINER_XPATHS:
        matches = tree.xpath(xpath)
        if not matches:
            continue
        working = copy.deepcopy(matches[0])
        for node in working.xpath(NON_CONTENT_XPATH):
            if node.getparent() is not None:
                node.drop_tree()
        return _block_text(working)
    return None


def _extract_readability(page: str | bytes) -> str:
    try:
        summary_html = Document(page).summary(html_partial=True)
        return _block_text(html.fromstring(summary_html))
    except (etree.ParserError, ValueError) as exc:
        logger.warning("Readability extraction failed: %s", exc)
        return ""


def _first_text(tree: html.HtmlElement, xpaths: tuple[str, ...]) -> str:
    for xpath in xpaths:
        for node in tree.xpath(xpath):
            text = node.text_content().strip()
            if text:
                return text
    return ""


def _outermost(sections: List[html.HtmlElement]) -> List[html.HtmlElement]:
    """Drop sections nested inside another matched section so text is not read twice."""
    chosen = set(sections)
    result = []
    for section in sections:
        if any(ancestor in chosen for ancestor in section.iterancestors()):
            continue
        result.append(section)
    return result


def _block_text(element: html.HtmlElement) -> str:
    """Text of element with a newline after each block so words do not run together."""
    for node in element.iter():
        if isinstance(node.tag, str) and node.tag.lower() in BLOCK_TAGS:
            node.tail = "\n" + (node.tail or "")
    return element.text_content()
