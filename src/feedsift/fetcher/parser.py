"""RSS / Atom 解析，将 feedparser 结果映射为领域模型."""

import logging
from datetime import UTC, datetime
from typing import Any

import feedparser

from feedsift.models.entry import Entry, Feed

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """订阅源抓取或解析失败."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


def parse_feed(url: str, raw: bytes | str) -> Feed:
    """
    解析订阅源原文.

    Args:
        url: 订阅源 URL
        raw: 原始 XML 内容

    Returns:
        Feed 快照

    Raises:
        FetchError: 内容无法解析为订阅源
    """
    # feedparser 会把字符串当作 URL 或文件路径处理
    if isinstance(raw, str):
        raw = raw.encode("utf-8")

    parsed = feedparser.parse(raw)
    meta = parsed.get("feed", {})

    if parsed.get("bozo") and not parsed.entries and not meta.get("title"):
        reason = str(parsed.get("bozo_exception") or "无法解析的订阅源")
        raise FetchError(url, reason)

    if parsed.get("bozo"):
        logger.warning(f"订阅源存在解析问题: {url} - {parsed.get('bozo_exception')}")

    return Feed(
        url=url,
        id=meta.get("id", "") or "",
        title=meta.get("title", "") or "",
        language=meta.get("language"),
        entries=tuple(_parse_entry(item) for item in parsed.entries),
    )


def _parse_entry(item: Any) -> Entry:
    """解析单篇文章."""
    contents = item.get("content") or []
    body = contents[0].get("value", "") if contents else ""
    language = contents[0].get("language") if contents else None

    authors = [a.get("name", "") for a in item.get("authors", []) if a.get("name")]
    if not authors and item.get("author"):
        authors = [item["author"]]

    links = [link.get("href", "") for link in item.get("links", []) if link.get("href")]
    if not links and item.get("link"):
        links = [item["link"]]

    return Entry(
        id=item.get("id", "") or "",
        title=item.get("title", "") or "",
        summary=item.get("summary", "") or "",
        content=body or "",
        authors=tuple(authors),
        categories=tuple(t.get("term", "") for t in item.get("tags", []) if t.get("term")),
        links=tuple(links),
        language=language,
        published=_parse_published(item),
    )


def _parse_published(item: Any) -> datetime | None:
    """解析发布时间."""
    for date_field in ("published_parsed", "updated_parsed"):
        date_tuple = item.get(date_field)
        if date_tuple:
            try:
                return datetime(*date_tuple[:6], tzinfo=UTC)
            except (ValueError, TypeError):
                continue
    return None
