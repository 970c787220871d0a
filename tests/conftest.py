"""测试配置和 fixtures."""

import asyncio
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import feedsift.models  # noqa: F401  注册所有表
from feedsift.fetcher.parser import FetchError
from feedsift.models.entry import Entry, Feed

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
    <channel>
        <title>Sample Feed</title>
        <link>http://example.com/</link>
        <description>Sample feed</description>
        <language>en-us</language>
        <lastBuildDate>Mon, 06 Sep 2010 00:01:00 +0000</lastBuildDate>
        <item>
            <title>Item 1</title>
            <link>http://example.com/item1</link>
            <guid>http://example.com/item1</guid>
            <description>Item 1 description</description>
            <content:encoded><![CDATA[<p>Item 1 <b>body</b></p>]]></content:encoded>
            <category>News</category>
            <pubDate>Mon, 06 Sep 2010 16:20:00 +0000</pubDate>
        </item>
        <item>
            <title>Item 2</title>
            <link>http://example.com/item2</link>
            <guid>http://example.com/item2</guid>
            <description>Item 2 description</description>
            <pubDate>Mon, 06 Sep 2010 16:20:00 +0000</pubDate>
        </item>
    </channel>
</rss>
"""


class FakeFetcher:
    """按 URL 返回预设快照或错误的抓取器."""

    def __init__(self) -> None:
        self.results: dict[str, Feed | FetchError] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []

    def set_feed(self, url: str, *entries: Entry, title: str = "") -> Feed:
        feed = Feed(url=url, id=f"id:{url}", title=title or url, entries=entries)
        self.results[url] = feed
        return feed

    def set_error(self, url: str, reason: str = "boom") -> None:
        self.results[url] = FetchError(url, reason)

    async def fetch(self, url: str) -> Feed:
        self.calls.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        result = self.results.get(url)
        if result is None:
            raise FetchError(url, "not found")
        if isinstance(result, FetchError):
            raise result
        return result


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """创建测试用文章."""

    def _make(title: str, **fields: object) -> Entry:
        fields.setdefault("id", f"urn:{title.lower().replace(' ', '-')}")
        fields.setdefault("links", (f"https://example.com/{title.lower().replace(' ', '-')}",))
        return Entry(title=title, **fields)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def sample_rss() -> str:
    """测试用 RSS 原文."""
    return SAMPLE_RSS


@pytest.fixture
def fetcher() -> FakeFetcher:
    """创建测试用抓取器."""
    return FakeFetcher()


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的临时数据库会话工厂."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """创建测试用的数据库会话."""
    async with session_factory() as session:
        yield session
