"""阅读器 - 持有注册表、待评价队列和分类器的唯一协调者."""

import asyncio
import logging
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedsift.config import Settings
from feedsift.core.classifier import NaiveBayesClassifier, TrainingSample
from feedsift.core.registry import FeedRegistry
from feedsift.core.review import ReviewQueue, ScoredEntry
from feedsift.core.storage import FeedStore
from feedsift.core.sync import Fetcher, SyncEngine, SyncReport
from feedsift.models.entry import Entry, Feed, JudgedEntry

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https", "file")


class Reader:
    """
    阅读器.

    注册表、队列、分类器都是单写者结构，所有读写经过同一把锁；
    网络抓取在锁外进行，合并在锁内进行。
    """

    def __init__(
        self,
        fetcher: Fetcher,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        alpha: float = 1.0,
        min_training_size: int = 100,
        accept_threshold: float = 0.5,
    ) -> None:
        self.registry = FeedRegistry()
        self.queue = ReviewQueue()
        self.classifier = NaiveBayesClassifier(
            alpha=alpha, min_training_size=min_training_size
        )
        self.engine = SyncEngine(fetcher, self.registry, self.queue)
        self.accept_threshold = accept_threshold
        self._session_factory = session_factory
        self._lock = asyncio.Lock()
        self._sync_lock = asyncio.Lock()
        self._flush_lock = asyncio.Lock()
        self._flushed_count = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        fetcher: Fetcher,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> "Reader":
        return cls(
            fetcher,
            session_factory,
            alpha=settings.classifier_alpha,
            min_training_size=settings.classifier_min_training_size,
            accept_threshold=settings.accept_threshold,
        )

    async def load(self) -> None:
        """从存储恢复订阅源和已评价 ID，并用全部已评价文章训练分类器."""
        if self._session_factory is None:
            logger.info("未配置存储，跳过加载")
            return

        async with self._session_factory() as session:
            store = FeedStore(session)
            urls = await store.load_feed_urls()
            judged_keys = await store.load_judged_keys()
            samples = await store.load_training_samples()

        async with self._lock:
            for url in urls:
                self.registry.register(url)
            self.queue.remember_keys(judged_keys)
            self.classifier.train(samples)

        logger.info(f"已加载 {len(urls)} 个订阅源, {len(samples)} 条已评价文章")

    async def register(self, url: str) -> Feed:
        """注册订阅源（不抓取）."""
        parsed = urlparse(url)
        if parsed.scheme not in SUPPORTED_SCHEMES or not (parsed.netloc or parsed.path):
            msg = f"无效的订阅源 URL: {url}"
            raise ValueError(msg)

        async with self._lock:
            return self.registry.register(url)

    async def add_feed(self, url: str) -> SyncReport:
        """注册订阅源并立即同步."""
        await self.register(url)
        return await self.sync()

    async def remove_feed(self, url: str) -> None:
        """移除订阅源并从存储中删除."""
        async with self._lock:
            self.registry.remove(url)

        if self._session_factory is not None:
            async with self._session_factory() as session:
                await FeedStore(session).purge_feed(url)

    async def lookup(self, url: str) -> Feed | None:
        async with self._lock:
            return self.registry.lookup(url)

    async def feeds(self) -> list[Feed]:
        async with self._lock:
            return self.registry.feeds()

    async def sync(self) -> SyncReport:
        """同步全部订阅源."""
        async with self._sync_lock:
            async with self._lock:
                urls = self.registry.urls()
            report = SyncReport(feeds_total=len(urls))
            logger.info(f"开始同步 {len(urls)} 个订阅源")

            results = await self.engine.fetch_all(urls)

            async with self._lock:
                return self.engine.merge(urls, results, report)

    async def next_entry(self) -> Entry | None:
        """返回下一篇通过过滤的文章."""
        scored = await self.next_scored()
        return scored.entry if scored else None

    async def next_scored(self) -> ScoredEntry | None:
        """返回下一篇通过过滤的文章及其分数（同一次加锁内计算）."""
        async with self._lock:
            return self.queue.next_scored(self.classifier, self.accept_threshold)

    async def decide(self, liked: bool) -> tuple[JudgedEntry, ScoredEntry | None]:
        """
        评价当前文章，返回评价记录和下一篇文章.

        Raises:
            EmptyQueueError: 队列为空
        """
        async with self._lock:
            judged = self.queue.decide(liked)
            return judged, self.queue.next_scored(self.classifier, self.accept_threshold)

    async def score(self, entry: Entry) -> float:
        async with self._lock:
            return self.classifier.classify(entry)

    async def stats(self) -> dict[str, int]:
        async with self._lock:
            return {"feeds": len(self.registry), **self.queue.stats()}

    async def classifier_stats(self) -> dict[str, int | float | bool]:
        async with self._lock:
            return {**self.classifier.stats(), "accept_threshold": self.accept_threshold}

    async def flush(self) -> int:
        """持久化订阅源和新增的评价记录，返回写入的评价数量."""
        if self._session_factory is None:
            return 0

        # 同一时间只有一次保存，快照、写入和计数更新不可交错
        async with self._flush_lock:
            async with self._lock:
                feeds = self.registry.feeds()
                judged = self.queue.judged
                end = len(judged)
                pending = list(judged[self._flushed_count : end])

            async with self._session_factory() as session:
                store = FeedStore(session)
                await store.save_feeds(feeds)
                saved = await store.save_judged(pending)

            self._flushed_count = end

        logger.info(f"已保存 {len(feeds)} 个订阅源, {saved} 条新评价")
        return saved

    async def retrain(self) -> NaiveBayesClassifier:
        """保存当前评价后，用全部已评价文章重新训练分类器."""
        if self._session_factory is None:
            async with self._lock:
                samples = [
                    TrainingSample.from_entry(judged.entry, judged.liked)
                    for judged in self.queue.judged
                ]
        else:
            await self.flush()
            async with self._session_factory() as session:
                samples = await FeedStore(session).load_training_samples()

        classifier = NaiveBayesClassifier.from_samples(
            samples,
            alpha=self.classifier.alpha,
            min_training_size=self.classifier.min_training_size,
        )
        async with self._lock:
            self.classifier = classifier
        return classifier


# 全局阅读器实例
_reader: Reader | None = None


def get_reader() -> Reader:
    """获取阅读器实例（用于依赖注入）."""
    if _reader is None:
        msg = "阅读器未初始化"
        raise RuntimeError(msg)
    return _reader


def set_reader(reader: Reader | None) -> None:
    """设置阅读器实例."""
    global _reader
    _reader = reader
