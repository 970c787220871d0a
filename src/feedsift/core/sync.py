"""同步引擎 - 并发拉取全部订阅源并合并到待评价队列."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from feedsift.core.registry import FeedRegistry
from feedsift.core.review import ReviewQueue
from feedsift.fetcher.parser import FetchError
from feedsift.models.entry import Feed

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """抓取接口."""

    async def fetch(self, url: str) -> Feed: ...


@dataclass
class FeedSyncError:
    """单个订阅源的同步错误."""

    url: str
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class SyncReport:
    """一次同步的结果."""

    feeds_total: int = 0
    feeds_synced: int = 0
    entries_added: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    errors: list[FeedSyncError] = field(default_factory=list)

    @property
    def status(self) -> str:
        """success | partial | failed."""
        if not self.errors:
            return "success"
        if self.feeds_synced:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "feeds_total": self.feeds_total,
            "feeds_synced": self.feeds_synced,
            "entries_added": self.entries_added,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "errors": [
                {"url": e.url, "error": e.error, "failed_at": e.failed_at.isoformat()}
                for e in self.errors
            ],
        }


class SyncEngine:
    """同步引擎."""

    def __init__(
        self,
        fetcher: Fetcher,
        registry: FeedRegistry,
        queue: ReviewQueue,
    ) -> None:
        self.fetcher = fetcher
        self.registry = registry
        self.queue = queue

    async def fetch_all(self, urls: list[str]) -> list[Feed | FetchError]:
        """
        并发抓取所有订阅源.

        所有任务先全部启动再统一等待；单个失败不影响其它任务，
        结果顺序与 urls 一致。
        """

        async def fetch_one(url: str) -> Feed | FetchError:
            try:
                return await self.fetcher.fetch(url)
            except FetchError as e:
                return e

        return list(await asyncio.gather(*(fetch_one(url) for url in urls)))

    def merge(
        self,
        urls: list[str],
        results: list[Feed | FetchError],
        report: SyncReport,
    ) -> SyncReport:
        """按注册顺序合并抓取结果（须在全部抓取完成后调用）."""
        for url, result in zip(urls, results, strict=True):
            if isinstance(result, FetchError):
                # 失败的订阅源保留上一次的快照
                logger.warning(f"订阅源同步失败: {url} - {result.reason}")
                report.errors.append(FeedSyncError(url=url, error=result.reason))
                continue

            if not self.registry.replace(url, result):
                logger.info(f"订阅源在同步期间已移除，丢弃结果: {url}")
                continue

            report.entries_added += self.queue.extend_unseen(result.entries)
            report.feeds_synced += 1

        report.completed_at = datetime.now(UTC)
        logger.info(
            f"同步完成: 订阅源={report.feeds_synced}/{report.feeds_total}, "
            f"新增文章={report.entries_added}, 失败={len(report.errors)}"
        )
        return report

    async def sync_all(self) -> SyncReport:
        """拉取全部订阅源，合并新文章并替换快照."""
        urls = self.registry.urls()
        report = SyncReport(feeds_total=len(urls))
        logger.info(f"开始同步 {len(urls)} 个订阅源")

        results = await self.fetch_all(urls)
        return self.merge(urls, results, report)
