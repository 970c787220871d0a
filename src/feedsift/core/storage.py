"""持久化 - 订阅源与已评价文章的读写."""

import hashlib
import json
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from feedsift.core.classifier import TrainingSample, entry_text
from feedsift.core.review import entry_key
from feedsift.models.entry import Entry, Feed, JudgedEntry
from feedsift.models.feed import FeedRecord
from feedsift.models.judged import JudgedEntryRecord

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """持久化读写失败."""


class MissingLabelError(StorageError):
    """已评价记录缺少评价标签."""


def judged_entry_id(entry: Entry) -> str:
    """已评价记录主键：文章 ID，缺失时依次使用原文链接和内容摘要."""
    if entry.id:
        return entry.id.lower()
    if entry.link:
        return entry.link.lower()
    return hashlib.sha1(entry_text(entry).encode("utf-8")).hexdigest()


def to_record(judged: JudgedEntry) -> JudgedEntryRecord:
    """转换为持久化记录，文本统一小写."""
    entry = judged.entry
    return JudgedEntryRecord(
        id=judged_entry_id(entry),
        title=entry.title.lower(),
        authors=json.dumps([a.lower() for a in entry.authors], ensure_ascii=False),
        content=entry.content.lower(),
        links=json.dumps(entry.link.lower(), ensure_ascii=False),
        summary=entry.summary.lower(),
        categories=json.dumps([c.lower() for c in entry.categories], ensure_ascii=False),
        language=(entry.language or "").lower(),
        is_liked=judged.liked,
    )


def to_entry(record: JudgedEntryRecord) -> Entry:
    """从持久化记录还原（小写的）文章."""
    link = _load_str(record.links)
    return Entry(
        id=record.id,
        title=record.title or "",
        summary=record.summary or "",
        content=record.content or "",
        authors=tuple(_load_list(record.authors)),
        categories=tuple(_load_list(record.categories)),
        links=(link,) if link else (),
        language=record.language or None,
    )


def to_training_sample(record: JudgedEntryRecord) -> TrainingSample:
    """
    从持久化记录构造训练样本.

    Raises:
        MissingLabelError: 记录没有 is_liked
    """
    if record.is_liked is None:
        msg = f"已评价记录缺少 is_liked: {record.id}"
        raise MissingLabelError(msg)

    return TrainingSample.from_entry(to_entry(record), bool(record.is_liked))


def _load_list(raw: str | None) -> list[str]:
    """解析 JSON 数组列，兼容非 JSON 的旧数据."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return [raw]
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]


def _load_str(raw: str | None) -> str:
    """解析 JSON 字符串列."""
    return " ".join(_load_list(raw))


class FeedStore:
    """订阅源与已评价文章存储."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _upsert(self, model: type[SQLModel], values: dict[str, Any]) -> None:
        """按主键插入或覆盖（INSERT ... ON CONFLICT DO UPDATE）."""
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )
        await self.session.execute(stmt)

    async def save_feeds(self, feeds: Iterable[Feed]) -> int:
        """保存订阅源（按主键覆盖），返回写入数量."""
        count = 0
        used_ids: set[str] = set()
        try:
            for feed in feeds:
                record_id = feed.id or feed.url
                if record_id in used_ids:
                    # 多个 URL 提供同一个 Feed 标识（如 http 与 https），后者以 URL 为主键
                    logger.warning(f"Feed 标识重复，改用 URL 保存: {feed.url}")
                    record_id = feed.url
                used_ids.add(record_id)

                # 同一 URL 只保留一行
                await self.session.execute(
                    delete(FeedRecord).where(
                        FeedRecord.url == feed.url,  # type: ignore[arg-type]
                        FeedRecord.id != record_id,  # type: ignore[arg-type]
                    )
                )
                await self._upsert(FeedRecord, {"id": record_id, "url": feed.url})
                count += 1
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            msg = f"保存订阅源失败: {e}"
            raise StorageError(msg) from e
        return count

    async def load_feed_urls(self) -> list[str]:
        """读取全部已注册订阅源 URL."""
        try:
            result = await self.session.execute(select(FeedRecord))
            records = result.scalars().all()
        except SQLAlchemyError as e:
            msg = f"读取订阅源失败: {e}"
            raise StorageError(msg) from e
        return list(dict.fromkeys(record.url for record in records))

    async def purge_feed(self, url: str) -> None:
        """删除订阅源记录."""
        try:
            await self.session.execute(
                delete(FeedRecord).where(FeedRecord.url == url)  # type: ignore[arg-type]
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            msg = f"删除订阅源失败: {url} - {e}"
            raise StorageError(msg) from e

    async def save_judged(self, judged: Iterable[JudgedEntry]) -> int:
        """保存已评价文章（按主键覆盖，后写入者生效），返回写入数量."""
        count = 0
        try:
            for item in judged:
                await self._upsert(JudgedEntryRecord, to_record(item).model_dump())
                count += 1
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            msg = f"保存已评价文章失败: {e}"
            raise StorageError(msg) from e
        return count

    async def _load_judged_records(self) -> list[JudgedEntryRecord]:
        try:
            result = await self.session.execute(select(JudgedEntryRecord))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            msg = f"读取已评价文章失败: {e}"
            raise StorageError(msg) from e

    async def load_judged_keys(self) -> set[str]:
        """读取全部已评价文章的结构键."""
        records = await self._load_judged_records()
        return {entry_key(to_entry(record)) for record in records}

    async def load_training_samples(self) -> list[TrainingSample]:
        """读取全部已评价文章作为训练集."""
        records = await self._load_judged_records()
        return [to_training_sample(record) for record in records]
