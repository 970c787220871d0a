"""Feed / Entry 领域模型."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Entry(BaseModel):
    """订阅源中的一篇文章（抓取后不可变）."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    title: str = ""
    summary: str = ""
    content: str = ""
    authors: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    links: tuple[str, ...] = ()  # 第一个为原文链接
    language: str | None = None
    published: datetime | None = None

    @property
    def link(self) -> str:
        """原文链接."""
        return self.links[0] if self.links else ""


class Feed(BaseModel):
    """订阅源及其最近一次抓取的快照."""

    model_config = ConfigDict(frozen=True)

    url: str
    id: str = ""
    title: str = ""
    language: str | None = None
    entries: tuple[Entry, ...] = ()

    @property
    def is_placeholder(self) -> bool:
        """是否仅为注册占位（尚未抓取）."""
        return not self.id and not self.title and not self.entries


class JudgedEntry(BaseModel):
    """读者对一篇文章的评价."""

    model_config = ConfigDict(frozen=True)

    entry: Entry
    liked: bool
