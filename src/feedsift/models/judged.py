"""JudgedEntryRecord 已评价文章模型."""

from sqlmodel import Field, SQLModel


class JudgedEntryRecord(SQLModel, table=True):
    """已评价文章，分类器的训练集.

    所有文本列在写入前统一转为小写。
    """

    __tablename__ = "judged_entries"  # type: ignore[assignment]

    id: str = Field(primary_key=True, description="文章 ID（小写）")
    title: str | None = Field(default=None, description="标题")
    authors: str | None = Field(default=None, description="作者 (JSON 数组)")
    content: str | None = Field(default=None, description="正文")
    links: str | None = Field(default=None, description="原文链接 (JSON 字符串)")
    summary: str | None = Field(default=None, description="摘要")
    categories: str | None = Field(default=None, description="分类 (JSON 数组)")
    language: str | None = Field(default=None, description="语言")
    is_liked: bool | None = Field(default=None, description="是否喜欢")
