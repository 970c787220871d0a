"""FeedRecord 订阅源持久化模型."""

from sqlmodel import Field, SQLModel


class FeedRecord(SQLModel, table=True):
    """已注册的订阅源（内容快照不落库，重启后重新同步）."""

    __tablename__ = "feeds"  # type: ignore[assignment]

    id: str = Field(primary_key=True, description="Feed 标识，无标识时使用 URL")
    url: str = Field(index=True, description="Feed URL")
