"""应用配置管理."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 应用配置
    database_url: str = "sqlite+aiosqlite:///./feedsift.db"
    initial_feeds: list[str] = Field(default_factory=list)

    # 定时任务
    sync_interval_minutes: int = 30
    flush_interval_minutes: int = 5

    # 抓取配置
    fetch_timeout_seconds: int = 30
    user_agent: str = "FeedSift/0.1.0 (RSS review queue)"

    # 分类器配置
    classifier_alpha: float = Field(default=1.0, gt=0)
    classifier_min_training_size: int = Field(default=100, ge=0)
    accept_threshold: float = Field(default=0.5, ge=0, le=1)


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
