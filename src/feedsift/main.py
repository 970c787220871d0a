"""FeedSift 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedsift.api import classifier, feeds, review, sync
from feedsift.config import get_settings
from feedsift.core.reader import Reader, set_reader
from feedsift.fetcher import FeedFetcher
from feedsift.models.database import async_session_maker, close_db, init_db
from feedsift.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    # 启动时初始化
    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    fetcher = FeedFetcher(
        timeout=app_settings.fetch_timeout_seconds,
        user_agent=app_settings.user_agent,
    )
    reader = Reader.from_settings(app_settings, fetcher, async_session_maker())

    logger.info("正在加载订阅源和训练分类器...")
    await reader.load()
    for url in app_settings.initial_feeds:
        await reader.register(url)
    set_reader(reader)

    logger.info("正在启动定时任务...")
    create_scheduler(app_settings)

    logger.info("FeedSift 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    await shutdown_scheduler()
    try:
        await reader.flush()
    finally:
        set_reader(None)
        await fetcher.close()
        await close_db()
    logger.info("FeedSift 已关闭")


app = FastAPI(
    title="FeedSift",
    description="RSS 阅读队列 - 去重、评价与贝叶斯过滤",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(feeds.router)
app.include_router(sync.router)
app.include_router(review.router)
app.include_router(classifier.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedSift",
        "version": "0.1.0",
        "description": "RSS 阅读队列",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedsift.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
