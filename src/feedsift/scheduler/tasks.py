"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from feedsift.config import Settings
from feedsift.core.reader import get_reader

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def sync_task() -> None:
    """同步任务：拉取全部订阅源."""
    logger.info("开始同步任务...")
    try:
        report = await get_reader().sync()
        logger.info(
            f"同步任务完成: 状态={report.status}, 新增文章={report.entries_added}"
        )
    except Exception as e:
        logger.exception(f"同步任务失败: {e}")


async def flush_task() -> None:
    """保存任务：持久化订阅源和评价记录."""
    try:
        await get_reader().flush()
    except Exception as e:
        logger.exception(f"保存任务失败: {e}")


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        sync_task,
        "interval",
        minutes=settings.sync_interval_minutes,
        id="sync_task",
        name="订阅源同步",
        replace_existing=True,
    )

    _scheduler.add_job(
        flush_task,
        "interval",
        minutes=settings.flush_interval_minutes,
        id="flush_task",
        name="评价记录保存",
        replace_existing=True,
    )

    # 启动时立即执行一次同步
    _scheduler.add_job(
        sync_task,
        "date",  # 一次性任务
        id="sync_task_initial",
        name="初始同步",
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，同步间隔: {settings.sync_interval_minutes} 分钟, "
        f"保存间隔: {settings.flush_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
