"""定时任务."""

from feedsift.scheduler.tasks import create_scheduler, shutdown_scheduler

__all__ = [
    "create_scheduler",
    "shutdown_scheduler",
]
