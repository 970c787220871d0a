"""数据模型."""

from feedsift.models.database import close_db, init_db
from feedsift.models.entry import Entry, Feed, JudgedEntry
from feedsift.models.feed import FeedRecord
from feedsift.models.judged import JudgedEntryRecord

__all__ = [
    "Entry",
    "Feed",
    "FeedRecord",
    "JudgedEntry",
    "JudgedEntryRecord",
    "close_db",
    "init_db",
]
