"""核心业务逻辑."""

from feedsift.core.classifier import NaiveBayesClassifier, TrainingSample
from feedsift.core.reader import Reader, get_reader, set_reader
from feedsift.core.registry import FeedRegistry
from feedsift.core.review import EmptyQueueError, ReviewQueue, ScoredEntry
from feedsift.core.storage import FeedStore, MissingLabelError, StorageError
from feedsift.core.sync import SyncEngine, SyncReport

__all__ = [
    "EmptyQueueError",
    "FeedRegistry",
    "FeedStore",
    "MissingLabelError",
    "NaiveBayesClassifier",
    "Reader",
    "ReviewQueue",
    "ScoredEntry",
    "StorageError",
    "SyncEngine",
    "SyncReport",
    "TrainingSample",
    "get_reader",
    "set_reader",
]
