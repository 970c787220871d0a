"""订阅源抓取模块."""

from feedsift.fetcher.client import FeedFetcher
from feedsift.fetcher.parser import FetchError, parse_feed

__all__ = [
    "FeedFetcher",
    "FetchError",
    "parse_feed",
]
