"""订阅源注册表."""

import logging

from feedsift.models.entry import Feed

logger = logging.getLogger(__name__)


class FeedRegistry:
    """已注册订阅源，以 URL 为唯一键，保持注册顺序."""

    def __init__(self) -> None:
        self._feeds: dict[str, Feed] = {}

    def __len__(self) -> int:
        return len(self._feeds)

    def __contains__(self, url: object) -> bool:
        return url in self._feeds

    def register(self, url: str) -> Feed:
        """注册订阅源（不抓取），重复注册返回已有快照."""
        existing = self._feeds.get(url)
        if existing is not None:
            return existing

        feed = Feed(url=url)
        self._feeds[url] = feed
        logger.info(f"注册订阅源: {url}")
        return feed

    def remove(self, url: str) -> None:
        """移除订阅源，未注册时无操作."""
        if self._feeds.pop(url, None) is not None:
            logger.info(f"移除订阅源: {url}")

    def lookup(self, url: str) -> Feed | None:
        """获取订阅源当前快照."""
        return self._feeds.get(url)

    def replace(self, url: str, feed: Feed) -> bool:
        """用新快照替换，仅当 URL 仍在注册表中时生效."""
        if url not in self._feeds:
            return False
        self._feeds[url] = feed
        return True

    def urls(self) -> list[str]:
        """按注册顺序返回所有 URL."""
        return list(self._feeds)

    def feeds(self) -> list[Feed]:
        """按注册顺序返回所有快照."""
        return list(self._feeds.values())
