"""待评价队列与评价记录."""

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from feedsift.models.entry import Entry, JudgedEntry

if TYPE_CHECKING:
    from feedsift.core.classifier import NaiveBayesClassifier

logger = logging.getLogger(__name__)


class EmptyQueueError(Exception):
    """待评价队列为空."""


@dataclass(frozen=True)
class ScoredEntry:
    """通过过滤的文章及其分数."""

    entry: Entry
    score: float


def entry_key(entry: Entry) -> str:
    """
    文章的结构键.

    与持久化时相同的归一化方式（文本小写，仅取第一个链接），
    内容有任何变化都会得到不同的键。
    """
    payload = [
        entry.title.lower(),
        entry.summary.lower(),
        entry.content.lower(),
        [author.lower() for author in entry.authors],
        [category.lower() for category in entry.categories],
        entry.link.lower(),
    ]
    raw = json.dumps(payload, ensure_ascii=False)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


class ReviewQueue:
    """
    待评价队列.

    同步时追加到队尾，展示和评价都从队尾取（最新的先看）。
    """

    def __init__(self, known_keys: Iterable[str] = ()) -> None:
        self._pending: list[Entry] = []
        self._judged: list[JudgedEntry] = []
        self._discarded: list[Entry] = []
        # 本次运行中进入过队列的全部文章
        self._seen: set[Entry] = set()
        # 已持久化的评价记录的结构键
        self._known_keys: set[str] = set(known_keys)

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending(self) -> Sequence[Entry]:
        return tuple(self._pending)

    @property
    def judged(self) -> Sequence[JudgedEntry]:
        return tuple(self._judged)

    @property
    def discarded(self) -> Sequence[Entry]:
        return tuple(self._discarded)

    def remember_keys(self, keys: Iterable[str]) -> None:
        """登记已持久化评价记录的结构键，重启后不再重复入队."""
        self._known_keys.update(keys)

    def is_seen(self, entry: Entry) -> bool:
        """文章是否已在队列中、已评价或已被过滤."""
        return entry in self._seen or entry_key(entry) in self._known_keys

    def extend_unseen(self, entries: Iterable[Entry]) -> int:
        """按顺序追加未出现过的文章，返回新增数量."""
        added = 0
        for entry in entries:
            if self.is_seen(entry):
                continue
            self._pending.append(entry)
            self._seen.add(entry)
            added += 1
        return added

    def next(self) -> Entry | None:
        """查看队尾文章（不出队）."""
        return self._pending[-1] if self._pending else None

    def decide(self, liked: bool) -> JudgedEntry:
        """
        评价队尾文章并记录.

        Raises:
            EmptyQueueError: 队列为空
        """
        if not self._pending:
            msg = "没有待评价的文章"
            raise EmptyQueueError(msg)

        entry = self._pending.pop()
        judged = JudgedEntry(entry=entry, liked=liked)
        self._judged.append(judged)
        logger.info(f"评价文章: {entry.title or entry.id} -> {'喜欢' if liked else '不喜欢'}")
        return judged

    def discard(self) -> Entry:
        """丢弃队尾文章，不记录评价."""
        if not self._pending:
            msg = "没有待丢弃的文章"
            raise EmptyQueueError(msg)

        entry = self._pending.pop()
        self._discarded.append(entry)
        return entry

    def next_scored(
        self,
        classifier: "NaiveBayesClassifier",
        threshold: float = 0.5,
    ) -> ScoredEntry | None:
        """丢弃低分文章，返回第一篇通过过滤的队尾文章及其分数."""
        while self._pending:
            entry = self._pending[-1]
            score = classifier.classify(entry)
            if score >= threshold:
                return ScoredEntry(entry=entry, score=score)
            self.discard()
            logger.debug(f"过滤文章: {entry.title or entry.id} (score={score:.3f})")
        return None

    def next_accepted(
        self,
        classifier: "NaiveBayesClassifier",
        threshold: float = 0.5,
    ) -> Entry | None:
        """丢弃低分文章，返回第一篇通过过滤的队尾文章."""
        scored = self.next_scored(classifier, threshold)
        return scored.entry if scored else None

    def stats(self) -> dict[str, int]:
        """队列统计."""
        liked = sum(1 for judged in self._judged if judged.liked)
        return {
            "pending": len(self._pending),
            "judged": len(self._judged),
            "liked": liked,
            "disliked": len(self._judged) - liked,
            "discarded": len(self._discarded),
        }
