"""测试 Reader 协调者."""

import asyncio

import pytest

from feedsift.core.reader import Reader, get_reader, set_reader
from feedsift.core.review import EmptyQueueError
from feedsift.core.storage import FeedStore

A = "https://a.example/feed"
B = "https://b.example/feed"


class StubClassifier:
    """按标题返回预设分数."""

    def __init__(self, scores: dict[str, float]) -> None:
        self.scores = scores

    def classify(self, entry) -> float:
        return self.scores.get(entry.title, 1.0)


class TestInMemory:
    """测试不带存储的阅读器."""

    async def test_add_feed_syncs_immediately(self, fetcher, make_entry) -> None:
        """添加订阅源后立即同步."""
        fetcher.set_feed(A, make_entry("x"), make_entry("y"), title="Feed A")
        reader = Reader(fetcher)

        report = await reader.add_feed(A)

        assert report.status == "success"
        assert report.entries_added == 2
        feed = await reader.lookup(A)
        assert feed is not None
        assert feed.title == "Feed A"

    async def test_invalid_url_rejected(self, fetcher) -> None:
        """不支持的 URL 被拒绝且不注册."""
        reader = Reader(fetcher)
        for url in ["ftp://a.example/feed", "not a url", ""]:
            with pytest.raises(ValueError):
                await reader.register(url)
        assert await reader.feeds() == []

    async def test_decide_returns_next(self, fetcher, make_entry) -> None:
        """评价后返回下一篇."""
        x, y = make_entry("x"), make_entry("y")
        fetcher.set_feed(A, x, y)
        reader = Reader(fetcher)
        await reader.add_feed(A)

        assert await reader.next_entry() == y
        judged, upcoming = await reader.decide(True)

        assert judged.entry == y
        assert judged.liked is True
        assert upcoming is not None
        assert upcoming.entry == x
        assert upcoming.score == 1.0

    async def test_decide_on_empty_queue_raises(self, fetcher) -> None:
        """空队列评价抛出 EmptyQueueError."""
        reader = Reader(fetcher)
        with pytest.raises(EmptyQueueError):
            await reader.decide(False)

    async def test_next_entry_filters_low_scores(self, fetcher, make_entry) -> None:
        """低于阈值的文章被丢弃."""
        x, spam = make_entry("x"), make_entry("spam")
        fetcher.set_feed(A, x, spam)
        reader = Reader(fetcher, accept_threshold=0.5)
        await reader.add_feed(A)
        reader.classifier = StubClassifier({"spam": 0.2})  # type: ignore[assignment]

        assert await reader.next_entry() == x
        stats = await reader.stats()
        assert stats["discarded"] == 1
        assert stats["pending"] == 1
        assert stats["judged"] == 0

    async def test_next_scored_uses_current_classifier(self, fetcher, make_entry) -> None:
        """返回的分数与选出文章时使用的分类器一致."""
        fetcher.set_feed(A, make_entry("x"))
        reader = Reader(fetcher)
        await reader.add_feed(A)
        reader.classifier = StubClassifier({"x": 0.75})  # type: ignore[assignment]

        scored = await reader.next_scored()

        assert scored is not None
        assert scored.score == 0.75

    async def test_unprepared_classifier_accepts_everything(self, fetcher, make_entry) -> None:
        """分类器未就绪时所有文章都放行."""
        fetcher.set_feed(A, make_entry("x"))
        reader = Reader(fetcher, accept_threshold=0.99)
        await reader.add_feed(A)

        entry = await reader.next_entry()

        assert entry is not None
        assert await reader.score(entry) == 1.0

    async def test_retrain_from_session_judgements(self, fetcher, make_entry) -> None:
        """无存储时用本次评价重新训练."""
        fetcher.set_feed(A, make_entry("x"), make_entry("y"))
        reader = Reader(fetcher, min_training_size=1)
        await reader.add_feed(A)
        await reader.decide(True)
        await reader.decide(False)

        classifier = await reader.retrain()

        assert classifier.liked_entries_count == 1
        assert classifier.disliked_entries_count == 1
        assert classifier.is_prepared is True
        assert reader.classifier is classifier

    async def test_remove_feed(self, fetcher) -> None:
        """移除订阅源."""
        reader = Reader(fetcher)
        await reader.register(A)
        await reader.register(B)

        await reader.remove_feed(A)

        assert [f.url for f in await reader.feeds()] == [B]

    async def test_flush_without_storage_is_noop(self, fetcher) -> None:
        """无存储时持久化无操作."""
        assert await Reader(fetcher).flush() == 0


class TestWithStorage:
    """测试带存储的阅读器."""

    async def test_flush_is_incremental(self, fetcher, session_factory, make_entry) -> None:
        """重复持久化只写入新评价."""
        fetcher.set_feed(A, make_entry("x"), make_entry("y"))
        reader = Reader(fetcher, session_factory)
        await reader.add_feed(A)
        await reader.decide(True)

        assert await reader.flush() == 1
        assert await reader.flush() == 0

        await reader.decide(False)
        assert await reader.flush() == 1

    async def test_overlapping_flushes_store_every_judgement(
        self, fetcher, session_factory, make_entry
    ) -> None:
        """并发保存不会重复计数，之后的评价仍会写入."""
        fetcher.set_feed(A, *(make_entry(f"e{i}") for i in range(6)))
        reader = Reader(fetcher, session_factory)
        await reader.add_feed(A)
        for _ in range(3):
            await reader.decide(True)

        async def delayed_flush() -> int:
            await asyncio.sleep(0.01)
            return await reader.flush()

        results = await asyncio.gather(reader.flush(), delayed_flush(), reader.flush())
        assert sum(results) == 3

        for _ in range(3):
            await reader.decide(False)
        assert await reader.flush() == 3

        async with session_factory() as session:
            samples = await FeedStore(session).load_training_samples()
        assert len(samples) == 6

    async def test_restart_restores_state(self, fetcher, session_factory, make_entry) -> None:
        """重启后恢复订阅源，已评价的文章不再入队."""
        fetcher.set_feed(A, make_entry("x"), make_entry("y"))
        first = Reader(fetcher, session_factory)
        await first.add_feed(A)
        await first.decide(True)
        await first.flush()

        second = Reader(fetcher, session_factory)
        await second.load()

        assert [f.url for f in await second.feeds()] == [A]
        assert second.classifier.liked_entries_count == 1

        report = await second.sync()

        assert report.entries_added == 1
        assert [e.title for e in second.queue.pending] == ["x"]

    async def test_edited_entry_after_restart_is_requeued(
        self, fetcher, session_factory, make_entry
    ) -> None:
        """重启后，上游修改过正文的已评价文章作为新文章入队."""
        fetcher.set_feed(A, make_entry("x", content="v1"))
        first = Reader(fetcher, session_factory)
        await first.add_feed(A)
        await first.decide(True)
        await first.flush()

        updated = make_entry("x", content="v2 edited body")
        fetcher.set_feed(A, updated)
        second = Reader(fetcher, session_factory)
        await second.load()
        report = await second.sync()

        assert report.entries_added == 1
        assert list(second.queue.pending) == [updated]

    async def test_removed_feed_not_restored(self, fetcher, session_factory, make_entry) -> None:
        """移除的订阅源重启后不再出现."""
        fetcher.set_feed(A, make_entry("x"))
        fetcher.set_feed(B, make_entry("y"))
        first = Reader(fetcher, session_factory)
        await first.add_feed(A)
        await first.add_feed(B)
        await first.flush()

        await first.remove_feed(A)

        second = Reader(fetcher, session_factory)
        await second.load()
        assert [f.url for f in await second.feeds()] == [B]

    async def test_retrain_uses_all_stored_judgements(
        self, fetcher, session_factory, make_entry
    ) -> None:
        """重新训练包含历史评价."""
        fetcher.set_feed(A, make_entry("x"), make_entry("y"), make_entry("z"))
        first = Reader(fetcher, session_factory)
        await first.add_feed(A)
        await first.decide(True)
        await first.decide(False)
        await first.flush()

        second = Reader(fetcher, session_factory, min_training_size=2)
        await second.load()
        await second.sync()
        await second.decide(True)

        classifier = await second.retrain()

        assert classifier.liked_entries_count == 2
        assert classifier.disliked_entries_count == 1
        assert classifier.is_prepared is True


class TestGlobalReader:
    """测试全局实例."""

    def test_unset_reader_raises(self) -> None:
        """未初始化时获取实例抛出异常."""
        set_reader(None)
        with pytest.raises(RuntimeError):
            get_reader()

    def test_set_and_get(self, fetcher) -> None:
        """设置后可获取同一实例."""
        reader = Reader(fetcher)
        set_reader(reader)
        try:
            assert get_reader() is reader
        finally:
            set_reader(None)
