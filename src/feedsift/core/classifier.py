"""朴素贝叶斯文章过滤器."""

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from feedsift.models.entry import Entry

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[a-z0-9']+")
EPSILON = 1e-9
ACCEPT_SCORE = 1.0


def entry_text(entry: Entry) -> str:
    """拼接文章的全部文本字段（小写）."""
    return " ".join(
        [
            entry.title,
            entry.summary,
            entry.content,
            " ".join(entry.authors),
            " ".join(entry.categories),
            entry.link,
        ]
    ).lower()


@dataclass(frozen=True)
class TrainingSample:
    """一条训练样本."""

    text: str
    liked: bool

    @classmethod
    def from_entry(cls, entry: Entry, liked: bool) -> "TrainingSample":
        return cls(text=entry_text(entry), liked=liked)


class NaiveBayesClassifier:
    """
    基于词频的朴素贝叶斯分类器.

    训练集不足 min_training_size 时处于未就绪状态，所有文章都放行。
    """

    def __init__(self, alpha: float = 1.0, min_training_size: int = 100) -> None:
        if alpha <= 0:
            msg = f"平滑系数必须大于 0: {alpha}"
            raise ValueError(msg)
        self.alpha = alpha
        self.min_training_size = min_training_size
        self.tokens: set[str] = set()
        self.token_liked_counts: dict[str, int] = {}
        self.token_disliked_counts: dict[str, int] = {}
        self.liked_entries_count = 0
        self.disliked_entries_count = 0
        self.is_prepared = False

    @classmethod
    def from_samples(
        cls,
        samples: Iterable[TrainingSample],
        alpha: float = 1.0,
        min_training_size: int = 100,
    ) -> "NaiveBayesClassifier":
        """创建并训练分类器."""
        classifier = cls(alpha=alpha, min_training_size=min_training_size)
        classifier.train(samples)
        return classifier

    @staticmethod
    def tokenize(text: str) -> set[str]:
        """提取去重后的小写词元."""
        return set(TOKEN_PATTERN.findall(text.lower()))

    def train(self, samples: Iterable[TrainingSample]) -> None:
        """重置并用完整训练集训练."""
        samples = list(samples)

        self.tokens = set()
        self.token_liked_counts = {}
        self.token_disliked_counts = {}
        self.liked_entries_count = 0
        self.disliked_entries_count = 0

        for sample in samples:
            if sample.liked:
                self.liked_entries_count += 1
            else:
                self.disliked_entries_count += 1

            for token in self.tokenize(sample.text):
                self.tokens.add(token)
                # 两张计数表的键集合始终与词表一致
                self.token_liked_counts.setdefault(token, 0)
                self.token_disliked_counts.setdefault(token, 0)
                if sample.liked:
                    self.token_liked_counts[token] += 1
                else:
                    self.token_disliked_counts[token] += 1

        self.is_prepared = len(samples) > self.min_training_size
        logger.info(
            f"分类器训练完成: 样本={len(samples)}, 词表={len(self.tokens)}, "
            f"喜欢={self.liked_entries_count}, 不喜欢={self.disliked_entries_count}, "
            f"就绪={self.is_prepared}"
        )

    def classify(self, entry: Entry) -> float:
        """返回文章被喜欢的概率，未就绪时恒为 1.0."""
        if not self.is_prepared:
            return ACCEPT_SCORE

        message_tokens = self.tokenize(entry_text(entry))
        prob_if_disliked, prob_if_liked = self._probabilities_of_message(message_tokens)

        total = prob_if_liked + prob_if_disliked
        if total == 0 or math.isnan(total):
            # 词表过大时两者都下溢为 0
            return ACCEPT_SCORE
        return prob_if_liked / total

    def is_acceptable(self, entry: Entry, threshold: float = 0.5) -> bool:
        """判断文章是否值得展示."""
        return self.classify(entry) >= threshold

    def _probabilities_of_message(self, message_tokens: set[str]) -> tuple[float, float]:
        """遍历整个词表，累计两个类别下的对数概率."""
        log_prob_if_disliked = 0.0
        log_prob_if_liked = 0.0

        for token in self.tokens:
            prob_if_disliked, prob_if_liked = self._probabilities_of_token(token)

            prob_if_disliked = min(max(prob_if_disliked, EPSILON), 1 - EPSILON)
            prob_if_liked = min(max(prob_if_liked, EPSILON), 1 - EPSILON)

            if token in message_tokens:
                log_prob_if_disliked += math.log(prob_if_disliked)
                log_prob_if_liked += math.log(prob_if_liked)
            else:
                log_prob_if_disliked += math.log(1 - prob_if_disliked)
                log_prob_if_liked += math.log(1 - prob_if_liked)

        return math.exp(log_prob_if_disliked), math.exp(log_prob_if_liked)

    def _probabilities_of_token(self, token: str) -> tuple[float, float]:
        """单个词元在两个类别下的出现概率."""
        # 两个分母都使用喜欢总数
        denominator = self.liked_entries_count + 2 * self.alpha
        prob_disliked = (self.token_disliked_counts[token] + self.alpha) / denominator
        prob_liked = (self.token_liked_counts[token] + self.alpha) / denominator
        return prob_disliked, prob_liked

    def stats(self) -> dict[str, int | float | bool]:
        """分类器状态摘要."""
        return {
            "alpha": self.alpha,
            "is_prepared": self.is_prepared,
            "vocabulary_size": len(self.tokens),
            "liked_entries": self.liked_entries_count,
            "disliked_entries": self.disliked_entries_count,
            "min_training_size": self.min_training_size,
        }
