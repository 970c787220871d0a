"""HTML 解析工具."""

import re

from bs4 import BeautifulSoup


def html_to_text(html: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html: HTML 内容

    Returns:
        提取的纯文本内容
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")

    for element in soup(["script", "style"]):
        element.decompose()

    lines = [line.strip() for line in soup.get_text(separator="\n").split("\n")]
    text = "\n".join(line for line in lines if line)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def estimate_reading_time(text: str, wpm: int = 200) -> int:
    """估算阅读时间（分钟），最小 1."""
    # 中文按字符计数，其余按单词计数
    chinese_chars = len(re.findall(r"[\u4e00-\u9fff]", text))
    words = len(re.sub(r"[\u4e00-\u9fff]", " ", text).split())
    return max(1, round((chinese_chars + words) / wpm))
