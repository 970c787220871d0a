"""订阅源抓取客户端."""

import asyncio
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from feedsift.fetcher.parser import FetchError, parse_feed
from feedsift.models.entry import Feed


class FeedFetcher:
    """抓取并解析订阅源，支持 http(s) 和 file:// 地址."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "FeedSift/0.1.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch(self, url: str) -> Feed:
        """
        抓取订阅源并返回快照.

        Raises:
            FetchError: 网络错误、HTTP 错误或解析失败
        """
        parsed_url = urlparse(url)
        if parsed_url.scheme == "file":
            raw = await self._read_file(url, Path(unquote(parsed_url.path)))
        else:
            raw = await self._download(url)
        return parse_feed(url, raw)

    async def _download(self, url: str) -> bytes:
        """下载订阅源原文."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        return response.content

    async def _read_file(self, url: str, path: Path) -> bytes:
        """读取本地订阅源文件."""
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FetchError(url, str(e)) from e
