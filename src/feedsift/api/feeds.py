"""Feed 订阅源 API."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from feedsift.core.reader import Reader, get_reader
from feedsift.core.storage import StorageError
from feedsift.models.entry import Feed

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


class FeedCreate(BaseModel):
    """新增订阅源请求."""

    url: str


def _build_feed_response(feed: Feed) -> dict:
    """构建 Feed 响应数据."""
    return {
        "url": feed.url,
        "id": feed.id,
        "title": feed.title,
        "language": feed.language,
        "entries": len(feed.entries),
        "synced": not feed.is_placeholder,
    }


@router.get("")
async def list_feeds(reader: Reader = Depends(get_reader)) -> dict:
    """获取订阅列表."""
    feeds = await reader.feeds()
    return {
        "total": len(feeds),
        "items": [_build_feed_response(feed) for feed in feeds],
    }


@router.post("")
async def add_feed(
    body: FeedCreate,
    reader: Reader = Depends(get_reader),
) -> dict:
    """注册订阅源并立即同步."""
    try:
        report = await reader.add_feed(body.url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    feed = await reader.lookup(body.url)
    return {
        "feed": _build_feed_response(feed) if feed else None,
        "sync": report.to_dict(),
    }


@router.get("/lookup")
async def lookup_feed(
    url: str = Query(..., description="Feed URL"),
    reader: Reader = Depends(get_reader),
) -> dict:
    """获取 Feed 当前快照."""
    feed = await reader.lookup(url)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")
    return _build_feed_response(feed)


@router.delete("")
async def remove_feed(
    url: str = Query(..., description="Feed URL"),
    reader: Reader = Depends(get_reader),
) -> dict:
    """移除订阅源."""
    try:
        await reader.remove_feed(url)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"url": url, "removed": True}
