"""评价 API."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from feedsift.core.reader import Reader, get_reader
from feedsift.core.review import EmptyQueueError, ScoredEntry
from feedsift.models.entry import Entry
from feedsift.utils.html_parser import estimate_reading_time, html_to_text

router = APIRouter(prefix="/api/review", tags=["review"])


class Decision(BaseModel):
    """评价请求."""

    liked: bool


def _build_entry_response(entry: Entry, score: float) -> dict:
    """构建文章响应数据."""
    text = html_to_text(entry.content or entry.summary)
    return {
        "id": entry.id,
        "title": entry.title,
        "summary": entry.summary,
        "content": entry.content,
        "content_text": text,
        "authors": list(entry.authors),
        "categories": list(entry.categories),
        "url": entry.link or None,
        "language": entry.language,
        "published_at": entry.published.isoformat() if entry.published else None,
        "reading_time": estimate_reading_time(text),
        "score": round(score, 4),
    }


def _scored_response(scored: ScoredEntry | None) -> dict | None:
    if scored is None:
        return None
    return _build_entry_response(scored.entry, scored.score)


@router.get("/next")
async def next_entry(reader: Reader = Depends(get_reader)) -> dict:
    """获取下一篇待评价文章（已过滤低分文章）."""
    scored = await reader.next_scored()
    return {"entry": _scored_response(scored)}


@router.post("/decide")
async def decide(
    body: Decision,
    reader: Reader = Depends(get_reader),
) -> dict:
    """评价当前文章并返回下一篇."""
    try:
        judged, upcoming = await reader.decide(body.liked)
    except EmptyQueueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return {
        "judged": {"id": judged.entry.id, "title": judged.entry.title, "liked": judged.liked},
        "next": _scored_response(upcoming),
    }


@router.get("/stats")
async def stats(reader: Reader = Depends(get_reader)) -> dict:
    """获取队列统计."""
    return await reader.stats()
