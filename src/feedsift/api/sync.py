"""同步 API."""

from fastapi import APIRouter, Depends

from feedsift.core.reader import Reader, get_reader

router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.post("")
async def trigger_sync(reader: Reader = Depends(get_reader)) -> dict:
    """触发同步."""
    report = await reader.sync()
    return report.to_dict()
