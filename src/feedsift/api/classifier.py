"""分类器 API."""

from fastapi import APIRouter, Depends, HTTPException

from feedsift.core.reader import Reader, get_reader
from feedsift.core.storage import StorageError

router = APIRouter(prefix="/api/classifier", tags=["classifier"])


@router.get("")
async def get_classifier(reader: Reader = Depends(get_reader)) -> dict:
    """获取分类器状态."""
    return await reader.classifier_stats()


@router.post("/retrain")
async def retrain(reader: Reader = Depends(get_reader)) -> dict:
    """用全部已评价文章重新训练."""
    try:
        await reader.retrain()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return await reader.classifier_stats()
