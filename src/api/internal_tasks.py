"""Internal tasks endpoints for Cloud Tasks callbacks.

Cloud Tasks에서 호출되는 지연 퍼지 핸들러입니다.
/internal/tasks/* 경로는 Cloud Run IAM + OIDC 토큰으로 보호됩니다.

퍼지 실패는 작업 로그에 기록되므로 200으로 응답합니다.
(5xx를 반환하면 Cloud Tasks가 재시도하여 같은 퍼지가 반복됨)
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from src.api.dependencies import get_purge_coordinator
from src.models.purge import OperationType

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/internal/tasks", tags=["tasks"])


class PurgePostTaskRequest(BaseModel):
    """지연 게시물 퍼지 요청."""

    item_id: str = Field(..., min_length=1)
    recipient: str | None = None


class PurgeMediaTaskRequest(BaseModel):
    """지연 미디어 퍼지 요청."""

    asset_ids: list[str] = Field(..., min_length=1)
    operation: OperationType = OperationType.MEDIA_PURGE_DELAYED
    recipient: str | None = None


@router.post("/purge-post")
async def purge_post_task(
    request: Request,
    body: PurgePostTaskRequest,
) -> dict[str, Any]:
    """지연 게시물 퍼지 태스크.

    저장 트리거가 예약한 작업으로, 사이즈 변형 생성 이후 실행됩니다.

    Args:
        request: FastAPI 요청 객체
        body: 게시물 ID를 포함한 요청 본문

    Returns:
        퍼지 결과
    """
    coordinator = get_purge_coordinator(request)
    try:
        outcome = coordinator.handle_post_task(body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    logger.info(
        "post_task_completed",
        item_id=body.item_id,
        status=outcome.status.value,
    )
    return {
        "status": outcome.status.value,
        "message": outcome.message,
        "item_id": body.item_id,
    }


@router.post("/purge-media")
async def purge_media_task(
    request: Request,
    body: PurgeMediaTaskRequest,
) -> dict[str, Any]:
    """지연 미디어 퍼지 태스크.

    Args:
        request: FastAPI 요청 객체
        body: 미디어 ID 목록을 포함한 요청 본문

    Returns:
        퍼지 결과
    """
    coordinator = get_purge_coordinator(request)
    try:
        outcome = coordinator.handle_media_task(body.model_dump(mode="json"))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    logger.info(
        "media_task_completed",
        asset_ids=body.asset_ids,
        status=outcome.status.value,
    )
    return {
        "status": outcome.status.value,
        "message": outcome.message,
        "asset_ids": body.asset_ids,
    }
