"""CMS hook endpoints (content-change triggers).

CMS에서 호출하는 변경 이벤트 수신 엔드포인트입니다.
각 엔드포인트는 훅 페이로드를 코디네이터 호출 하나로 변환하는 얇은 어댑터이며,
퍼지 결과와 관계없이 항상 202를 반환해 CMS 저장 작업을 막지 않습니다.
"""

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from src.api.dependencies import get_purge_coordinator
from src.models.media_asset import MediaMetadata
from src.models.signals import MediaReplaceSignal, SignalVariant
from src.services.purge_coordinator import PurgeCoordinator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/hooks", tags=["hooks"])


class ContentSavedEvent(BaseModel):
    """게시물 저장 이벤트."""

    item_id: str = Field(..., min_length=1)
    is_autosave: bool = False
    is_revision: bool = False
    recipient: str | None = None


class MediaReplacedEvent(BaseModel):
    """미디어 교체 이벤트 (교체 플러그인 훅)."""

    old_id: str = Field(..., min_length=1)
    new_id: str | None = None
    recipient: str | None = None


class MediaMetadataUpdatedEvent(BaseModel):
    """첨부 메타데이터 갱신 이벤트."""

    asset_id: str = Field(..., min_length=1)
    new_metadata: MediaMetadata | None = None
    old_metadata: MediaMetadata | None = None
    recipient: str | None = None


class AttachedFileChangedEvent(BaseModel):
    """첨부 파일 경로 메타 변경 이벤트."""

    asset_id: str = Field(..., min_length=1)
    new_path: str
    recipient: str | None = None


def _trigger(
    request: Request,
    action: Callable[[PurgeCoordinator], None],
    **context: Any,
) -> dict[str, Any]:
    """코디네이터 호출. 생성 단계 실패도 훅 응답에는 영향을 주지 않음."""
    try:
        action(get_purge_coordinator(request))
    except Exception as e:
        logger.error("hook_trigger_failed", error=str(e), **context)
    return {"status": "accepted", **context}


@router.post("/content-saved", status_code=202)
async def content_saved(request: Request, body: ContentSavedEvent) -> dict[str, Any]:
    """게시물 저장 훅."""
    return _trigger(
        request,
        lambda coordinator: coordinator.on_content_saved(
            body.item_id,
            is_autosave=body.is_autosave,
            is_revision=body.is_revision,
            recipient=body.recipient,
        ),
        item_id=body.item_id,
    )


@router.post("/media-replaced", status_code=202)
async def media_replaced(request: Request, body: MediaReplacedEvent) -> dict[str, Any]:
    """명시적 미디어 교체 훅."""
    signal = MediaReplaceSignal(
        variant=SignalVariant.EXPLICIT_REPLACE,
        old_id=body.old_id,
        new_id=body.new_id,
        recipient=body.recipient,
    )
    return _trigger(
        request,
        lambda coordinator: coordinator.on_media_replaced(signal),
        asset_ids=signal.asset_ids,
    )


@router.post("/media-metadata-updated", status_code=202)
async def media_metadata_updated(
    request: Request, body: MediaMetadataUpdatedEvent
) -> dict[str, Any]:
    """첨부 메타데이터 갱신 훅 (교체 후보)."""
    signal = MediaReplaceSignal(
        variant=SignalVariant.METADATA_UPDATE,
        old_id=body.asset_id,
        old_metadata=body.old_metadata,
        new_metadata=body.new_metadata,
        recipient=body.recipient,
    )
    return _trigger(
        request,
        lambda coordinator: coordinator.on_media_replaced(signal),
        asset_ids=signal.asset_ids,
    )


@router.post("/attached-file-changed", status_code=202)
async def attached_file_changed(
    request: Request, body: AttachedFileChangedEvent
) -> dict[str, Any]:
    """첨부 파일 경로 변경 훅 (교체 확정)."""
    signal = MediaReplaceSignal(
        variant=SignalVariant.POST_META_CHANGE,
        old_id=body.asset_id,
        new_path=body.new_path,
        recipient=body.recipient,
    )
    return _trigger(
        request,
        lambda coordinator: coordinator.on_media_replaced(signal),
        asset_ids=signal.asset_ids,
    )
