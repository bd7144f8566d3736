"""Manual cache purge API endpoints.

관리자가 직접 호출하는 퍼지/조회 API입니다.
"""

from typing import Any
from urllib.parse import urlparse

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from src.api.dependencies import get_notice_repo, get_purge_coordinator
from src.models.purge import PurgeOutcome, PurgeStatus
from src.repositories.purge_log_repo import DEFAULT_RECENT_LIMIT

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/purge", tags=["purge"])


class PurgeUrlsRequest(BaseModel):
    """URL 퍼지 요청."""

    urls: list[str] = Field(..., description="퍼지할 URL 목록")


class PurgeResponse(BaseModel):
    """퍼지 결과 응답."""

    status: str
    message: str
    url_count: int | None = None


class ConnectionTestResponse(BaseModel):
    """연결 테스트 응답."""

    success: bool
    message: str


def is_valid_url(url: str) -> bool:
    """http(s) 절대 URL 여부."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _to_response(outcome: PurgeOutcome, url_count: int | None = None) -> PurgeResponse:
    """PurgeOutcome → 응답 변환. 실패는 HTTPException."""
    if outcome.status == PurgeStatus.SUCCESS:
        return PurgeResponse(status="success", message=outcome.message, url_count=url_count)
    if outcome.status == PurgeStatus.EMPTY_TARGET_SET:
        return PurgeResponse(status="info", message=outcome.message, url_count=0)

    status_code = 503 if outcome.status == PurgeStatus.NOT_CONFIGURED else 502
    raise HTTPException(
        status_code=status_code,
        detail={
            "status": "error",
            "error": outcome.message,
            "reason": outcome.status.value,
        },
    )


@router.get("/status")
async def purge_status(request: Request) -> dict[str, Any]:
    """Cloudflare 설정 여부 조회."""
    coordinator = get_purge_coordinator(request)
    return {"configured": coordinator.is_configured}


@router.post("/urls")
async def purge_urls(request: Request, body: PurgeUrlsRequest) -> PurgeResponse:
    """지정 URL 퍼지.

    공백 제거 후 유효한 http(s) URL만 퍼지합니다.

    Args:
        request: FastAPI 요청 객체
        body: URL 목록

    Returns:
        퍼지 결과
    """
    urls = [u.strip() for u in body.urls if u and u.strip()]
    if not urls:
        raise HTTPException(status_code=400, detail="No URLs provided")

    valid_urls = [u for u in urls if is_valid_url(u)]
    if not valid_urls:
        raise HTTPException(status_code=400, detail="No valid URLs found")

    coordinator = get_purge_coordinator(request)
    outcome = coordinator.purge_urls(valid_urls)

    logger.info("manual_purge_requested", url_count=len(valid_urls), status=outcome.status.value)
    return _to_response(outcome, url_count=len(set(valid_urls)))


@router.post("/all")
async def purge_all(request: Request) -> PurgeResponse:
    """Zone 전체 캐시 퍼지."""
    coordinator = get_purge_coordinator(request)
    return _to_response(coordinator.purge_all())


@router.post("/posts/{item_id}")
async def purge_post(request: Request, item_id: str) -> PurgeResponse:
    """게시물 이미지 퍼지.

    Args:
        request: FastAPI 요청 객체
        item_id: 게시물 ID

    Returns:
        퍼지 결과
    """
    coordinator = get_purge_coordinator(request)
    try:
        outcome = coordinator.purge_post_images(item_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return _to_response(outcome)


@router.post("/media/{asset_id}")
async def purge_media(request: Request, asset_id: str) -> PurgeResponse:
    """미디어의 모든 사이즈 변형 퍼지."""
    coordinator = get_purge_coordinator(request)
    return _to_response(coordinator.purge_media([asset_id]))


@router.get("/media/{asset_id}/variants")
async def list_media_variants(request: Request, asset_id: str) -> dict[str, Any]:
    """미디어의 퍼지 대상 URL 목록 조회."""
    coordinator = get_purge_coordinator(request)
    urls = coordinator.list_image_variants(asset_id)
    return {"asset_id": asset_id, "urls": urls, "total": len(urls)}


@router.post("/test-connection")
async def test_connection(request: Request) -> ConnectionTestResponse:
    """Cloudflare 연결 테스트."""
    coordinator = get_purge_coordinator(request)
    ok, message = coordinator.test_connection()
    return ConnectionTestResponse(success=ok, message=message)


@router.get("/log")
async def purge_log(
    request: Request,
    limit: int = Query(DEFAULT_RECENT_LIMIT, ge=1, le=500),
    item_id: str | None = None,
) -> dict[str, Any]:
    """최근 퍼지 작업 로그 조회.

    Args:
        request: FastAPI 요청 객체
        limit: 최대 조회 수
        item_id: 항목 ID 필터

    Returns:
        로그 목록 (최신순)
    """
    coordinator = get_purge_coordinator(request)
    if item_id:
        entries = coordinator.purge_log.find_by_item(item_id)[:limit]
    else:
        entries = coordinator.recent_log(limit)
    return {
        "entries": [e.model_dump(mode="json") for e in entries],
        "total": len(entries),
    }


@router.get("/notices")
async def pop_notices(request: Request, recipient: str | None = None) -> dict[str, Any]:
    """대기 중인 일회성 알림 조회 (조회 시 삭제)."""
    notices = get_notice_repo(request).pop_all(recipient)
    return {"notices": notices}
