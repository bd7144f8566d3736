"""Request-scoped construction of the purge coordinator.

라우터들이 공유하는 PurgeCoordinator 생성 함수입니다.
app.state가 없으면 (테스트/스크립트) Settings에서 직접 생성합니다.
"""

from fastapi import Request

from src.adapters.cloudflare_client import CloudflareClient
from src.adapters.content_source import RepositoryContentSource
from src.adapters.firestore_client import FirestoreClient
from src.adapters.tasks_client import TasksClient
from src.config.settings import Settings, get_settings
from src.repositories.content_item_repo import ContentItemRepository
from src.repositories.media_asset_repo import MediaAssetRepository
from src.repositories.notice_repo import NoticeRepository
from src.repositories.purge_log_repo import PurgeLogRepository
from src.services.purge_coordinator import PurgeCoordinator
from src.services.url_resolver import UrlResolver

# app.state가 없을 때 공유하는 direct 모드 TasksClient (lazy initialization)
_fallback_tasks: TasksClient | None = None


def get_fallback_tasks_client() -> TasksClient:
    """app.state 밖에서 쓰는 direct 모드 TasksClient (singleton).

    task_id dedup 상태는 호출 간에 공유됩니다.
    """
    global _fallback_tasks
    if _fallback_tasks is None:
        _fallback_tasks = TasksClient(
            mode="direct",
            dedup_ttl_seconds=get_settings().DEFERRED_DEDUP_WINDOW_SECONDS,
        )
    return _fallback_tasks


def get_purge_coordinator(request: Request | None = None) -> PurgeCoordinator:
    """PurgeCoordinator 인스턴스 생성.

    Args:
        request: FastAPI 요청 객체 (app.state 접근용)

    Returns:
        PurgeCoordinator 인스턴스
    """
    if request and hasattr(request.app.state, "firestore"):
        firestore = request.app.state.firestore
        settings = request.app.state.settings
        tasks_client = getattr(request.app.state, "tasks", None)
    else:
        settings = Settings()  # type: ignore[call-arg]
        firestore = FirestoreClient(project_id=settings.GCP_PROJECT_ID)
        tasks_client = get_fallback_tasks_client()

    # 요청 단위 정책 스냅샷
    config = settings.purger_config()

    content_source = RepositoryContentSource(
        item_repo=ContentItemRepository(firestore),
        asset_repo=MediaAssetRepository(firestore),
        size_names=settings.IMAGE_SIZE_NAMES,
        uploads_base_url=settings.UPLOADS_BASE_URL,
    )
    cloudflare_client = CloudflareClient(
        credentials=config.credentials,
        base_url=settings.CLOUDFLARE_API_BASE_URL,
        purge_timeout=settings.CLOUDFLARE_PURGE_TIMEOUT_SECONDS,
        connect_timeout=settings.CLOUDFLARE_CONNECT_TIMEOUT_SECONDS,
    )

    return PurgeCoordinator(
        config=config,
        resolver=UrlResolver(content_source),
        cloudflare_client=cloudflare_client,
        purge_log=PurgeLogRepository(firestore, enabled=config.log_operations),
        notices=NoticeRepository(firestore),
        tasks_client=tasks_client,
    )


def get_notice_repo(request: Request | None = None) -> NoticeRepository:
    """NoticeRepository 인스턴스 생성."""
    if request and hasattr(request.app.state, "firestore"):
        firestore = request.app.state.firestore
    else:
        settings = Settings()  # type: ignore[call-arg]
        firestore = FirestoreClient(project_id=settings.GCP_PROJECT_ID)

    return NoticeRepository(firestore)
