"""Purge coordinator for content-change events.

CMS 변경 이벤트 → 정책 확인 → URL 결정 → Cloudflare 퍼지 → 작업 로그 기록.
트리거된 퍼지는 실패해도 원래 저장 작업으로 예외를 전파하지 않습니다.
"""

import re
import time
from typing import TYPE_CHECKING, Any

import structlog

from src.adapters.cloudflare_client import CloudflareClient
from src.models.content_item import ContentItem
from src.models.purge import (
    PURGE_ALL_TARGET,
    LogStatus,
    OperationType,
    PurgeLogEntry,
    PurgeOutcome,
    PurgeRequest,
    PurgerConfig,
    PurgeStatus,
)
from src.models.signals import MediaReplaceSignal, SignalVariant
from src.repositories.notice_repo import NoticeRepository
from src.repositories.purge_log_repo import DEFAULT_RECENT_LIMIT, PurgeLogRepository
from src.services.replacement_detector import looks_like_replacement
from src.services.url_resolver import UrlResolver

if TYPE_CHECKING:
    from src.adapters.tasks_client import TasksClient

logger = structlog.get_logger(__name__)

PURGE_POST_TASK = "purge-post"
PURGE_MEDIA_TASK = "purge-media"

NO_IMAGES_MESSAGE = "No images found to purge"
NO_MEDIA_URLS_MESSAGE = "No media URLs found yet; deferred purge scheduled"

_TASK_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


class PurgeCoordinator:
    """콘텐츠 변경 이벤트 기반 캐시 퍼지 코디네이터.

    설정은 생성 시 PurgerConfig 스냅샷으로 주입되며 이후 변경되지 않습니다.
    지연 실행은 TasksClient로 위임하며, 예약된 작업은 취소하지 않습니다.
    """

    def __init__(
        self,
        config: PurgerConfig,
        resolver: UrlResolver,
        cloudflare_client: CloudflareClient,
        purge_log: PurgeLogRepository,
        notices: NoticeRepository | None = None,
        tasks_client: "TasksClient | None" = None,
    ) -> None:
        """PurgeCoordinator 초기화.

        Args:
            config: 정책/credentials 스냅샷
            resolver: URL 결정기
            cloudflare_client: Cloudflare 퍼지 클라이언트
            purge_log: 작업 로그 리포지토리
            notices: 일회성 알림 리포지토리
            tasks_client: 지연 실행용 Tasks 클라이언트 (없으면 항상 즉시 실행)
        """
        self.config = config
        self.resolver = resolver
        self.cloudflare_client = cloudflare_client
        self.purge_log = purge_log
        self.notices = notices
        self.tasks_client = tasks_client

        # TasksClient가 있으면 지연 퍼지 핸들러 등록 (direct 모드용)
        if tasks_client:
            tasks_client.register_handler(PURGE_POST_TASK, self.handle_post_task)
            tasks_client.register_handler(PURGE_MEDIA_TASK, self.handle_media_task)

    @property
    def is_configured(self) -> bool:
        """Cloudflare credentials 설정 여부."""
        return self.config.is_configured

    # ------------------------------------------------------------------
    # Manual operations
    # ------------------------------------------------------------------

    def purge_urls(
        self,
        urls: list[str],
        operation_type: OperationType = OperationType.MANUAL_URLS,
        item_id: str | None = None,
    ) -> PurgeOutcome:
        """지정한 URL 퍼지.

        Args:
            urls: 대상 URL (중복/빈 값은 제거)
            operation_type: 작업 유형
            item_id: 연관 항목 ID

        Returns:
            퍼지 결과
        """
        request = PurgeRequest(operation_type=operation_type, urls=urls, item_id=item_id)
        return self._dispatch(request)

    def purge_all(self) -> PurgeOutcome:
        """Zone 전체 캐시 퍼지."""
        outcome = self.cloudflare_client.purge_all()
        self._record(
            OperationType.PURGE_ALL,
            [PURGE_ALL_TARGET],
            None,
            outcome.log_status,
            outcome.message,
        )
        self._log_outcome(OperationType.PURGE_ALL, None, outcome, url_count=None)
        return outcome

    def purge_post_images(self, item_id: str) -> PurgeOutcome:
        """게시물의 첨부 이미지/본문 이미지 퍼지.

        퍼지할 이미지가 없으면 info로 기록하고 EMPTY_TARGET_SET을 반환합니다.

        Args:
            item_id: 게시물 ID

        Returns:
            퍼지 결과

        Raises:
            LookupError: 게시물을 찾을 수 없는 경우
        """
        if not self.is_configured:
            return self._not_configured(OperationType.POST_PURGE, item_id)

        item = self.resolver.content_source.get_item(item_id)
        if item is None:
            raise LookupError(f"Content item not found: {item_id}")

        urls = self.resolver.resolve_post_urls(
            item,
            include_attached=self.config.purge_attached_images,
            include_content_image=self.config.purge_content_images,
        )
        if not urls:
            self._record(OperationType.POST_PURGE, [], item_id, LogStatus.INFO, NO_IMAGES_MESSAGE)
            return PurgeOutcome.empty(NO_IMAGES_MESSAGE)

        request = PurgeRequest(
            operation_type=OperationType.POST_PURGE, urls=urls, item_id=item_id
        )
        return self._dispatch(request)

    def purge_media(
        self,
        asset_ids: list[str],
        operation_type: OperationType = OperationType.MEDIA_PURGE,
        empty_message: str = "No media URLs found",
    ) -> PurgeOutcome:
        """미디어의 모든 사이즈 변형 퍼지.

        URL이 하나도 없으면 info로 기록하고 EMPTY_TARGET_SET을 반환합니다.

        Args:
            asset_ids: 미디어 ID 목록
            operation_type: MEDIA_PURGE 또는 MEDIA_PURGE_DELAYED
            empty_message: URL이 없을 때 기록할 메시지

        Returns:
            퍼지 결과
        """
        item_id = ",".join(asset_ids) if asset_ids else None
        if not self.is_configured:
            return self._not_configured(operation_type, item_id)

        urls: list[str] = []
        for asset_id in asset_ids:
            urls.extend(self.resolver.resolve_media_urls(asset_id))

        request = PurgeRequest(operation_type=operation_type, urls=urls, item_id=item_id)
        if request.is_empty:
            self._record(operation_type, [], item_id, LogStatus.INFO, empty_message)
            return PurgeOutcome.empty(empty_message)
        return self._dispatch(request)

    def list_image_variants(self, asset_id: str) -> list[str]:
        """미디어의 퍼지 대상 URL 목록 (퍼지하지 않음)."""
        return self.resolver.resolve_media_urls(asset_id)

    def test_connection(self) -> tuple[bool, str]:
        """Cloudflare 연결 확인 (zone 정보 조회).

        Returns:
            (성공 여부, 메시지)
        """
        outcome = self.cloudflare_client.check_connectivity()
        logger.info(
            "cloudflare_connection_tested",
            status=outcome.status.value,
            http_status=outcome.http_status,
        )
        return outcome.ok, outcome.message

    def recent_log(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[PurgeLogEntry]:
        """최근 작업 로그 (표시용, 최신순)."""
        return self.purge_log.recent(limit)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_content_saved(
        self,
        item_id: str,
        is_autosave: bool = False,
        is_revision: bool = False,
        recipient: str | None = None,
    ) -> None:
        """게시물 저장 트리거.

        자동 저장/리비전, 정책 비활성, 미게시 상태면 아무것도 하지 않습니다.
        예외는 로그로만 남기고 전파하지 않습니다.

        Args:
            item_id: 게시물 ID
            is_autosave: 자동 저장 여부
            is_revision: 리비전 여부
            recipient: 성공 알림 수신자
        """
        try:
            if is_autosave or is_revision or not self.config.auto_purge_on_save:
                return

            item = self.resolver.content_source.get_item(item_id)
            if not self._is_publishable(item):
                logger.debug("content_save_ignored", item_id=item_id)
                return

            if self.config.async_purging and self.tasks_client:
                self._schedule(
                    PURGE_POST_TASK,
                    {"item_id": item_id, "recipient": recipient},
                    key=f"post-{item_id}",
                    delay_seconds=self.config.post_purge_delay_seconds,
                )
                return

            self._notify(self.purge_post_images(item_id), recipient)
        except Exception as e:
            self._record_trigger_failure(OperationType.POST_PURGE, item_id, e)

    def on_media_replaced(self, signal: MediaReplaceSignal) -> None:
        """미디어 교체 트리거 (모든 교체 신호 공통 진입점).

        - EXPLICIT_REPLACE: 기존/새 미디어 모두 퍼지 (정책에 따라 즉시/지연)
        - METADATA_UPDATE: looks_like_replacement()가 True일 때만 처리
        - POST_META_CHANGE: 파일 경로 변경 = 교체 확정

        확정된 교체는 즉시 퍼지를 시도하고, 결과와 무관하게 지연 퍼지를 예약합니다.

        Args:
            signal: 정규화된 교체 신호
        """
        try:
            if not self.config.auto_purge_on_media_replace:
                return

            if signal.variant == SignalVariant.EXPLICIT_REPLACE:
                self._purge_replaced_media(signal)
                return

            if signal.variant == SignalVariant.METADATA_UPDATE and not looks_like_replacement(
                signal.old_metadata, signal.new_metadata
            ):
                logger.debug("media_update_ignored", asset_id=signal.old_id)
                return

            self._purge_confirmed_replacement(signal)
        except Exception as e:
            self._record_trigger_failure(
                OperationType.MEDIA_PURGE, ",".join(signal.asset_ids), e
            )

    # ------------------------------------------------------------------
    # Deferred task handlers
    # ------------------------------------------------------------------

    def handle_post_task(self, payload: dict[str, Any]) -> PurgeOutcome:
        """지연 게시물 퍼지 핸들러.

        Args:
            payload: {"item_id": "...", "recipient": "..."}

        Returns:
            퍼지 결과

        Raises:
            ValueError: item_id가 없는 경우
        """
        item_id = payload.get("item_id")
        if not item_id:
            raise ValueError("item_id is required")

        try:
            outcome = self.purge_post_images(str(item_id))
        except LookupError as e:
            # 지연 실행 전에 게시물이 삭제된 경우
            self._record(OperationType.POST_PURGE, [], str(item_id), LogStatus.ERROR, str(e))
            return PurgeOutcome.empty(str(e))

        self._notify(outcome, payload.get("recipient"))
        return outcome

    def handle_media_task(self, payload: dict[str, Any]) -> PurgeOutcome:
        """지연 미디어 퍼지 핸들러.

        Args:
            payload: {"asset_ids": [...], "operation": "...", "recipient": "..."}

        Returns:
            퍼지 결과

        Raises:
            ValueError: asset_ids가 없거나 operation이 잘못된 경우
        """
        asset_ids = [str(a) for a in payload.get("asset_ids") or [] if a]
        if not asset_ids:
            raise ValueError("asset_ids is required")

        operation = OperationType(
            payload.get("operation") or OperationType.MEDIA_PURGE_DELAYED.value
        )
        outcome = self.purge_media(asset_ids, operation_type=operation)
        self._notify(outcome, payload.get("recipient"))
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _purge_replaced_media(self, signal: MediaReplaceSignal) -> None:
        if self.config.async_purging and self._schedule_media(signal):
            return
        self._notify(self.purge_media(signal.asset_ids), signal.recipient)

    def _purge_confirmed_replacement(self, signal: MediaReplaceSignal) -> None:
        # 즉시 퍼지는 best-effort: 사이즈 변형이 아직 생성되지 않았을 수 있음
        # 즉시 퍼지가 예외로 끝나도 지연 퍼지는 예약됨
        try:
            outcome = self.purge_media(signal.asset_ids, empty_message=NO_MEDIA_URLS_MESSAGE)
            if outcome.status == PurgeStatus.EMPTY_TARGET_SET:
                logger.info("media_urls_not_ready", asset_ids=signal.asset_ids)
            self._notify(outcome, signal.recipient)
        finally:
            self._schedule_media(signal)

    def _schedule_media(self, signal: MediaReplaceSignal) -> bool:
        """미디어별 지연 퍼지 예약 (dedup 키는 미디어 ID 단위)."""
        scheduled = False
        for asset_id in signal.asset_ids:
            scheduled = (
                self._schedule(
                    PURGE_MEDIA_TASK,
                    {
                        "asset_ids": [asset_id],
                        "operation": OperationType.MEDIA_PURGE_DELAYED.value,
                        "recipient": signal.recipient,
                    },
                    key=f"media-{asset_id}",
                    delay_seconds=self.config.media_purge_delay_seconds,
                )
                or scheduled
            )
        return scheduled

    def _schedule(
        self,
        task_type: str,
        payload: dict[str, Any],
        key: str,
        delay_seconds: int,
    ) -> bool:
        """지연 퍼지 예약.

        같은 키에 대해 dedup 윈도우 안에서 예약된 작업은 한 번만 실행됩니다.

        Returns:
            TasksClient가 없으면 False
        """
        if self.tasks_client is None:
            return False

        window = int(time.time() // self.config.dedup_window_seconds)
        task_id = _TASK_ID_UNSAFE.sub("_", f"{key}-{window}")[:500]

        self.tasks_client.enqueue(
            task_type,
            payload,
            task_id=task_id,
            delay_seconds=delay_seconds,
        )
        logger.info(
            "deferred_purge_scheduled",
            task_type=task_type,
            task_id=task_id,
            delay_seconds=delay_seconds,
        )
        return True

    def _dispatch(self, request: PurgeRequest) -> PurgeOutcome:
        """PurgeRequest 실행 + 작업 로그 기록."""
        if not self.is_configured:
            return self._not_configured(request.operation_type, request.item_id)

        if request.is_empty:
            outcome = PurgeOutcome.empty()
        else:
            outcome = self.cloudflare_client.purge(list(request.urls))

        self._record(
            request.operation_type,
            list(request.urls),
            request.item_id,
            outcome.log_status,
            outcome.message,
        )
        self._log_outcome(
            request.operation_type, request.item_id, outcome, url_count=len(request.urls)
        )
        return outcome

    def _not_configured(
        self, operation_type: OperationType, item_id: str | None
    ) -> PurgeOutcome:
        outcome = PurgeOutcome.not_configured()
        self._record(operation_type, [], item_id, LogStatus.ERROR, outcome.message)
        logger.warning(
            "purge_not_configured", operation_type=operation_type.value, item_id=item_id
        )
        return outcome

    def _notify(self, outcome: PurgeOutcome, recipient: str | None) -> None:
        if self.notices is None or not outcome.ok:
            return
        try:
            self.notices.push(f"Cloudflare: {outcome.message}", recipient)
        except Exception as e:
            logger.warning("notice_push_failed", error=str(e))

    def _record(
        self,
        operation_type: OperationType,
        urls: list[str],
        item_id: str | None,
        status: LogStatus,
        message: str,
    ) -> None:
        if not self.config.log_operations:
            return
        self.purge_log.record(operation_type, urls, item_id, status, message)

    def _record_trigger_failure(
        self, operation_type: OperationType, item_id: str | None, error: Exception
    ) -> None:
        logger.error(
            "triggered_purge_failed",
            operation_type=operation_type.value,
            item_id=item_id,
            error=str(error),
        )
        try:
            self._record(operation_type, [], item_id, LogStatus.ERROR, str(error))
        except Exception as e:
            logger.error("purge_log_write_failed", item_id=item_id, error=str(e))

    def _log_outcome(
        self,
        operation_type: OperationType,
        item_id: str | None,
        outcome: PurgeOutcome,
        url_count: int | None,
    ) -> None:
        log = logger.bind(
            operation_type=operation_type.value,
            item_id=item_id,
            url_count=url_count,
            status=outcome.status.value,
        )
        if outcome.ok:
            log.info("purge_succeeded", message=outcome.message)
        elif outcome.status == PurgeStatus.EMPTY_TARGET_SET:
            log.info("purge_skipped", message=outcome.message)
        else:
            log.error("purge_failed", error=outcome.message, http_status=outcome.http_status)

    @staticmethod
    def _is_publishable(item: ContentItem | None) -> bool:
        return item is not None and item.is_published and not item.is_draft_variant
