"""Repository for purge operation log entries.

Firestore purge_log 컬렉션에 대한 데이터 접근 레이어 (추가 전용).
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from src.adapters.firestore_client import FirestoreClient
from src.models.purge import LogStatus, OperationType, PurgeLogEntry
from src.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)

DEFAULT_RECENT_LIMIT = 20


class PurgeLogRepository(BaseRepository[PurgeLogEntry]):
    """PurgeLogEntry Repository.

    Firestore Collection: purge_log

    쓰기는 무제한 추가이며, 조회 시에만 최근 N개로 자릅니다.
    """

    collection_name = "purge_log"
    model_class = PurgeLogEntry

    def __init__(self, firestore_client: FirestoreClient, enabled: bool = True) -> None:
        """Initialize PurgeLogRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
            enabled: False면 record()가 아무것도 하지 않음.
        """
        super().__init__(firestore_client)
        self.enabled = enabled

    def record(
        self,
        operation_type: OperationType,
        urls: Sequence[str],
        item_id: str | None = None,
        status: LogStatus = LogStatus.SUCCESS,
        message: str = "",
    ) -> PurgeLogEntry | None:
        """작업 로그 한 건 추가.

        Args:
            operation_type: 작업 유형.
            urls: 대상 URL.
            item_id: 연관 항목 ID.
            status: 결과 상태.
            message: 응답 메시지.

        Returns:
            저장된 로그 항목. 로깅이 꺼져 있으면 None.
        """
        if not self.enabled:
            return None

        entry = PurgeLogEntry(
            id=f"log_{uuid4().hex}",
            operation_type=operation_type,
            urls=list(urls),
            item_id=item_id,
            status=status,
            message=message,
            created_at=datetime.now(UTC),
        )
        self.create(entry)

        logger.debug(
            "purge_log_recorded",
            log_id=entry.id,
            operation_type=operation_type.value,
            status=status.value,
        )
        return entry

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[PurgeLogEntry]:
        """최근 로그 조회 (created_at 내림차순).

        Args:
            limit: 최대 조회 수.

        Returns:
            최근 로그 항목 목록.
        """
        if limit <= 0:
            return []
        results = self._db.query_ordered(
            self.collection_name, order_by="created_at", limit=limit
        )
        return [PurgeLogEntry(**data) for data in results]

    def find_by_item(self, item_id: str) -> list[PurgeLogEntry]:
        """항목별 로그 조회 (최신순).

        Args:
            item_id: 게시물/미디어 ID.

        Returns:
            해당 항목의 로그 목록.
        """
        entries = self.find_by([("item_id", "==", item_id)])
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries
