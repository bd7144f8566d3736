"""Repository for one-shot purge notices.

퍼지 성공 알림을 수신자별로 쌓아두고, 한 번 읽으면 삭제합니다.
추가/꺼내기는 Firestore 트랜잭션으로 처리되어 동시에 실행되어도 알림이 유실되지 않습니다.
"""

from datetime import UTC, datetime

from src.adapters.firestore_client import FirestoreClient

DEFAULT_RECIPIENT = "default"


class NoticeRepository:
    """일회성 알림 저장소.

    Firestore Collection: purge_notices
    문서 ID = 수신자, 필드 messages = 대기 중인 알림 목록.
    """

    collection_name = "purge_notices"

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize NoticeRepository.

        Args:
            firestore_client: Firestore 클라이언트 인스턴스.
        """
        self._db = firestore_client

    def push(self, message: str, recipient: str | None = None) -> None:
        """알림 추가.

        Args:
            message: 알림 메시지.
            recipient: 수신자 (없으면 기본 수신자).
        """
        self._db.append_to_array(
            self.collection_name,
            recipient or DEFAULT_RECIPIENT,
            "messages",
            message,
            extra={"updated_at": datetime.now(UTC)},
        )

    def pop_all(self, recipient: str | None = None) -> list[str]:
        """대기 중인 알림을 꺼내고 삭제.

        Args:
            recipient: 수신자 (없으면 기본 수신자).

        Returns:
            알림 메시지 목록.
        """
        messages = self._db.pop_array(
            self.collection_name, recipient or DEFAULT_RECIPIENT, "messages"
        )
        return [str(m) for m in messages]
