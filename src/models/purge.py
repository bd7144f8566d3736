"""Purge request/outcome models.

Cloudflare 캐시 퍼지 요청, 결과, 로그 항목을 정의합니다.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# purge_all 로그 항목의 대상 URL 자리표시자
PURGE_ALL_TARGET = "all"


def dedupe_urls(urls: Iterable[str | None]) -> list[str]:
    """빈 값과 중복을 제거한 URL 목록 (처음 등장한 순서 유지).

    Args:
        urls: URL 목록 (None/빈 문자열 허용).

    Returns:
        중복 없는 URL 리스트.
    """
    seen: set[str] = set()
    unique: list[str] = []
    for url in urls:
        if not url:
            continue
        url = url.strip()
        if url and url not in seen:
            seen.add(url)
            unique.append(url)
    return unique


class OperationType(str, Enum):
    """퍼지 작업 유형."""

    MANUAL_URLS = "manual_urls"
    PURGE_ALL = "purge_all"
    POST_PURGE = "post_purge"
    MEDIA_PURGE = "media_purge"
    MEDIA_PURGE_DELAYED = "media_purge_delayed"


class PurgeStatus(str, Enum):
    """Purge Client 결과 상태."""

    SUCCESS = "success"
    PROVIDER_ERROR = "provider_error"  # Cloudflare가 요청 거부
    TRANSPORT_ERROR = "transport_error"  # 타임아웃/연결 실패
    NOT_CONFIGURED = "not_configured"  # zone id 또는 token 누락
    EMPTY_TARGET_SET = "empty_target_set"  # 퍼지할 URL 없음


class LogStatus(str, Enum):
    """작업 로그 상태."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class ProviderCredentials(BaseModel):
    """Cloudflare zone id + API token."""

    model_config = ConfigDict(frozen=True)

    zone_id: str = Field(..., min_length=1, description="Cloudflare zone ID")
    api_token: str = Field(..., min_length=1, description="Cloudflare API token")

    def __repr__(self) -> str:
        return f"ProviderCredentials(zone_id={self.zone_id!r}, api_token='***')"


class PurgerConfig(BaseModel):
    """코디네이터 정책 스냅샷 (생성 후 변경 불가)."""

    model_config = ConfigDict(frozen=True)

    credentials: ProviderCredentials | None = None
    auto_purge_on_save: bool = True
    purge_attached_images: bool = True
    purge_content_images: bool = True
    auto_purge_on_media_replace: bool = True
    log_operations: bool = True
    async_purging: bool = True
    post_purge_delay_seconds: int = Field(2, ge=0)
    media_purge_delay_seconds: int = Field(3, ge=0)
    dedup_window_seconds: int = Field(10, ge=1)

    @property
    def is_configured(self) -> bool:
        """Credentials 존재 여부."""
        return self.credentials is not None


class PurgeRequest(BaseModel):
    """퍼지 요청.

    URL은 생성 시 중복/빈 값이 제거되며 이후 변경되지 않습니다.
    """

    model_config = ConfigDict(frozen=True)

    operation_type: OperationType
    urls: tuple[str, ...] = Field(default_factory=tuple)
    item_id: str | None = Field(None, description="연관 ContentItem/MediaAsset ID")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("urls", mode="before")
    @classmethod
    def normalize_urls(cls, v: Iterable[str | None] | None) -> tuple[str, ...]:
        """중복/빈 URL 제거."""
        return tuple(dedupe_urls(v or ()))

    @property
    def is_empty(self) -> bool:
        """대상 URL이 없는지 여부."""
        return not self.urls


class PurgeOutcome(BaseModel):
    """Purge Client 호출 결과."""

    model_config = ConfigDict(frozen=True)

    status: PurgeStatus
    message: str
    http_status: int | None = None

    @property
    def ok(self) -> bool:
        """성공 여부."""
        return self.status == PurgeStatus.SUCCESS

    @property
    def log_status(self) -> LogStatus:
        """작업 로그에 기록할 상태."""
        if self.status == PurgeStatus.SUCCESS:
            return LogStatus.SUCCESS
        if self.status == PurgeStatus.EMPTY_TARGET_SET:
            return LogStatus.INFO
        return LogStatus.ERROR

    @classmethod
    def not_configured(cls) -> "PurgeOutcome":
        """Credentials 누락 결과."""
        return cls(status=PurgeStatus.NOT_CONFIGURED, message="Purger not configured")

    @classmethod
    def empty(cls, message: str = "No URLs provided for purging") -> "PurgeOutcome":
        """빈 대상 결과."""
        return cls(status=PurgeStatus.EMPTY_TARGET_SET, message=message)


class PurgeLogEntry(BaseModel):
    """퍼지 작업 로그 항목.

    Firestore Collection: purge_log
    """

    id: str = Field(..., description="고유 ID")
    operation_type: OperationType = Field(..., description="작업 유형")
    urls: list[str] = Field(default_factory=list, description="대상 URL")
    item_id: str | None = Field(None, description="연관 항목 ID")
    status: LogStatus = Field(..., description="결과 상태")
    message: str = Field("", description="응답 메시지")
    created_at: datetime = Field(..., description="기록 시간")

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "log_3f2a9c0d",
                "operation_type": "post_purge",
                "urls": ["https://example.com/wp-content/uploads/2024/05/cat.jpg"],
                "item_id": "42",
                "status": "success",
                "message": "Successfully purged 1 URLs",
            }
        }
    }
