"""Normalized media replacement signal.

여러 CMS 훅에서 들어오는 "미디어 교체" 이벤트를 하나의 형태로 정규화합니다.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.media_asset import MediaMetadata


class SignalVariant(str, Enum):
    """교체 신호 출처."""

    EXPLICIT_REPLACE = "explicit_replace"  # 미디어 교체 훅
    METADATA_UPDATE = "metadata_update"  # 첨부 메타데이터 갱신 훅
    POST_META_CHANGE = "post_meta_change"  # 첨부 파일 경로 메타 변경 훅


class MediaReplaceSignal(BaseModel):
    """미디어 교체 신호."""

    model_config = ConfigDict(frozen=True)

    variant: SignalVariant
    old_id: str = Field(..., min_length=1, description="기존(또는 대상) 미디어 ID")
    new_id: str | None = Field(None, description="새 미디어 ID (명시적 교체)")
    old_metadata: MediaMetadata | None = None
    new_metadata: MediaMetadata | None = None
    new_path: str | None = Field(None, description="변경된 첨부 파일 경로")
    recipient: str | None = Field(None, description="알림 수신자")

    @property
    def asset_ids(self) -> list[str]:
        """퍼지 대상 미디어 ID (중복 제거)."""
        ids = [self.old_id]
        if self.new_id and self.new_id != self.old_id:
            ids.append(self.new_id)
        return ids
