"""Media asset model mirrored from the CMS.

이미지 첨부 파일과 사이즈 변형 URL 정보.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MediaMetadata(BaseModel):
    """첨부 파일 메타데이터 (교체 판단용)."""

    model_config = ConfigDict(extra="allow")

    file: str | None = Field(None, description="업로드 기준 상대 경로")
    width: int | None = Field(None, ge=0)
    height: int | None = Field(None, ge=0)
    filesize: int | None = Field(None, ge=0, description="바이트")


class MediaAsset(BaseModel):
    """미디어 첨부 파일.

    Firestore Collection: media_assets
    """

    id: str = Field(..., description="CMS 첨부 파일 ID")
    canonical_url: str | None = Field(None, description="원본(full) URL")
    variants: dict[str, str] = Field(
        default_factory=dict, description="사이즈 이름 → 변형 URL"
    )
    file_path: str | None = Field(None, description="업로드 기준 상대 경로")
    metadata: MediaMetadata | None = Field(None, description="첨부 파일 메타데이터")
    modified_at: datetime | None = Field(None, description="마지막 수정 시간")

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "7",
                "canonical_url": "https://example.com/wp-content/uploads/2024/05/cat.jpg",
                "variants": {
                    "thumbnail": "https://example.com/wp-content/uploads/2024/05/cat-150x150.jpg",
                    "medium": "https://example.com/wp-content/uploads/2024/05/cat-300x200.jpg",
                },
                "file_path": "2024/05/cat.jpg",
            }
        }
    }
