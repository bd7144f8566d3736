"""Content item model mirrored from the CMS.

CMS가 소유하는 게시물/첨부 파일 정보 (읽기 전용).
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ContentKind(str, Enum):
    """콘텐츠 종류."""

    POST = "post"
    MEDIA_ATTACHMENT = "media_attachment"


class PublishState(str, Enum):
    """게시 상태."""

    PUBLISH = "publish"
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    FUTURE = "future"
    TRASH = "trash"
    INHERIT = "inherit"  # 첨부 파일/리비전


class ContentBlock(BaseModel):
    """CMS 블록 파서가 만든 구조화 블록."""

    name: str | None = Field(None, description="블록 이름 (예: core/image)")
    attrs: dict[str, Any] = Field(default_factory=dict, description="블록 속성")
    inner_html: str = Field("", description="블록 내부 마크업")

    @property
    def media_id(self) -> str | None:
        """attrs.id로 참조한 미디어 ID."""
        value = self.attrs.get("id")
        if value is None or value == "":
            return None
        return str(value)

    @property
    def url(self) -> str | None:
        """attrs.url 값."""
        value = self.attrs.get("url")
        return value if isinstance(value, str) and value else None


class ContentItem(BaseModel):
    """CMS 콘텐츠 항목.

    Firestore Collection: content_items
    """

    id: str = Field(..., description="CMS 항목 ID")
    kind: ContentKind = Field(ContentKind.POST, description="콘텐츠 종류")
    publish_state: PublishState = Field(PublishState.DRAFT, description="게시 상태")
    content: str = Field("", description="원본 본문 마크업")
    blocks: list[ContentBlock] = Field(
        default_factory=list, description="구조화 블록 (블록 에디터 콘텐츠)"
    )
    attached_media_ids: list[str] = Field(
        default_factory=list, description="첨부 미디어 ID 목록"
    )
    is_autosave: bool = Field(False, description="자동 저장본 여부")
    is_revision: bool = Field(False, description="리비전 여부")

    @property
    def is_published(self) -> bool:
        """게시 상태 여부."""
        return self.publish_state == PublishState.PUBLISH

    @property
    def is_draft_variant(self) -> bool:
        """자동 저장본/리비전 여부."""
        return self.is_autosave or self.is_revision
