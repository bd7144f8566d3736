"""Repository for CMS content items.

Firestore content_items 컬렉션 (CMS 게시물 미러, 읽기 전용).
"""

from src.models.content_item import ContentItem
from src.repositories.base import BaseRepository


class ContentItemRepository(BaseRepository[ContentItem]):
    """ContentItem Repository.

    Firestore Collection: content_items
    """

    collection_name = "content_items"
    model_class = ContentItem

    def get_attached_media(self, item_id: str) -> list[str]:
        """게시물에 첨부된 미디어 ID 조회.

        Args:
            item_id: 게시물 ID.

        Returns:
            첨부 미디어 ID 목록 (게시물이 없으면 빈 목록).
        """
        item = self.get_by_id(item_id)
        return list(item.attached_media_ids) if item else []
