"""Repository for CMS media assets.

Firestore media_assets 컬렉션 (CMS 첨부 파일 미러, 읽기 전용).
"""

from src.models.media_asset import MediaAsset
from src.repositories.base import BaseRepository


class MediaAssetRepository(BaseRepository[MediaAsset]):
    """MediaAsset Repository.

    Firestore Collection: media_assets
    """

    collection_name = "media_assets"
    model_class = MediaAsset
