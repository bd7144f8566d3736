"""Repository layer for Firestore data access.

This module exports all repository classes for data persistence.
"""

from src.repositories.base import BaseRepository
from src.repositories.content_item_repo import ContentItemRepository
from src.repositories.media_asset_repo import MediaAssetRepository
from src.repositories.notice_repo import NoticeRepository
from src.repositories.purge_log_repo import PurgeLogRepository

__all__ = [
    "BaseRepository",
    "ContentItemRepository",
    "MediaAssetRepository",
    "NoticeRepository",
    "PurgeLogRepository",
]
