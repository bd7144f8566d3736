"""Content source adapter.

The CMS owns posts and media; the purger only reads them through this
interface. The default implementation reads a Firestore mirror of the CMS.
"""

from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote

from src.models.content_item import ContentItem

if TYPE_CHECKING:
    from src.repositories.content_item_repo import ContentItemRepository
    from src.repositories.media_asset_repo import MediaAssetRepository


class ContentSource(Protocol):
    """Read-only view of the CMS used by the URL resolver."""

    def get_item(self, item_id: str) -> ContentItem | None: ...

    def get_attached_media(self, item_id: str) -> list[str]: ...

    def get_canonical_url(self, asset_id: str) -> str | None: ...

    def get_variant_url(self, asset_id: str, size_name: str) -> str | None: ...

    def get_registered_size_names(self) -> list[str]: ...

    def get_attached_file_url(self, asset_id: str) -> str | None: ...


class RepositoryContentSource:
    """ContentSource backed by the content_items / media_assets collections.

    Nothing is cached: every call reads the current state, so a deferred
    purge sees variants registered after the triggering event.
    """

    def __init__(
        self,
        item_repo: "ContentItemRepository",
        asset_repo: "MediaAssetRepository",
        size_names: list[str],
        uploads_base_url: str | None = None,
    ) -> None:
        """Initialize content source.

        Args:
            item_repo: Content item repository.
            asset_repo: Media asset repository.
            size_names: Registered intermediate image size names.
            uploads_base_url: Base URL of the upload directory.
        """
        self._item_repo = item_repo
        self._asset_repo = asset_repo
        self._size_names = list(size_names)
        self._uploads_base_url = uploads_base_url.rstrip("/") if uploads_base_url else None

    def get_item(self, item_id: str) -> ContentItem | None:
        return self._item_repo.get_by_id(item_id)

    def get_attached_media(self, item_id: str) -> list[str]:
        return self._item_repo.get_attached_media(item_id)

    def get_canonical_url(self, asset_id: str) -> str | None:
        asset = self._asset_repo.get_by_id(asset_id)
        return asset.canonical_url if asset else None

    def get_variant_url(self, asset_id: str, size_name: str) -> str | None:
        asset = self._asset_repo.get_by_id(asset_id)
        if asset is None:
            return None
        return asset.variants.get(size_name)

    def get_registered_size_names(self) -> list[str]:
        return list(self._size_names)

    def get_attached_file_url(self, asset_id: str) -> str | None:
        """Upload base URL + the asset's relative file path."""
        if not self._uploads_base_url:
            return None
        asset = self._asset_repo.get_by_id(asset_id)
        if asset is None:
            return None
        path = asset.file_path or (asset.metadata.file if asset.metadata else None)
        if not path:
            return None
        return f"{self._uploads_base_url}/{quote(path.lstrip('/'), safe='/')}"
