"""Test utilities shared across test modules."""

import os
import socket

from src.models.content_item import ContentItem
from src.models.media_asset import MediaAsset


def is_emulator_available() -> bool:
    """Firestore 에뮬레이터 사용 가능 여부 확인.

    환경변수 FIRESTORE_EMULATOR_HOST에서 호스트/포트를 읽어
    연결 가능 여부를 확인합니다.

    Returns:
        에뮬레이터 연결 가능 여부.
    """
    host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost:8086")
    host_parts = host.split(":")
    hostname = host_parts[0]
    port = int(host_parts[1]) if len(host_parts) > 1 else 8086

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(1)
            return sock.connect_ex((hostname, port)) == 0
    except OSError:
        return False


class InMemoryContentSource:
    """메모리 기반 ContentSource (테스트용).

    items/assets를 직접 수정하면 다음 호출부터 반영됩니다.
    """

    def __init__(
        self,
        items: list[ContentItem] | None = None,
        assets: list[MediaAsset] | None = None,
        size_names: list[str] | None = None,
        uploads_base_url: str | None = None,
    ) -> None:
        self.items = {item.id: item for item in items or []}
        self.assets = {asset.id: asset for asset in assets or []}
        self.size_names = size_names or ["thumbnail", "medium", "large"]
        self.uploads_base_url = uploads_base_url

    def get_item(self, item_id: str) -> ContentItem | None:
        return self.items.get(item_id)

    def get_attached_media(self, item_id: str) -> list[str]:
        item = self.items.get(item_id)
        return list(item.attached_media_ids) if item else []

    def get_canonical_url(self, asset_id: str) -> str | None:
        asset = self.assets.get(asset_id)
        return asset.canonical_url if asset else None

    def get_variant_url(self, asset_id: str, size_name: str) -> str | None:
        asset = self.assets.get(asset_id)
        return asset.variants.get(size_name) if asset else None

    def get_registered_size_names(self) -> list[str]:
        return list(self.size_names)

    def get_attached_file_url(self, asset_id: str) -> str | None:
        asset = self.assets.get(asset_id)
        if not asset or not asset.file_path or not self.uploads_base_url:
            return None
        return f"{self.uploads_base_url}/{asset.file_path}"


def make_asset(asset_id: str, name: str, sizes: list[str]) -> MediaAsset:
    """원본 + 사이즈 변형 URL을 가진 미디어 생성."""
    base = "https://example.com/wp-content/uploads/2024/05"
    return MediaAsset(
        id=asset_id,
        canonical_url=f"{base}/{name}.jpg",
        variants={size: f"{base}/{name}-{size}.jpg" for size in sizes},
        file_path=f"2024/05/{name}.jpg",
    )
