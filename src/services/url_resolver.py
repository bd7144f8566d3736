"""URL resolver for cache purging.

콘텐츠 항목에서 캐시 무효화 대상 URL을 결정합니다.
네트워크 호출 없이 ContentSource의 현재 상태만 읽습니다.
"""

import re

import structlog
from bs4 import BeautifulSoup

from src.adapters.content_source import ContentSource
from src.models.content_item import ContentBlock, ContentItem
from src.models.purge import dedupe_urls

logger = structlog.get_logger(__name__)

IMAGE_BLOCK_NAME = "core/image"

# 블록 속성의 URL을 이미지로 인정하는 확장자
IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)


def find_first_img_src(markup: str) -> str | None:
    """마크업에서 첫 번째 <img src="..."> 값 추출.

    Args:
        markup: HTML 마크업.

    Returns:
        src 값 또는 None.
    """
    if not markup or "<img" not in markup.lower():
        return None

    soup = BeautifulSoup(markup, "lxml")
    for img in soup.find_all("img"):
        src = img.get("src")
        if isinstance(src, str) and src.strip():
            return src.strip()
    return None


class UrlResolver:
    """캐시 무효화 대상 URL 결정기."""

    def __init__(self, content_source: ContentSource) -> None:
        """UrlResolver 초기화.

        Args:
            content_source: CMS 읽기 인터페이스
        """
        self.content_source = content_source

    def resolve_media_urls(self, asset_id: str) -> list[str]:
        """미디어의 원본 URL + 모든 사이즈 변형 URL.

        원본과 같은 변형은 제외합니다. 사이즈 정보에서 아무 URL도 얻지
        못하면 업로드 경로로 URL을 재구성합니다.

        Args:
            asset_id: 미디어 ID

        Returns:
            중복 없는 URL 목록 (원본이 첫 번째)
        """
        urls: list[str] = []

        canonical = self.content_source.get_canonical_url(asset_id)
        if canonical:
            urls.append(canonical)

        for size_name in self.content_source.get_registered_size_names():
            variant = self.content_source.get_variant_url(asset_id, size_name)
            if variant and variant != canonical:
                urls.append(variant)

        urls = dedupe_urls(urls)
        if urls:
            return urls

        fallback = self.content_source.get_attached_file_url(asset_id)
        if fallback:
            logger.debug("media_url_fallback_used", asset_id=asset_id, url=fallback)
            return [fallback]
        return []

    def resolve_first_content_image(self, item: ContentItem) -> str | None:
        """본문의 첫 번째 이미지 URL.

        구조화 블록을 먼저 확인하고, 블록이 없으면 원본 마크업을 검색합니다.

        Args:
            item: 콘텐츠 항목

        Returns:
            이미지 URL 또는 None
        """
        if item.blocks:
            for block in item.blocks:
                url = self._image_from_block(block)
                if url:
                    return url

        return find_first_img_src(item.content)

    def resolve_post_urls(
        self,
        item: ContentItem,
        include_attached: bool = True,
        include_content_image: bool = True,
    ) -> list[str]:
        """게시물 관련 이미지 URL (첨부 이미지 변형 + 본문 첫 이미지).

        Args:
            item: 게시물
            include_attached: 첨부 이미지 포함 여부
            include_content_image: 본문 첫 이미지 포함 여부

        Returns:
            중복 없는 URL 목록
        """
        urls: list[str] = []

        if include_attached:
            for asset_id in self.content_source.get_attached_media(item.id):
                urls.extend(self.resolve_media_urls(asset_id))

        if include_content_image:
            content_image = self.resolve_first_content_image(item)
            if content_image:
                urls.append(content_image)

        return dedupe_urls(urls)

    def _image_from_block(self, block: ContentBlock) -> str | None:
        # 1. 미디어 ID를 참조하는 이미지 블록
        if block.name == IMAGE_BLOCK_NAME and block.media_id:
            url = self.content_source.get_canonical_url(block.media_id)
            if url:
                return url

        # 2. 속성에 직접 들어있는 이미지 URL
        if block.url and IMAGE_URL_PATTERN.search(block.url):
            return block.url

        # 3. 블록 내부 마크업
        return find_first_img_src(block.inner_html)
