"""Tests for UrlResolver."""

import pytest

from src.models.content_item import ContentBlock, ContentItem
from src.models.media_asset import MediaAsset
from src.services.url_resolver import UrlResolver, find_first_img_src
from tests.utils import InMemoryContentSource, make_asset

BASE = "https://example.com/wp-content/uploads/2024/05"


class TestFindFirstImgSrc:
    """Tests for find_first_img_src."""

    def test_first_image(self) -> None:
        """첫 번째 <img>의 src."""
        html = f'<p>x</p><img class="a" src="{BASE}/one.jpg"><img src="{BASE}/two.jpg">'

        assert find_first_img_src(html) == f"{BASE}/one.jpg"

    def test_single_quoted_and_uppercase(self) -> None:
        """작은따옴표/대문자 태그."""
        assert find_first_img_src(f"<IMG alt='x' SRC='{BASE}/one.png'>") == f"{BASE}/one.png"

    def test_skips_img_without_src(self) -> None:
        """src가 없는 img는 건너뜀."""
        html = f'<img data-lazy="1"><img src="{BASE}/two.jpg">'

        assert find_first_img_src(html) == f"{BASE}/two.jpg"

    @pytest.mark.parametrize("markup", ["", "<p>no images</p>", "plain text"])
    def test_no_image(self, markup: str) -> None:
        """이미지가 없으면 None."""
        assert find_first_img_src(markup) is None


class TestResolveMediaUrls:
    """Tests for UrlResolver.resolve_media_urls."""

    def test_canonical_first_then_variants(self) -> None:
        """원본 + N개 변형 → N+1개 URL, 원본이 첫 번째."""
        source = InMemoryContentSource(
            assets=[make_asset("7", "cat", ["thumbnail", "medium", "large"])]
        )

        urls = UrlResolver(source).resolve_media_urls("7")

        assert urls == [
            f"{BASE}/cat.jpg",
            f"{BASE}/cat-thumbnail.jpg",
            f"{BASE}/cat-medium.jpg",
            f"{BASE}/cat-large.jpg",
        ]

    def test_variant_equal_to_canonical_skipped(self) -> None:
        """원본과 같은 변형 URL은 제외."""
        asset = MediaAsset(
            id="7",
            canonical_url=f"{BASE}/cat.jpg",
            variants={"thumbnail": f"{BASE}/cat-150x150.jpg", "large": f"{BASE}/cat.jpg"},
        )
        source = InMemoryContentSource(assets=[asset])

        assert UrlResolver(source).resolve_media_urls("7") == [
            f"{BASE}/cat.jpg",
            f"{BASE}/cat-150x150.jpg",
        ]

    def test_unregistered_sizes_ignored(self) -> None:
        """등록되지 않은 사이즈 이름의 변형은 조회하지 않음."""
        source = InMemoryContentSource(
            assets=[make_asset("7", "cat", ["thumbnail", "custom"])],
            size_names=["thumbnail"],
        )

        assert UrlResolver(source).resolve_media_urls("7") == [
            f"{BASE}/cat.jpg",
            f"{BASE}/cat-thumbnail.jpg",
        ]

    def test_fallback_to_attached_file(self) -> None:
        """사이즈 정보가 없으면 업로드 경로로 재구성."""
        asset = MediaAsset(id="7", file_path="2024/05/cat.jpg")
        source = InMemoryContentSource(
            assets=[asset], uploads_base_url="https://example.com/wp-content/uploads"
        )

        assert UrlResolver(source).resolve_media_urls("7") == [f"{BASE}/cat.jpg"]

    def test_unknown_asset_empty(self) -> None:
        """알 수 없는 미디어는 빈 목록."""
        assert UrlResolver(InMemoryContentSource()).resolve_media_urls("999") == []

    def test_reads_current_state(self) -> None:
        """나중에 생성된 변형도 다음 호출에서 반영."""
        source = InMemoryContentSource(assets=[make_asset("7", "cat", [])])
        resolver = UrlResolver(source)

        assert resolver.resolve_media_urls("7") == [f"{BASE}/cat.jpg"]

        source.assets["7"] = make_asset("7", "cat", ["thumbnail"])

        assert resolver.resolve_media_urls("7") == [f"{BASE}/cat.jpg", f"{BASE}/cat-thumbnail.jpg"]


class TestResolveFirstContentImage:
    """Tests for UrlResolver.resolve_first_content_image."""

    def test_image_block_with_media_id(self) -> None:
        """이미지 블록의 미디어 ID → 원본 URL."""
        source = InMemoryContentSource(assets=[make_asset("7", "cat", [])])
        item = ContentItem(
            id="42",
            blocks=[
                ContentBlock(name="core/paragraph", inner_html="<p>hi</p>"),
                ContentBlock(name="core/image", attrs={"id": 7}),
            ],
            content=f'<img src="{BASE}/other.jpg">',
        )

        assert UrlResolver(source).resolve_first_content_image(item) == f"{BASE}/cat.jpg"

    def test_block_url_with_image_extension(self) -> None:
        """블록 속성 URL은 이미지 확장자일 때만."""
        item = ContentItem(
            id="42",
            blocks=[
                ContentBlock(name="core/embed", attrs={"url": "https://video.example.com/v/1"}),
                ContentBlock(name="core/cover", attrs={"url": f"{BASE}/cover.WEBP"}),
            ],
        )

        assert (
            UrlResolver(InMemoryContentSource()).resolve_first_content_image(item)
            == f"{BASE}/cover.WEBP"
        )

    def test_block_inner_html(self) -> None:
        """블록 내부 마크업의 이미지."""
        item = ContentItem(
            id="42",
            blocks=[ContentBlock(name="core/gallery", inner_html=f'<img src="{BASE}/g1.jpg">')],
        )

        assert (
            UrlResolver(InMemoryContentSource()).resolve_first_content_image(item)
            == f"{BASE}/g1.jpg"
        )

    def test_raw_content_when_blocks_have_no_image(self) -> None:
        """블록에서 찾지 못하면 원본 마크업 검색."""
        item = ContentItem(
            id="42",
            blocks=[ContentBlock(name="core/paragraph", inner_html="<p>hi</p>")],
            content=f'<p>hi</p><img src="{BASE}/dog.png">',
        )

        assert (
            UrlResolver(InMemoryContentSource()).resolve_first_content_image(item)
            == f"{BASE}/dog.png"
        )

    def test_no_image(self) -> None:
        """이미지가 없으면 None."""
        item = ContentItem(id="42", content="<p>text only</p>")

        assert UrlResolver(InMemoryContentSource()).resolve_first_content_image(item) is None


class TestResolvePostUrls:
    """Tests for UrlResolver.resolve_post_urls."""

    @pytest.fixture
    def source(self) -> InMemoryContentSource:
        """첨부 미디어 1개 + 본문 이미지가 있는 게시물."""
        item = ContentItem(
            id="42",
            publish_state="publish",
            attached_media_ids=["7"],
            content=f'<img src="{BASE}/dog.png">',
        )
        return InMemoryContentSource(
            items=[item], assets=[make_asset("7", "cat", ["thumbnail", "medium"])]
        )

    def test_attached_and_content_image(self, source: InMemoryContentSource) -> None:
        """첨부 이미지 변형 + 본문 첫 이미지."""
        item = source.items["42"]

        urls = UrlResolver(source).resolve_post_urls(item)

        assert urls == [
            f"{BASE}/cat.jpg",
            f"{BASE}/cat-thumbnail.jpg",
            f"{BASE}/cat-medium.jpg",
            f"{BASE}/dog.png",
        ]

    def test_attached_only(self, source: InMemoryContentSource) -> None:
        """본문 이미지 제외."""
        urls = UrlResolver(source).resolve_post_urls(
            source.items["42"], include_content_image=False
        )

        assert f"{BASE}/dog.png" not in urls
        assert len(urls) == 3

    def test_content_image_only(self, source: InMemoryContentSource) -> None:
        """첨부 이미지 제외."""
        urls = UrlResolver(source).resolve_post_urls(
            source.items["42"], include_attached=False
        )

        assert urls == [f"{BASE}/dog.png"]

    def test_content_image_same_as_attached_deduplicated(self) -> None:
        """본문 이미지가 첨부 원본과 같으면 한 번만."""
        item = ContentItem(
            id="42", attached_media_ids=["7"], content=f'<img src="{BASE}/cat.jpg">'
        )
        source = InMemoryContentSource(items=[item], assets=[make_asset("7", "cat", [])])

        assert UrlResolver(source).resolve_post_urls(item) == [f"{BASE}/cat.jpg"]
