"""Pytest configuration and shared fixtures."""

import os
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.models.purge import ProviderCredentials, PurgerConfig


@pytest.fixture(autouse=True)
def set_test_env() -> None:
    """Set test environment variables."""
    os.environ.setdefault("GCP_PROJECT_ID", "test-project")
    os.environ.setdefault("FIRESTORE_EMULATOR_HOST", "localhost:8086")
    os.environ.setdefault("TASKS_MODE", "direct")
    os.environ.setdefault("LOG_JSON", "false")


@pytest.fixture
def mock_firestore_client() -> MagicMock:
    """Mock FirestoreClient (get/set/delete/query/query_ordered/pop_array)."""
    client = MagicMock()
    client.get.return_value = None
    client.query.return_value = []
    client.query_ordered.return_value = []
    client.pop_array.return_value = []
    return client


@pytest.fixture
def credentials() -> ProviderCredentials:
    """테스트용 Cloudflare credentials."""
    return ProviderCredentials(zone_id="zone123", api_token="cf-test-token")


@pytest.fixture
def purger_config(credentials: ProviderCredentials) -> PurgerConfig:
    """기본 정책 (모든 옵션 활성, 즉시 실행)."""
    return PurgerConfig(credentials=credentials, async_purging=False)


@pytest.fixture
def sample_media_asset() -> dict[str, Any]:
    """Sample media asset document."""
    base = "https://example.com/wp-content/uploads/2024/05"
    return {
        "id": "7",
        "canonical_url": f"{base}/cat.jpg",
        "variants": {
            "thumbnail": f"{base}/cat-150x150.jpg",
            "medium": f"{base}/cat-300x200.jpg",
            "large": f"{base}/cat.jpg",
        },
        "file_path": "2024/05/cat.jpg",
        "metadata": {"file": "2024/05/cat.jpg", "width": 1200, "height": 800},
    }


@pytest.fixture
def sample_content_item() -> dict[str, Any]:
    """Sample published post document."""
    return {
        "id": "42",
        "kind": "post",
        "publish_state": "publish",
        "content": '<p>Hello</p><img src="https://example.com/wp-content/uploads/2024/05/dog.png">',
        "attached_media_ids": ["7"],
    }
