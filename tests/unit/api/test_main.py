"""Tests for FastAPI main application."""

import sys
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def clear_module_cache() -> None:
    """Clear cached modules before each test."""
    # Remove cached modules to ensure fresh imports
    modules_to_remove = [key for key in sys.modules.keys() if key.startswith("src.api")]
    for module in modules_to_remove:
        del sys.modules[module]


def _mock_settings(**overrides) -> MagicMock:
    values = {
        "GCP_PROJECT_ID": "test-project",
        "LOG_JSON": False,
        "LOG_LEVEL": "INFO",
        "TASKS_MODE": "direct",
        "TASKS_LOCATION": "asia-northeast3",
        "TASKS_QUEUE": "purge",
        "TASKS_TARGET_URL": None,
        "TASKS_SERVICE_ACCOUNT_EMAIL": None,
        "DEFERRED_DEDUP_WINDOW_SECONDS": 10,
        "is_local": True,
        "is_configured": False,
    }
    values.update(overrides)
    return MagicMock(**values)


class TestHealthEndpoint:
    """Test /health endpoint."""

    def test_health_returns_healthy(self) -> None:
        """GET /health should return healthy status."""
        with (
            patch("src.config.logging.configure_logging"),
            patch("src.config.settings.Settings", return_value=_mock_settings()),
            patch("src.adapters.firestore_client.firestore"),
        ):
            from src.api.main import app

            with TestClient(app) as client:
                response = client.get("/health")

            assert response.status_code == 200
            assert response.json() == {"status": "healthy"}

    def test_lifespan_initializes_state(self) -> None:
        """Lifespan should put settings, firestore and tasks on app.state."""
        settings = _mock_settings(is_configured=True)

        with (
            patch("src.config.logging.configure_logging"),
            patch("src.config.settings.Settings", return_value=settings),
            patch("src.adapters.firestore_client.firestore"),
        ):
            from src.api.main import app

            with TestClient(app):
                assert app.state.settings is settings
                assert app.state.tasks.mode == "direct"
                assert app.state.tasks._dedup_ttl_seconds == 10
                assert app.state.firestore is not None


class TestAppMetadata:
    """Test application metadata."""

    def test_app_has_title_and_version(self) -> None:
        """App should have proper title and version."""
        from src.api.main import app

        assert app.title == "Edge Cache Purger"
        assert app.version == "0.1.0"

    def test_routes_registered(self) -> None:
        """Hook, purge and internal task routers are mounted."""
        from src.api.main import app

        paths = {route.path for route in app.routes}  # type: ignore[attr-defined]

        assert "/hooks/content-saved" in paths
        assert "/purge/all" in paths
        assert "/internal/tasks/purge-media" in paths
        assert "/health" in paths
