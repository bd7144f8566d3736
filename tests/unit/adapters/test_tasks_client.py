"""Tests for Cloud Tasks client."""

import threading
from typing import Any
from unittest.mock import MagicMock, patch

import pytest


class TestTasksClient:
    """Test TasksClient class."""

    def test_direct_mode_executes_immediately(self) -> None:
        """In direct mode, tasks without delay should execute immediately."""
        from src.adapters.tasks_client import TasksClient

        executed = []

        def handler(payload: dict[str, Any]) -> None:
            executed.append(payload)

        client = TasksClient(mode="direct")
        client.register_handler("purge-post", handler)
        result = client.enqueue("purge-post", {"item_id": "42"})

        assert result is None
        assert executed == [{"item_id": "42"}]

    def test_direct_mode_unknown_task_raises_error(self) -> None:
        """In direct mode, unknown task type should raise ValueError."""
        from src.adapters.tasks_client import TasksClient

        client = TasksClient(mode="direct")

        with pytest.raises(ValueError, match="Unknown task type"):
            client.enqueue("unknown_task", {"key": "value"})

    def test_direct_mode_deduplicates_task_id(self) -> None:
        """같은 task_id는 한 번만 실행."""
        from src.adapters.tasks_client import TasksClient

        executed = []
        client = TasksClient(mode="direct")
        client.register_handler("purge-media", executed.append)

        client.enqueue("purge-media", {"asset_ids": ["7"]}, task_id="media-7-1")
        client.enqueue("purge-media", {"asset_ids": ["7"]}, task_id="media-7-1")
        client.enqueue("purge-media", {"asset_ids": ["7"]}, task_id="media-7-2")

        assert len(executed) == 2

    def test_direct_mode_evicts_expired_task_ids(self) -> None:
        """TTL이 지난 task_id는 제거되어 메모리에 쌓이지 않음."""
        from src.adapters.tasks_client import TasksClient

        executed = []
        client = TasksClient(mode="direct", dedup_ttl_seconds=10)
        client.register_handler("purge-media", executed.append)

        with patch("src.adapters.tasks_client.time.monotonic", return_value=100.0):
            for i in range(1000):
                client.enqueue("purge-media", {"asset_ids": [str(i)]}, task_id=f"media-{i}-1")
        assert len(client._seen_task_ids) == 1000

        with patch("src.adapters.tasks_client.time.monotonic", return_value=111.0):
            client.enqueue("purge-media", {"asset_ids": ["7"]}, task_id="media-7-2")

        assert list(client._seen_task_ids) == ["media-7-2"]
        assert len(executed) == 1001

    def test_direct_mode_dedup_holds_within_ttl(self) -> None:
        """TTL 안에서는 같은 task_id를 다시 실행하지 않음."""
        from src.adapters.tasks_client import TasksClient

        executed = []
        client = TasksClient(mode="direct", dedup_ttl_seconds=10)
        client.register_handler("purge-post", executed.append)

        with patch("src.adapters.tasks_client.time.monotonic", return_value=100.0):
            client.enqueue("purge-post", {"item_id": "42"}, task_id="post-42-1")
        with patch("src.adapters.tasks_client.time.monotonic", return_value=109.0):
            client.enqueue("purge-post", {"item_id": "42"}, task_id="post-42-1")

        assert len(executed) == 1

    def test_direct_mode_delay_uses_timer(self) -> None:
        """지연 실행은 daemon Timer로 예약."""
        from src.adapters.tasks_client import TasksClient

        executed = []
        client = TasksClient(mode="direct")
        client.register_handler("purge-post", executed.append)

        with patch("src.adapters.tasks_client.threading.Timer") as mock_timer:
            client.enqueue("purge-post", {"item_id": "42"}, delay_seconds=2)

        assert executed == []
        mock_timer.assert_called_once()
        assert mock_timer.call_args.args[0] == 2
        assert mock_timer.return_value.daemon is True
        mock_timer.return_value.start.assert_called_once()

    def test_direct_mode_delayed_handler_runs(self) -> None:
        """Timer 스레드에서 핸들러가 실행됨."""
        from src.adapters.tasks_client import TasksClient

        done = threading.Event()
        received: list[dict[str, Any]] = []

        def handler(payload: dict[str, Any]) -> None:
            received.append(payload)
            done.set()

        client = TasksClient(mode="direct")
        client.register_handler("purge-post", handler)
        client.enqueue("purge-post", {"item_id": "42"}, delay_seconds=1)

        assert done.wait(timeout=5)
        assert received == [{"item_id": "42"}]

    def test_direct_mode_delayed_failure_is_logged(self) -> None:
        """Timer 스레드의 예외는 로그로 남기고 삼킴."""
        from src.adapters.tasks_client import TasksClient

        def handler(payload: dict[str, Any]) -> None:
            raise RuntimeError("boom")

        with patch("src.adapters.tasks_client.logger") as mock_logger:
            TasksClient._run_safely("purge-post", handler, {"item_id": "42"})

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["error"] == "boom"

    def test_unknown_mode_raises_error(self) -> None:
        """Unknown mode should raise ValueError."""
        from src.adapters.tasks_client import TasksClient

        with pytest.raises(ValueError, match="Unknown tasks mode"):
            TasksClient(mode="celery")

    def test_cloud_tasks_mode_creates_task(self) -> None:
        """In cloud_tasks mode, should create a named, scheduled Cloud Tasks task."""
        mock_client = MagicMock()
        mock_client.queue_path.return_value = "projects/p/locations/l/queues/purge"

        with patch("google.cloud.tasks_v2.CloudTasksClient", return_value=mock_client):
            from src.adapters.tasks_client import TasksClient

            client = TasksClient(
                mode="cloud_tasks",
                project_id="test-project",
                location="asia-northeast3",
                queue="purge",
                target_url="https://example.com/internal/tasks/",
                service_account_email="sa@test.iam.gserviceaccount.com",
            )
            client.enqueue(
                "purge-media", {"asset_ids": ["7"]}, task_id="media-7-1", delay_seconds=3
            )

            mock_client.create_task.assert_called_once()
            call_args = mock_client.create_task.call_args
            task = call_args.kwargs["task"]
            assert call_args.kwargs["parent"] == "projects/p/locations/l/queues/purge"
            assert task["name"] == "projects/p/locations/l/queues/purge/tasks/media-7-1"
            assert task["http_request"]["url"] == "https://example.com/internal/tasks/purge-media"
            assert "oidc_token" in task["http_request"]
            assert "schedule_time" in task

    def test_cloud_tasks_already_exists_is_duplicate(self) -> None:
        """이미 같은 이름의 태스크가 있으면 중복으로 처리."""
        from google.api_core import exceptions as gcp_exceptions

        mock_client = MagicMock()
        mock_client.create_task.side_effect = gcp_exceptions.AlreadyExists("exists")

        with patch("google.cloud.tasks_v2.CloudTasksClient", return_value=mock_client):
            from src.adapters.tasks_client import TasksClient

            client = TasksClient(
                mode="cloud_tasks",
                project_id="test-project",
                target_url="https://example.com/internal/tasks",
            )
            result = client.enqueue("purge-post", {"item_id": "42"}, task_id="post-42-1")

        assert result is None

    def test_cloud_tasks_mode_requires_config(self) -> None:
        """In cloud_tasks mode, missing config should raise ValueError."""
        from src.adapters.tasks_client import TasksClient

        with pytest.raises(ValueError, match="project_id is required"):
            TasksClient(mode="cloud_tasks")
        with pytest.raises(ValueError, match="target_url is required"):
            TasksClient(mode="cloud_tasks", project_id="test-project")
