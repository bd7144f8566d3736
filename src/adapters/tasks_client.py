"""Cloud Tasks client with local direct execution mode."""

import datetime
import json
import threading
import time
from collections.abc import Callable
from typing import Any

import structlog
from google.api_core import exceptions as gcp_exceptions
from google.cloud import tasks_v2
from google.protobuf import timestamp_pb2

logger = structlog.get_logger(__name__)


class TasksClient:
    """Client for Cloud Tasks with local execution fallback.

    In 'direct' mode, tasks run in-process: immediately, or on a daemon timer
    when a delay is requested. In 'cloud_tasks' mode, tasks are enqueued to
    Cloud Tasks with a schedule time. There is no cancellation path in either mode.
    """

    def __init__(
        self,
        mode: str = "direct",
        project_id: str | None = None,
        location: str = "asia-northeast3",
        queue: str = "purge",
        target_url: str | None = None,
        service_account_email: str | None = None,
        dedup_ttl_seconds: float = 60.0,
    ) -> None:
        """Initialize Tasks client.

        Args:
            mode: 'direct' for local execution, 'cloud_tasks' for Cloud Tasks.
            project_id: GCP project ID (required for cloud_tasks mode).
            location: Cloud Tasks location.
            queue: Queue name.
            target_url: HTTP target URL for tasks.
            service_account_email: Service account for OIDC auth.
            dedup_ttl_seconds: How long a direct-mode task_id is remembered.

        Raises:
            ValueError: If cloud_tasks mode is missing required config.
        """
        self._mode = mode
        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {}
        self._seen_task_ids: dict[str, float] = {}  # task_id -> expiry
        self._dedup_ttl_seconds = dedup_ttl_seconds
        self._lock = threading.Lock()

        if mode == "cloud_tasks":
            if not project_id:
                raise ValueError("project_id is required for cloud_tasks mode")
            if not target_url:
                raise ValueError("target_url is required for cloud_tasks mode")

            self._client = tasks_v2.CloudTasksClient()
            self._queue_path = self._client.queue_path(project_id, location, queue)
            self._target_url = target_url.rstrip("/")
            self._service_account_email = service_account_email
        elif mode != "direct":
            raise ValueError(f"Unknown tasks mode: {mode}")

    @property
    def mode(self) -> str:
        """Execution mode."""
        return self._mode

    def register_handler(
        self, task_type: str, handler: Callable[[dict[str, Any]], None]
    ) -> None:
        """Register a handler for direct mode execution.

        Args:
            task_type: Task type identifier.
            handler: Function to handle the task payload.
        """
        self._handlers[task_type] = handler

    def enqueue(
        self,
        task_type: str,
        payload: dict[str, Any],
        task_id: str | None = None,
        delay_seconds: int | None = None,
    ) -> str | None:
        """Enqueue a task for execution.

        A task_id that was already used is treated as a duplicate and the task
        is not scheduled a second time.

        Args:
            task_type: Task type identifier.
            payload: Task payload data.
            task_id: Optional task ID for deduplication.
            delay_seconds: Optional delay before execution.

        Returns:
            Task name in cloud_tasks mode, None in direct mode or for duplicates.

        Raises:
            ValueError: If task_type is unknown in direct mode.
        """
        if self._mode == "direct":
            self._execute_direct(task_type, payload, task_id, delay_seconds)
            return None
        return self._enqueue_cloud_tasks(task_type, payload, task_id, delay_seconds)

    def _execute_direct(
        self,
        task_type: str,
        payload: dict[str, Any],
        task_id: str | None,
        delay_seconds: int | None,
    ) -> None:
        """Execute task in-process (inline, or on a timer when delayed)."""
        if task_type not in self._handlers:
            raise ValueError(f"Unknown task type: {task_type}")

        if task_id and not self._claim_task_id(task_id):
            logger.info("task_already_scheduled", task_id=task_id)
            return

        handler = self._handlers[task_type]
        if not delay_seconds:
            handler(payload)
            return

        timer = threading.Timer(delay_seconds, self._run_safely, (task_type, handler, payload))
        timer.daemon = True
        timer.start()

    def _claim_task_id(self, task_id: str) -> bool:
        """Remember a task_id until its TTL passes.

        Expired ids are evicted on every claim, so the map only holds ids seen
        within the last ``dedup_ttl_seconds``.

        Returns:
            False if the id is still remembered (duplicate).
        """
        now = time.monotonic()
        with self._lock:
            expired = [tid for tid, expiry in self._seen_task_ids.items() if expiry <= now]
            for tid in expired:
                del self._seen_task_ids[tid]

            if task_id in self._seen_task_ids:
                return False
            self._seen_task_ids[task_id] = now + self._dedup_ttl_seconds
            return True

    @staticmethod
    def _run_safely(
        task_type: str,
        handler: Callable[[dict[str, Any]], None],
        payload: dict[str, Any],
    ) -> None:
        """Run a timer-fired handler; the timer thread has no caller to report to."""
        try:
            handler(payload)
        except Exception as e:
            logger.error("direct_task_failed", task_type=task_type, error=str(e))

    def _enqueue_cloud_tasks(
        self,
        task_type: str,
        payload: dict[str, Any],
        task_id: str | None,
        delay_seconds: int | None,
    ) -> str | None:
        """Enqueue task to Cloud Tasks."""
        task: dict[str, Any] = {
            "http_request": {
                "http_method": tasks_v2.HttpMethod.POST,
                "url": f"{self._target_url}/{task_type}",
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps(payload).encode(),
            }
        }

        if self._service_account_email:
            task["http_request"]["oidc_token"] = {
                "service_account_email": self._service_account_email,
                "audience": self._target_url,
            }

        if task_id:
            task["name"] = f"{self._queue_path}/tasks/{task_id}"

        if delay_seconds:
            schedule_time = timestamp_pb2.Timestamp()
            schedule_time.FromDatetime(
                datetime.datetime.now(tz=datetime.UTC)
                + datetime.timedelta(seconds=delay_seconds)
            )
            task["schedule_time"] = schedule_time

        try:
            response = self._client.create_task(parent=self._queue_path, task=task)  # type: ignore[arg-type]
        except gcp_exceptions.AlreadyExists:
            logger.info("task_already_scheduled", task_id=task_id)
            return None
        return response.name
