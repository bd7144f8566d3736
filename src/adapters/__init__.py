"""External service adapters."""

from src.adapters.cloudflare_client import CloudflareClient
from src.adapters.content_source import ContentSource, RepositoryContentSource
from src.adapters.firestore_client import FirestoreClient
from src.adapters.tasks_client import TasksClient

__all__ = [
    "CloudflareClient",
    "ContentSource",
    "FirestoreClient",
    "RepositoryContentSource",
    "TasksClient",
]
