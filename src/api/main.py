"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.adapters.firestore_client import FirestoreClient
from src.adapters.tasks_client import TasksClient
from src.api.hooks import router as hooks_router
from src.api.internal_tasks import router as internal_tasks_router
from src.api.purge import router as purge_router
from src.config.logging import configure_logging, get_logger
from src.config.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Initializes resources on startup and cleans up on shutdown.
    """
    # Startup
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(json_logs=settings.LOG_JSON, level=settings.LOG_LEVEL)
    logger = get_logger()

    logger.info(
        "Starting application",
        project_id=settings.GCP_PROJECT_ID,
        is_local=settings.is_local,
        cloudflare_configured=settings.is_configured,
        tasks_mode=settings.TASKS_MODE,
    )
    if not settings.is_configured:
        logger.warning("Cloudflare credentials missing; purges will be skipped")

    # Initialize clients
    app.state.settings = settings
    app.state.firestore = FirestoreClient(project_id=settings.GCP_PROJECT_ID)
    app.state.tasks = TasksClient(
        mode=settings.TASKS_MODE,
        project_id=settings.GCP_PROJECT_ID,
        location=settings.TASKS_LOCATION,
        queue=settings.TASKS_QUEUE,
        target_url=settings.TASKS_TARGET_URL,
        service_account_email=settings.TASKS_SERVICE_ACCOUNT_EMAIL,
        dedup_ttl_seconds=settings.DEFERRED_DEDUP_WINDOW_SECONDS,
    )

    logger.info("Application started successfully")

    yield

    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title="Edge Cache Purger",
    description="CMS 콘텐츠 변경 시 Cloudflare 엣지 캐시 퍼지",
    version="0.1.0",
    lifespan=lifespan,
)

# Register routers
app.include_router(hooks_router)
app.include_router(purge_router)
app.include_router(internal_tasks_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}
