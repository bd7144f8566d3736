"""Application settings using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.purge import ProviderCredentials, PurgerConfig

DEFAULT_IMAGE_SIZE_NAMES = ["thumbnail", "medium", "medium_large", "large"]


class Settings(BaseSettings):
    """Application configuration from environment variables.

    All required settings must be provided via environment variables or .env file.
    Optional settings have default values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Google Cloud Platform
    # -------------------------------------------------------------------------
    GCP_PROJECT_ID: str

    # Firestore Emulator (local development)
    FIRESTORE_EMULATOR_HOST: str | None = None

    # -------------------------------------------------------------------------
    # Cloudflare
    # -------------------------------------------------------------------------
    CLOUDFLARE_ZONE_ID: str | None = None
    CLOUDFLARE_API_TOKEN: str | None = None
    CLOUDFLARE_API_BASE_URL: str = "https://api.cloudflare.com/client/v4"
    CLOUDFLARE_PURGE_TIMEOUT_SECONDS: float = 15.0
    CLOUDFLARE_CONNECT_TIMEOUT_SECONDS: float = 10.0

    # -------------------------------------------------------------------------
    # Purge policy
    # -------------------------------------------------------------------------
    AUTO_PURGE_ON_SAVE: bool = True
    """게시물 저장 시 자동 퍼지"""

    PURGE_ATTACHED_IMAGES: bool = True
    """첨부 이미지의 모든 사이즈 변형 퍼지"""

    PURGE_CONTENT_IMAGES: bool = True
    """본문 첫 번째 이미지 퍼지"""

    AUTO_PURGE_ON_MEDIA_REPLACE: bool = True
    """미디어 교체 시 자동 퍼지"""

    LOG_OPERATIONS: bool = True
    """퍼지 작업 기록 여부"""

    ASYNC_PURGING: bool = True
    """지연 실행 여부 (사이즈 변형 생성 대기)"""

    POST_PURGE_DELAY_SECONDS: int = 2
    MEDIA_PURGE_DELAY_SECONDS: int = 3
    DEFERRED_DEDUP_WINDOW_SECONDS: int = 10

    # -------------------------------------------------------------------------
    # Content source
    # -------------------------------------------------------------------------
    UPLOADS_BASE_URL: str | None = None
    """업로드 파일 기본 URL (예: https://example.com/wp-content/uploads)"""

    IMAGE_SIZE_NAMES: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IMAGE_SIZE_NAMES)
    )
    """등록된 중간 이미지 사이즈 이름"""

    # -------------------------------------------------------------------------
    # Cloud Tasks
    # -------------------------------------------------------------------------
    TASKS_MODE: str = "direct"  # "direct" or "cloud_tasks"
    TASKS_LOCATION: str = "asia-northeast3"
    TASKS_QUEUE: str = "purge"
    TASKS_TARGET_URL: str | None = None
    TASKS_SERVICE_ACCOUNT_EMAIL: str | None = None

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def is_local(self) -> bool:
        """Check if running in local development mode."""
        return self.FIRESTORE_EMULATOR_HOST is not None

    @property
    def credentials(self) -> ProviderCredentials | None:
        """Cloudflare credentials, or None when either value is missing or blank."""
        zone_id = (self.CLOUDFLARE_ZONE_ID or "").strip()
        api_token = (self.CLOUDFLARE_API_TOKEN or "").strip()
        if not zone_id or not api_token:
            return None
        return ProviderCredentials(zone_id=zone_id, api_token=api_token)

    @property
    def is_configured(self) -> bool:
        """Check if Cloudflare credentials are present."""
        return self.credentials is not None

    def purger_config(self) -> PurgerConfig:
        """Build an immutable policy snapshot for the coordinator."""
        return PurgerConfig(
            credentials=self.credentials,
            auto_purge_on_save=self.AUTO_PURGE_ON_SAVE,
            purge_attached_images=self.PURGE_ATTACHED_IMAGES,
            purge_content_images=self.PURGE_CONTENT_IMAGES,
            auto_purge_on_media_replace=self.AUTO_PURGE_ON_MEDIA_REPLACE,
            log_operations=self.LOG_OPERATIONS,
            async_purging=self.ASYNC_PURGING,
            post_purge_delay_seconds=self.POST_PURGE_DELAY_SECONDS,
            media_purge_delay_seconds=self.MEDIA_PURGE_DELAY_SECONDS,
            dedup_window_seconds=self.DEFERRED_DEDUP_WINDOW_SECONDS,
        )


# Singleton instance (lazy initialization)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
