"""Domain models for the Cloudflare media purger.

This module exports all Pydantic models used across the application.
"""

from src.models.content_item import (
    ContentBlock,
    ContentItem,
    ContentKind,
    PublishState,
)
from src.models.media_asset import MediaAsset, MediaMetadata
from src.models.purge import (
    LogStatus,
    OperationType,
    ProviderCredentials,
    PurgeLogEntry,
    PurgeOutcome,
    PurgerConfig,
    PurgeRequest,
    PurgeStatus,
    dedupe_urls,
)
from src.models.signals import MediaReplaceSignal, SignalVariant

__all__ = [
    "ContentBlock",
    "ContentItem",
    "ContentKind",
    "LogStatus",
    "MediaAsset",
    "MediaMetadata",
    "MediaReplaceSignal",
    "OperationType",
    "ProviderCredentials",
    "PublishState",
    "PurgeLogEntry",
    "PurgeOutcome",
    "PurgeRequest",
    "PurgeStatus",
    "PurgerConfig",
    "SignalVariant",
    "dedupe_urls",
]
