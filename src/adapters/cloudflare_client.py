"""Cloudflare cache purge API client."""

from typing import Any

import httpx
import structlog

from src.models.purge import (
    ProviderCredentials,
    PurgeOutcome,
    PurgeStatus,
    dedupe_urls,
)

logger = structlog.get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
PURGE_TIMEOUT_SECONDS = 15.0
CONNECT_TIMEOUT_SECONDS = 10.0


class CloudflareClient:
    """Stateless adapter for Cloudflare's purge and zone endpoints.

    Every call issues at most one HTTP request and returns a PurgeOutcome;
    provider and transport failures are never raised to the caller.
    URL lists are sent as given (after dedup); no client-side chunking.
    """

    def __init__(
        self,
        credentials: ProviderCredentials | None,
        base_url: str = DEFAULT_API_BASE_URL,
        purge_timeout: float = PURGE_TIMEOUT_SECONDS,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Cloudflare client.

        Args:
            credentials: Zone ID + API token, or None when not configured.
            base_url: Cloudflare API v4 base URL.
            purge_timeout: Timeout for purge calls (seconds).
            connect_timeout: Timeout for the connectivity check (seconds).
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._purge_timeout = purge_timeout
        self._connect_timeout = connect_timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """Check if credentials are present."""
        return self._credentials is not None

    def purge(self, urls: list[str] | tuple[str, ...]) -> PurgeOutcome:
        """Purge specific URLs from the zone cache.

        Args:
            urls: Target URLs. Duplicates and empty values are dropped.

        Returns:
            Outcome of the purge call.
        """
        if self._credentials is None:
            return PurgeOutcome.not_configured()

        files = dedupe_urls(urls)
        if not files:
            return PurgeOutcome.empty()

        outcome = self._post_purge(self._credentials, {"files": files})
        if outcome.ok:
            return outcome.model_copy(
                update={"message": f"Successfully purged {len(files)} URLs"}
            )
        return outcome

    def purge_all(self) -> PurgeOutcome:
        """Purge everything cached for the zone.

        Returns:
            Outcome of the purge call.
        """
        if self._credentials is None:
            return PurgeOutcome.not_configured()

        outcome = self._post_purge(self._credentials, {"purge_everything": True})
        if outcome.ok:
            return outcome.model_copy(update={"message": "Successfully purged all cache"})
        return outcome

    def check_connectivity(self) -> PurgeOutcome:
        """Fetch zone metadata to verify the token and zone.

        Returns:
            SUCCESS with the zone name in the message, or an error outcome.
        """
        if self._credentials is None:
            return PurgeOutcome.not_configured()

        url = f"{self._base_url}/zones/{self._credentials.zone_id}"
        try:
            with self._http(self._credentials, self._connect_timeout) as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            logger.warning("cloudflare_connectivity_transport_error", error=str(e))
            return PurgeOutcome(
                status=PurgeStatus.TRANSPORT_ERROR, message=_transport_message(e)
            )

        data = _json_body(response)
        if response.status_code == 200 and data.get("success") is True:
            result = data.get("result") or {}
            zone_name = result.get("name") or "Unknown"
            return PurgeOutcome(
                status=PurgeStatus.SUCCESS,
                message=f"Connection successful! Zone: {zone_name}",
                http_status=response.status_code,
            )

        message = f"Connection failed (HTTP {response.status_code})"
        details = _error_details(data)
        if details:
            message += f": {details}"
        return PurgeOutcome(
            status=PurgeStatus.PROVIDER_ERROR,
            message=message,
            http_status=response.status_code,
        )

    def _post_purge(
        self, credentials: ProviderCredentials, payload: dict[str, Any]
    ) -> PurgeOutcome:
        """POST /zones/{zone_id}/purge_cache and normalize the response."""
        url = f"{self._base_url}/zones/{credentials.zone_id}/purge_cache"

        try:
            with self._http(credentials, self._purge_timeout) as client:
                response = client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("cloudflare_purge_transport_error", error=str(e))
            return PurgeOutcome(
                status=PurgeStatus.TRANSPORT_ERROR, message=_transport_message(e)
            )

        data = _json_body(response)
        if response.status_code == 200 and data.get("success") is True:
            return PurgeOutcome(
                status=PurgeStatus.SUCCESS,
                message="Purge accepted",
                http_status=response.status_code,
            )

        message = f"HTTP {response.status_code}"
        details = _error_details(data)
        if details:
            message += f": {details}"
        logger.warning(
            "cloudflare_purge_rejected",
            http_status=response.status_code,
            error=message,
        )
        return PurgeOutcome(
            status=PurgeStatus.PROVIDER_ERROR,
            message=message,
            http_status=response.status_code,
        )

    def _http(self, credentials: ProviderCredentials, timeout: float) -> httpx.Client:
        return httpx.Client(
            timeout=timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {credentials.api_token}",
                "Content-Type": "application/json",
            },
        )


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else becomes {}."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_details(data: dict[str, Any]) -> str:
    """Join provider error messages ("Unknown error" when a message is missing)."""
    errors = data.get("errors")
    if not isinstance(errors, list):
        return ""
    details = []
    for error in errors:
        message = error.get("message") if isinstance(error, dict) else None
        details.append(message or "Unknown error")
    return ", ".join(details)


def _transport_message(error: httpx.HTTPError) -> str:
    """Human-readable transport failure message."""
    text = str(error)
    if isinstance(error, httpx.TimeoutException):
        return f"Request timed out: {text}" if text else "Request timed out"
    return text or error.__class__.__name__
