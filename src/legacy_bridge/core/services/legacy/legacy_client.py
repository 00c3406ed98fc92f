"""HTTP client for the legacy authentication facade."""

import time
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import ValidationError

from src.legacy_bridge.core.errors import LegacyTransportError, LegacyUserNotFound
from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.runtime.config.config_data import LegacyConfig


def _normalize_base_url(base_url: str) -> str:
    return base_url if base_url.endswith("/") else f"{base_url}/"


class LegacyIdentityClient:
    """Performs the two facade calls: profile fetch and password check.

    Every call is a single attempt with a short timeout. No caching and no
    business rules live here; a structured log line is emitted per call.
    """

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 5.0,
        request_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._timeout = httpx.Timeout(request_timeout, connect=connect_timeout)
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: LegacyConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> "LegacyIdentityClient":
        return cls(
            base_url=config.base_url,
            connect_timeout=config.connect_timeout_seconds,
            request_timeout=config.request_timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def users_url(self, username: str) -> str:
        return f"{self._base_url}users/{quote(username, safe='')}"

    @property
    def login_url(self) -> str:
        return f"{self._base_url}login"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def fetch_profile(self, username: str) -> RemoteProfile:
        """Fetch a user profile by username.

        Raises:
            LegacyUserNotFound: The facade answered 404.
            LegacyTransportError: The facade was unreachable, timed out,
                answered with any other non-2xx status or an unreadable body.
        """
        target = self.users_url(username)
        log = logger.bind(operation="fetch_profile", target=target)
        start = time.perf_counter()

        try:
            async with self._client() as client:
                response = await client.get(target, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            log.bind(
                status="transport_error",
                duration_ms=_elapsed_ms(start),
                error_type=type(exc).__name__,
            ).error("legacy.fetch_profile failed for {}: {}", username, exc)
            raise LegacyTransportError(f"Failed to fetch legacy user {username}: {exc}") from exc

        log = log.bind(status=response.status_code, duration_ms=_elapsed_ms(start))

        if response.status_code == 404:
            log.info("legacy.fetch_profile {} -> not found", username)
            raise LegacyUserNotFound(username)

        if not response.is_success:
            log.warning(
                "legacy.fetch_profile unexpected response for {}: {}",
                username,
                response.status_code,
            )
            raise LegacyTransportError(
                f"Unexpected status {response.status_code} fetching legacy user {username}",
                status_code=response.status_code,
            )

        try:
            profile = RemoteProfile.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            log.error("legacy.fetch_profile unreadable profile for {}: {}", username, exc)
            raise LegacyTransportError(
                f"Unreadable profile for legacy user {username}",
                status_code=response.status_code,
            ) from exc

        log.info(
            "legacy.fetch_profile loaded user {} with {} roles",
            profile.username,
            len(profile.roles),
        )
        return profile

    async def validate_credentials(self, username: str, password: str) -> bool:
        """Check a username/password pair against the facade.

        Only a 200 answer is a success. Every other status and every
        transport failure is a rejection.
        """
        log = logger.bind(operation="validate_credentials", target=self.login_url)
        start = time.perf_counter()

        try:
            async with self._client() as client:
                response = await client.post(
                    self.login_url, json={"username": username, "password": password}
                )
        except httpx.HTTPError as exc:
            log.bind(
                status="transport_error",
                duration_ms=_elapsed_ms(start),
                error_type=type(exc).__name__,
            ).error("legacy.validate_credentials failed for {}: {}", username, exc)
            return False

        valid = response.status_code == 200
        log.bind(status=response.status_code, duration_ms=_elapsed_ms(start)).info(
            "legacy.validate_credentials {} -> {}", username, response.status_code
        )
        return valid

    async def health_check(self) -> bool:
        """Probe the facade's ``/health`` endpoint."""
        try:
            async with self._client() as client:
                response = await client.get(f"{self._base_url}health")
            return response.is_success
        except httpx.HTTPError as exc:
            logger.warning("Legacy facade health check failed: {}", exc)
            return False


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)
