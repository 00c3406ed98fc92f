"""Federation service: the three capabilities the host consumes."""

import threading
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from src.legacy_bridge.core.models.credentials import CredentialInput, CredentialType
from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.core.services.legacy.adapter import LegacyUserView
from src.legacy_bridge.core.services.legacy.identity_resolver import IdentityResolver
from src.legacy_bridge.core.services.legacy.legacy_client import LegacyIdentityClient
from src.legacy_bridge.core.services.legacy.provisioning import ProvisioningEngine
from src.legacy_bridge.entities.core.local_user import LocalUser


class LookupKind(StrEnum):
    USERNAME = "username"
    ID = "id"
    EMAIL = "email"


class ValidationOutcome(StrEnum):
    REJECTED = "rejected"
    VALIDATED_UNSYNCED = "validated_unsynced"
    VALIDATED_SYNCED = "validated_synced"

    @property
    def succeeded(self) -> bool:
        return self is not ValidationOutcome.REJECTED


@dataclass
class AuthenticationResult:
    outcome: ValidationOutcome
    user: LocalUser | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome.succeeded


@dataclass
class FederationStats:
    """In-process login counters, shared by every request."""

    rejected: int = 0
    synced: int = 0
    unsynced: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, outcome: ValidationOutcome) -> None:
        with self._lock:
            if outcome is ValidationOutcome.REJECTED:
                self.rejected += 1
            elif outcome is ValidationOutcome.VALIDATED_SYNCED:
                self.synced += 1
            else:
                self.unsynced += 1

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {"rejected": self.rejected, "synced": self.synced, "unsynced": self.unsynced}


class LegacyFederationService:
    """Answers user lookups and password checks on behalf of the legacy facade.

    A successful password check imports or refreshes the local user. When the
    facade accepts the password but the profile cannot be fetched, the login
    still succeeds and the outcome is reported as ``VALIDATED_UNSYNCED``.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        client: LegacyIdentityClient,
        provisioning: ProvisioningEngine,
        federation_source_id: str,
        stats: FederationStats | None = None,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._provisioning = provisioning
        self._federation_source_id = federation_source_id
        self._stats = stats or FederationStats()

    @property
    def stats(self) -> FederationStats:
        return self._stats

    async def lookup_user(
        self, identifier: str, kind: LookupKind | str = LookupKind.USERNAME
    ) -> LegacyUserView | None:
        """Resolve a user and wrap it in a read-only view.

        Raises:
            MalformedIdError: ``kind`` is ``id`` and the id cannot be decoded.
            ValueError: ``kind`` is not a known lookup kind.
        """
        kind = LookupKind(kind)
        profile: RemoteProfile | None
        if kind is LookupKind.USERNAME:
            profile = await self._resolver.resolve_by_username(identifier)
        elif kind is LookupKind.ID:
            profile = await self._resolver.resolve_by_id(identifier)
        else:
            profile = await self._resolver.resolve_by_email(identifier)

        if profile is None:
            return None
        return LegacyUserView.from_profile(profile, self._federation_source_id)

    def supports_credential_type(self, credential_type: str) -> bool:
        return credential_type == CredentialType.PASSWORD

    def is_configured_for(self, user: LocalUser | LegacyUserView, credential_type: str) -> bool:
        return self.supports_credential_type(credential_type)

    async def authenticate(
        self, local_user: LocalUser | LegacyUserView, credential_input: CredentialInput
    ) -> AuthenticationResult:
        """Validate a credential remotely and sync the local record on success."""
        username = local_user.username

        if not self.supports_credential_type(credential_input.type):
            logger.debug("Credential type {} not supported for {}", credential_input.type, username)
            return self._finish(AuthenticationResult(ValidationOutcome.REJECTED))

        password = credential_input.challenge_response
        if not await self._client.validate_credentials(username, password):
            return self._finish(AuthenticationResult(ValidationOutcome.REJECTED))

        profile = await self._resolver.resolve_by_username(username)
        if profile is None:
            logger.bind(event="legacy.profile_sync_skipped", username=username).warning(
                "Legacy user {} validated but profile could not be loaded", username
            )
            return self._finish(AuthenticationResult(ValidationOutcome.VALIDATED_UNSYNCED))

        user = self._provisioning.provision(profile, password)
        return self._finish(AuthenticationResult(ValidationOutcome.VALIDATED_SYNCED, user))

    async def validate_credential(
        self, local_user: LocalUser | LegacyUserView, credential_input: CredentialInput
    ) -> bool:
        result = await self.authenticate(local_user, credential_input)
        return result.succeeded

    def _finish(self, result: AuthenticationResult) -> AuthenticationResult:
        self._stats.record(result.outcome)
        return result
