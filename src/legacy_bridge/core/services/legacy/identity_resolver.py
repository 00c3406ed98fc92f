from loguru import logger

from src.legacy_bridge.core.errors import LegacyTransportError, LegacyUserNotFound
from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.core.models.storage_id import StorageId
from src.legacy_bridge.core.services.legacy.legacy_client import LegacyIdentityClient
from src.legacy_bridge.core.services.legacy.profile_cache import ProfileCache


class IdentityResolver:
    """Resolves legacy users by username, opaque id or email.

    The cache is consulted first; on a miss the facade is queried and a
    successful answer is cached. A confirmed absence and an unreachable
    facade both resolve to ``None``; only the logs tell them apart.
    """

    def __init__(self, client: LegacyIdentityClient, cache: ProfileCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    async def resolve_by_username(self, username: str) -> RemoteProfile | None:
        if not username:
            return None

        cached = self._cache.get(username)
        if cached is not None:
            logger.debug("Profile cache hit for {}", username)
            return cached

        try:
            profile = await self._client.fetch_profile(username)
        except LegacyUserNotFound:
            return None
        except LegacyTransportError as exc:
            logger.warning("Legacy user {} unresolved: {}", username, exc)
            return None

        self._cache.put(profile)
        return profile

    async def resolve_by_id(self, opaque_id: str) -> RemoteProfile | None:
        """Resolve a composite storage id by its external (username) component.

        Raises:
            MalformedIdError: If the id has no external identifier.
        """
        storage_id = StorageId.parse(opaque_id)
        return await self.resolve_by_username(storage_id.external_id)

    async def resolve_by_email(self, email: str) -> RemoteProfile | None:
        """Look up a profile by email among cached profiles only.

        The facade has no email lookup endpoint, so this never goes remote.
        """
        profile = self._cache.find_by_email(email)
        if profile is None:
            logger.debug("No cached legacy profile with email {}", email)
        return profile
