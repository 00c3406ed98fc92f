from dataclasses import dataclass

from src.legacy_bridge.core.services import (
    DbSessionService,
    FederationStats,
    IdentityResolver,
    LegacyIdentityClient,
    ProfileCache,
    ProfileCacheInMemory,
)
from src.legacy_bridge.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    profile_cache: ProfileCache
    legacy_client: LegacyIdentityClient
    identity_resolver: IdentityResolver
    database_service: DbSessionService
    federation_stats: FederationStats
    federation_source_id: str
    federation_enabled: bool = True

    @classmethod
    def from_config(cls, config: ConfigData) -> "ApplicationDependencies":
        profile_cache = ProfileCacheInMemory.from_config(config.profile_cache)
        legacy_client = LegacyIdentityClient.from_config(config.legacy)
        return cls(
            profile_cache=profile_cache,
            legacy_client=legacy_client,
            identity_resolver=IdentityResolver(legacy_client, profile_cache),
            database_service=DbSessionService(config.database),
            federation_stats=FederationStats(),
            federation_source_id=config.legacy.federation_source_id,
            federation_enabled=config.legacy.enabled,
        )
