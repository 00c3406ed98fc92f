"""Core services exports."""

from .database.db_session import DbSessionService
from .legacy.adapter import LegacyUserView
from .legacy.federation import (
    AuthenticationResult,
    FederationStats,
    LegacyFederationService,
    LookupKind,
    ValidationOutcome,
)
from .legacy.identity_resolver import IdentityResolver
from .legacy.legacy_client import LegacyIdentityClient
from .legacy.profile_cache import ProfileCache, ProfileCacheInMemory
from .legacy.provisioning import LEGACY_ROLES_ATTRIBUTE, ProvisioningEngine

__all__ = [
    # Legacy federation
    "AuthenticationResult",
    "FederationStats",
    "IdentityResolver",
    "LEGACY_ROLES_ATTRIBUTE",
    "LegacyFederationService",
    "LegacyIdentityClient",
    "LegacyUserView",
    "LookupKind",
    "ProfileCache",
    "ProfileCacheInMemory",
    "ProvisioningEngine",
    "ValidationOutcome",
    # Database
    "DbSessionService",
]
