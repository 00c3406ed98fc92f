from collections.abc import Callable
from datetime import datetime

from loguru import logger

from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.entities.core._base import utc_now
from src.legacy_bridge.entities.core.local_user import LocalUser, LocalUserStore

LEGACY_ROLES_ATTRIBUTE = "legacyRoles"


class ProvisioningEngine:
    """Just-in-time import of legacy users into the local store.

    Runs only after the facade accepted the password. Re-running it with the
    same profile and password leaves the same observable record behind.
    Uniqueness of usernames under concurrent imports is the store's job
    (insert-if-absent), not this engine's.
    """

    def __init__(
        self,
        store: LocalUserStore,
        federation_source_id: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._federation_source_id = federation_source_id
        self._clock = clock

    def provision(self, profile: RemoteProfile, plaintext_password: str) -> LocalUser:
        """Create or refresh the local record for ``profile``.

        Args:
            profile: Profile freshly resolved from the legacy facade
            plaintext_password: Password the facade just accepted

        Returns:
            The reconciled local user
        """
        username = profile.username
        try:
            local = self._store.find_local_user(username)

            if local is None or not local.is_local_storage:
                local = self._store.create_local_user(
                    username,
                    federation_source=self._federation_source_id,
                    created_at=self._clock(),
                )
                logger.info("Imported legacy user {} into local storage", username)
            elif self.is_foreign(local):
                logger.warning(
                    "Legacy user {} was imported by federation source {}; reconciling into {}",
                    username,
                    local.federation_source,
                    self._federation_source_id,
                )
            else:
                logger.debug("Updating existing imported user {}", username)

            self.apply_profile(local, profile)

            saved = self._store.save(local)
            self._store.update_credential(saved, plaintext_password)
            return saved
        except Exception as e:
            logger.error("Error provisioning legacy user {}: {}", username, e)
            raise

    def is_foreign(self, local: LocalUser) -> bool:
        """True when another federation source owns ``local``."""
        if not local.is_local_storage:
            return True
        return (
            local.federation_source is not None
            and local.federation_source != self._federation_source_id
        )

    def apply_profile(self, local: LocalUser, profile: RemoteProfile) -> LocalUser:
        """Project ``profile`` onto ``local`` in place."""
        local.enabled = True
        local.federation_source = self._federation_source_id
        if local.federation_link is not None:
            logger.debug("Clearing federation link for migrated user {}", profile.username)
            local.federation_link = None

        # The facade is trusted as the email verification authority
        if profile.email is not None:
            local.email = profile.email
            local.email_verified = True

        first_name, last_name = profile.name_parts()
        if first_name is not None:
            local.first_name = first_name
        if last_name is not None:
            local.last_name = last_name

        if profile.roles:
            local.set_attribute(LEGACY_ROLES_ATTRIBUTE, profile.roles)
        else:
            local.remove_attribute(LEGACY_ROLES_ATTRIBUTE)

        return local
