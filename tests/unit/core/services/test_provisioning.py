"""Unit tests for just-in-time provisioning."""

import pytest

from src.legacy_bridge.core.models import RemoteProfile
from src.legacy_bridge.core.services import LEGACY_ROLES_ATTRIBUTE, ProvisioningEngine
from src.legacy_bridge.entities.core.local_user import (
    LocalUser,
    LocalUserRepository,
    LocalUserTable,
)
from tests.fixtures.core import FEDERATION_SOURCE_ID, FIXED_NOW, InMemoryLocalUserStore


@pytest.fixture
def engine(in_memory_store: InMemoryLocalUserStore, fixed_clock) -> ProvisioningEngine:
    return ProvisioningEngine(in_memory_store, FEDERATION_SOURCE_ID, clock=fixed_clock)


class TestProvisionNewUser:
    """Test the first import of a legacy user."""

    def test_creates_enabled_record(self, engine, in_memory_store, ada_profile):
        user = engine.provision(ada_profile, "analytical-engine")

        assert in_memory_store.created == ["ada"]
        assert user.enabled
        assert user.is_local_storage
        assert user.federation_source == FEDERATION_SOURCE_ID
        assert user.federation_link is None
        assert user.created_at == FIXED_NOW

    def test_projects_profile(self, engine, ada_profile):
        user = engine.provision(ada_profile, "analytical-engine")

        assert user.email == "ada@example.com"
        assert user.email_verified
        assert user.first_name == "Ada"
        assert user.last_name == "Lovelace"
        assert user.get_attribute(LEGACY_ROLES_ATTRIBUTE) == ["admin", "support"]

    def test_stores_the_validated_password(self, engine, in_memory_store, ada_profile):
        engine.provision(ada_profile, "analytical-engine")
        assert in_memory_store.credentials["ada"] == "analytical-engine"

    def test_single_word_display_name(self, engine):
        user = engine.provision(RemoteProfile(username="grace", displayName="Grace"), "pw")

        assert user.first_name == "Grace"
        assert user.last_name is None

    def test_profile_without_email_or_roles(self, engine):
        user = engine.provision(RemoteProfile(username="noah", displayName="   "), "pw")

        assert user.email is None
        assert not user.email_verified
        assert user.first_name is None
        assert user.get_attribute(LEGACY_ROLES_ATTRIBUTE) == []


class TestProvisionExistingUser:
    """Test re-imports and refreshes."""

    def test_is_idempotent(self, engine, in_memory_store, ada_profile):
        first = engine.provision(ada_profile, "analytical-engine")
        second = engine.provision(ada_profile, "analytical-engine")

        assert in_memory_store.created == ["ada"]
        assert len(in_memory_store.records) == 1
        assert second.id == first.id
        assert second.model_dump(exclude={"updated_at"}) == first.model_dump(
            exclude={"updated_at"}
        )

    def test_refresh_overwrites_changed_fields(self, engine, ada_profile):
        engine.provision(ada_profile, "old-password")
        changed = RemoteProfile(
            username="ada",
            displayName="Augusta Ada King",
            email="countess@example.com",
            roles=["admin"],
        )

        user = engine.provision(changed, "new-password")

        assert user.email == "countess@example.com"
        assert user.first_name == "Augusta"
        assert user.last_name == "Ada King"
        assert user.get_attribute(LEGACY_ROLES_ATTRIBUTE) == ["admin"]

    def test_missing_fields_keep_previous_values(self, engine, ada_profile):
        engine.provision(ada_profile, "pw")

        user = engine.provision(RemoteProfile(username="ada"), "pw")

        assert user.email == "ada@example.com"
        assert user.first_name == "Ada"
        assert user.last_name == "Lovelace"

    def test_empty_roles_remove_the_attribute(self, engine, in_memory_store, ada_profile):
        engine.provision(ada_profile, "pw")

        user = engine.provision(RemoteProfile(username="ada", roles=[]), "pw")

        assert LEGACY_ROLES_ATTRIBUTE not in user.attributes
        assert LEGACY_ROLES_ATTRIBUTE not in in_memory_store.records["ada"].attributes

    def test_password_is_replaced(self, engine, in_memory_store, ada_profile):
        engine.provision(ada_profile, "old-password")
        engine.provision(ada_profile, "new-password")

        assert in_memory_store.credentials["ada"] == "new-password"

    def test_existing_federation_link_is_cleared(self, engine, in_memory_store, ada_profile):
        in_memory_store.records["ada"] = LocalUser(
            username="ada", federation_link="legacy-user-storage"
        )

        user = engine.provision(ada_profile, "pw")

        assert user.federation_link is None
        assert in_memory_store.created == []

    def test_record_from_another_provider_gets_local_copy(
        self, engine, in_memory_store, ada_profile
    ):
        in_memory_store.foreign["ada"] = LocalUser(id="f:ldap:ada", username="ada")

        user = engine.provision(ada_profile, "pw")

        assert in_memory_store.created == ["ada"]
        assert user.is_local_storage
        assert user.id != "f:ldap:ada"

    def test_record_owned_by_another_source_is_reconciled(
        self, engine, in_memory_store, ada_profile
    ):
        in_memory_store.records["ada"] = LocalUser(username="ada", federation_source="ldap")

        assert engine.is_foreign(in_memory_store.find_local_user("ada"))
        user = engine.provision(ada_profile, "pw")

        assert user.federation_source == FEDERATION_SOURCE_ID
        assert not engine.is_foreign(user)
        assert in_memory_store.created == []

    def test_unowned_local_record_is_adopted(self, engine, in_memory_store, ada_profile):
        in_memory_store.records["ada"] = LocalUser(username="ada")

        assert not engine.is_foreign(in_memory_store.find_local_user("ada"))
        assert engine.provision(ada_profile, "pw").federation_source == FEDERATION_SOURCE_ID


class TestProvisionFailures:
    def test_store_errors_propagate(self, in_memory_store, ada_profile):
        class BrokenStore(InMemoryLocalUserStore):
            def save(self, user):
                raise RuntimeError("disk full")

        engine = ProvisioningEngine(BrokenStore(), FEDERATION_SOURCE_ID)

        with pytest.raises(RuntimeError, match="disk full"):
            engine.provision(ada_profile, "pw")


class TestProvisionWithRepository:
    """Run the engine against the SQLModel store."""

    def test_round_trip(
        self,
        provisioning_engine: ProvisioningEngine,
        local_user_repository: LocalUserRepository,
        ada_profile,
    ):
        provisioning_engine.provision(ada_profile, "analytical-engine")

        stored = local_user_repository.find_local_user("ada")
        assert stored.enabled
        assert stored.first_name == "Ada"
        assert stored.get_attribute(LEGACY_ROLES_ATTRIBUTE) == ["admin", "support"]
        assert local_user_repository.verify_credential(stored, "analytical-engine")
        assert not local_user_repository.verify_credential(stored, "wrong")

    def test_repeated_provision_keeps_one_row(
        self,
        provisioning_engine: ProvisioningEngine,
        local_user_repository: LocalUserRepository,
        ada_profile,
    ):
        provisioning_engine.provision(ada_profile, "first")
        provisioning_engine.provision(ada_profile, "second")

        users = local_user_repository.list_users()
        assert [user.username for user in users] == ["ada"]
        assert local_user_repository.verify_credential(users[0], "second")
        assert not local_user_repository.verify_credential(users[0], "first")

    def test_row_imported_by_another_source_is_taken_over(
        self,
        provisioning_engine: ProvisioningEngine,
        local_user_repository: LocalUserRepository,
        session,
        ada_profile,
    ):
        session.add(LocalUserTable(username="ada", federation_source="ldap", first_name="Keep"))
        session.commit()
        existing = local_user_repository.find_local_user("ada")
        assert provisioning_engine.is_foreign(existing)

        user = provisioning_engine.provision(ada_profile, "pw")

        stored = local_user_repository.find_local_user("ada")
        assert user.id == existing.id
        assert stored.federation_source == FEDERATION_SOURCE_ID
        assert stored.first_name == "Ada"
        assert not provisioning_engine.is_foreign(stored)
        assert [u.username for u in local_user_repository.list_users()] == ["ada"]
