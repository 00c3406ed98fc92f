"""Unit tests for the SQLModel local user store."""

import pytest

from src.legacy_bridge.entities.core.local_user import (
    LocalUser,
    LocalUserRepository,
    hash_password,
    verify_password,
)
from tests.fixtures.core import FIXED_NOW


class TestCreateLocalUser:
    """Test insert-if-absent semantics."""

    def test_create(self, local_user_repository: LocalUserRepository):
        user = local_user_repository.create_local_user(
            "ada", federation_source="legacy-user-storage", created_at=FIXED_NOW
        )

        assert user.username == "ada"
        assert user.is_local_storage
        assert not user.enabled
        assert user.federation_source == "legacy-user-storage"
        assert user.created_at.replace(tzinfo=None) == FIXED_NOW.replace(tzinfo=None)

    def test_second_create_returns_existing_record(
        self, local_user_repository: LocalUserRepository
    ):
        first = local_user_repository.create_local_user("ada")
        second = local_user_repository.create_local_user("ada")

        assert second.id == first.id
        assert len(local_user_repository.list_users()) == 1


class TestFindAndSave:
    def test_find_missing(self, local_user_repository: LocalUserRepository):
        assert local_user_repository.find_local_user("nobody") is None

    def test_get_by_id(self, local_user_repository: LocalUserRepository):
        user = local_user_repository.create_local_user("ada")
        assert local_user_repository.get(user.id).username == "ada"
        assert local_user_repository.get("missing") is None

    def test_save_persists_fields_and_attributes(
        self, local_user_repository: LocalUserRepository
    ):
        user = local_user_repository.create_local_user("ada")
        user.email = "ada@example.com"
        user.email_verified = True
        user.first_name = "Ada"
        user.enabled = True
        user.set_attribute("legacyRoles", ["admin", "support"])

        local_user_repository.save(user)
        stored = local_user_repository.find_local_user("ada")

        assert stored.email == "ada@example.com"
        assert stored.email_verified
        assert stored.first_name == "Ada"
        assert stored.enabled
        assert stored.get_attribute("legacyRoles") == ["admin", "support"]

    def test_removed_attribute_is_persisted(self, local_user_repository: LocalUserRepository):
        user = local_user_repository.create_local_user("ada")
        user.set_attribute("legacyRoles", ["admin"])
        local_user_repository.save(user)

        user.remove_attribute("legacyRoles")
        local_user_repository.save(user)

        assert local_user_repository.find_local_user("ada").attributes == {}

    def test_save_unknown_user(self, local_user_repository: LocalUserRepository):
        with pytest.raises(ValueError):
            local_user_repository.save(LocalUser(username="ghost"))

    def test_list_users_is_sorted(self, local_user_repository: LocalUserRepository):
        for username in ["noah", "ada", "mila"]:
            local_user_repository.create_local_user(username)

        users = local_user_repository.list_users(limit=2)

        assert [user.username for user in users] == ["ada", "mila"]


class TestCredentials:
    def test_update_and_verify(self, local_user_repository: LocalUserRepository):
        user = local_user_repository.create_local_user("ada")

        assert not local_user_repository.verify_credential(user, "pw")
        local_user_repository.update_credential(user, "pw")

        assert local_user_repository.verify_credential(user, "pw")
        assert not local_user_repository.verify_credential(user, "PW")

    def test_rotation_replaces_secret(self, local_user_repository: LocalUserRepository):
        user = local_user_repository.create_local_user("ada")
        local_user_repository.update_credential(user, "old")
        local_user_repository.update_credential(user, "new")

        assert local_user_repository.verify_credential(user, "new")
        assert not local_user_repository.verify_credential(user, "old")

    def test_long_passwords_are_fully_significant(self):
        prefix = "x" * 80
        hashed = hash_password(prefix + "a")

        assert verify_password(prefix + "a", hashed)
        assert not verify_password(prefix + "b", hashed)

    def test_invalid_hash(self):
        assert verify_password("pw", "not-a-bcrypt-hash") is False
