"""Read-only user view over a legacy profile."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.core.models.storage_id import StorageId
from src.legacy_bridge.core.services.legacy.provisioning import LEGACY_ROLES_ATTRIBUTE


class LegacyUserView(BaseModel):
    """What a lookup returns to the host: a frozen projection of a profile."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Federated storage id, f:<source>:<username>")
    username: str
    email: str | None = None
    email_verified: bool = False
    first_name: str | None = None
    last_name: str | None = None
    roles: tuple[str, ...] = ()

    @classmethod
    def from_profile(cls, profile: RemoteProfile, federation_source_id: str) -> "LegacyUserView":
        first_name, last_name = profile.name_parts()
        return cls(
            id=str(StorageId.federated(federation_source_id, profile.username)),
            username=profile.username,
            email=profile.email,
            email_verified=profile.email is not None,
            first_name=first_name,
            last_name=last_name,
            roles=profile.roles,
        )

    @property
    def attributes(self) -> dict[str, list[str]]:
        attributes = {"username": [self.username]}
        if self.email is not None:
            attributes["email"] = [self.email]
        if self.first_name is not None:
            attributes["firstName"] = [self.first_name]
        if self.last_name is not None:
            attributes["lastName"] = [self.last_name]
        if self.roles:
            attributes[LEGACY_ROLES_ATTRIBUTE] = list(self.roles)
        return attributes

    def get_attribute(self, name: str) -> list[str]:
        return list(self.attributes.get(name, []))

    def to_response(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "emailVerified": self.email_verified,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "attributes": self.attributes,
        }
