"""Local user domain entity."""

from collections.abc import Iterable

from pydantic import Field

from src.legacy_bridge.core.models.storage_id import is_local_storage
from src.legacy_bridge.entities.core._base import Entity


class LocalUser(Entity):
    """A user record owned by the local identity store.

    Records imported from the legacy facade are ordinary local users; the
    federation source that imported them is kept in ``federation_source``.
    ``federation_link`` marks a record that is still backed by an external
    provider rather than reconciled into the local store.
    """

    username: str = Field(description="Unique username within the store")
    email: str | None = Field(default=None, description="User's email address")
    email_verified: bool = Field(default=False)
    first_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    enabled: bool = Field(default=False)
    federation_link: str | None = Field(
        default=None, description="Provider id still backing this record, if any"
    )
    federation_source: str | None = Field(
        default=None, description="Federation source that imported this record"
    )
    attributes: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def is_local_storage(self) -> bool:
        return is_local_storage(self.id)

    def get_attribute(self, name: str) -> list[str]:
        return list(self.attributes.get(name, []))

    def set_attribute(self, name: str, values: Iterable[str]) -> None:
        self.attributes = {**self.attributes, name: list(values)}

    def remove_attribute(self, name: str) -> None:
        if name in self.attributes:
            self.attributes = {k: v for k, v in self.attributes.items() if k != name}
