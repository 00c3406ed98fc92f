"""Opaque composite user ids.

Federated users are addressed as ``f:<provider>:<external id>``. Ids without
the ``f:`` prefix belong to the local store and their external id is the id
itself.
"""

from dataclasses import dataclass

from src.legacy_bridge.core.errors import MalformedIdError

FEDERATED_PREFIX = "f:"


@dataclass(frozen=True)
class StorageId:
    external_id: str
    provider_id: str | None = None

    @property
    def is_federated(self) -> bool:
        return self.provider_id is not None

    def __str__(self) -> str:
        if self.provider_id is None:
            return self.external_id
        return f"{FEDERATED_PREFIX}{self.provider_id}:{self.external_id}"

    @classmethod
    def parse(cls, opaque_id: str) -> "StorageId":
        """Decode an opaque id.

        Raises:
            MalformedIdError: If no external identifier can be extracted.
        """
        if not opaque_id:
            raise MalformedIdError("User id must not be empty")

        if not opaque_id.startswith(FEDERATED_PREFIX):
            return cls(external_id=opaque_id)

        # The external id may itself contain ':'
        parts = opaque_id.split(":", 2)
        if len(parts) != 3 or not parts[1] or not parts[2]:
            raise MalformedIdError(
                f"User id '{opaque_id}' has no external identifier component"
            )
        return cls(external_id=parts[2], provider_id=parts[1])

    @classmethod
    def federated(cls, provider_id: str, external_id: str) -> "StorageId":
        return cls(external_id=external_id, provider_id=provider_id)


def is_local_storage(opaque_id: str) -> bool:
    """True when ``opaque_id`` addresses a record held by the local store."""
    return not opaque_id.startswith(FEDERATED_PREFIX)
