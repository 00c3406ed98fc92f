"""Value objects shared by the federation services."""

from .credentials import CredentialInput, CredentialType
from .profile import RemoteProfile, split_display_name
from .storage_id import StorageId, is_local_storage

__all__ = [
    "CredentialInput",
    "CredentialType",
    "RemoteProfile",
    "StorageId",
    "is_local_storage",
    "split_display_name",
]
