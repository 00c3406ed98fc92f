"""Local user entity package.

- LocalUser: domain entity
- LocalUserTable / LocalCredentialTable: persistence models
- LocalUserRepository: SQLModel implementation of the LocalUserStore contract
"""

from .entity import LocalUser
from .repository import LocalUserRepository, LocalUserStore, hash_password, verify_password
from .table import LocalCredentialTable, LocalUserTable

__all__ = [
    "LocalUser",
    "LocalUserTable",
    "LocalCredentialTable",
    "LocalUserRepository",
    "LocalUserStore",
    "hash_password",
    "verify_password",
]
