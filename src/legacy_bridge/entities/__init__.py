"""Entities grouped by business concept.

Each entity package holds its domain model (entity.py), persistence model
(table.py) and data access (repository.py).
"""

from .core.local_user import (
    LocalCredentialTable,
    LocalUser,
    LocalUserRepository,
    LocalUserStore,
    LocalUserTable,
)

__all__ = [
    "LocalUser",
    "LocalUserTable",
    "LocalCredentialTable",
    "LocalUserRepository",
    "LocalUserStore",
]
