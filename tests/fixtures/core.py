from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime

import pytest
from sqlalchemy import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.legacy_bridge.core.models.profile import RemoteProfile
from src.legacy_bridge.entities.core.local_user import (
    LocalUser,
    LocalUserRepository,
    LocalUserStore,
)

FEDERATION_SOURCE_ID = "legacy-user-storage"
FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class InMemoryLocalUserStore(LocalUserStore):
    """Dict backed store; ``foreign`` holds records served by another provider."""

    def __init__(self) -> None:
        self.records: dict[str, LocalUser] = {}
        self.foreign: dict[str, LocalUser] = {}
        self.credentials: dict[str, str] = {}
        self.created: list[str] = []

    def find_local_user(self, username: str) -> LocalUser | None:
        user = self.records.get(username) or self.foreign.get(username)
        return user.model_copy(deep=True) if user else None

    def create_local_user(self, username, federation_source=None, created_at=None) -> LocalUser:
        if username not in self.records:
            kwargs = {"created_at": created_at} if created_at else {}
            self.records[username] = LocalUser(
                username=username, federation_source=federation_source, **kwargs
            )
            self.created.append(username)
        return self.records[username].model_copy(deep=True)

    def save(self, user: LocalUser) -> LocalUser:
        self.records[user.username] = user.model_copy(deep=True)
        return user

    def update_credential(self, user: LocalUser, plaintext_password: str) -> None:
        self.credentials[user.username] = plaintext_password


@pytest.fixture
def federation_source_id() -> str:
    return FEDERATION_SOURCE_ID


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def session() -> Generator[Session]:
    """Create a fresh database session for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Register the tables with the metadata before creating them
    from src.legacy_bridge.entities.core.local_user import (  # noqa: F401
        LocalCredentialTable,
        LocalUserTable,
    )

    SQLModel.metadata.create_all(engine)

    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()
            session.close()
            engine.dispose()


@pytest.fixture
def local_user_repository(session: Session) -> LocalUserRepository:
    return LocalUserRepository(session)


@pytest.fixture
def in_memory_store() -> InMemoryLocalUserStore:
    return InMemoryLocalUserStore()


@pytest.fixture
def ada_profile() -> RemoteProfile:
    return RemoteProfile(
        username="ada",
        displayName="Ada Lovelace",
        email="ada@example.com",
        roles=["admin", "support"],
    )
