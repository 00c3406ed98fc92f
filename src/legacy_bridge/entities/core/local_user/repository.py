"""Data access for local users and their password credentials."""

import base64
import hashlib
from abc import ABC, abstractmethod
from datetime import datetime

import bcrypt
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from src.legacy_bridge.entities.core._base import utc_now
from src.legacy_bridge.entities.core.local_user.entity import LocalUser
from src.legacy_bridge.entities.core.local_user.table import (
    LocalCredentialTable,
    LocalUserTable,
)

PASSWORD_CREDENTIAL = "password"


def _bcrypt_input(password: str) -> bytes:
    # bcrypt only reads 72 bytes; digest first so long passwords stay significant
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a password against a hash produced by :func:`hash_password`."""
    try:
        return bcrypt.checkpw(_bcrypt_input(password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


class LocalUserStore(ABC):
    """Read/write contract of the local identity store.

    Implementations must guarantee at most one record per username:
    ``create_local_user`` behaves as insert-if-absent.
    """

    @abstractmethod
    def find_local_user(self, username: str) -> LocalUser | None:
        raise NotImplementedError

    @abstractmethod
    def create_local_user(
        self,
        username: str,
        federation_source: str | None = None,
        created_at: datetime | None = None,
    ) -> LocalUser:
        raise NotImplementedError

    @abstractmethod
    def save(self, user: LocalUser) -> LocalUser:
        """Persist the mutable fields of ``user``."""
        raise NotImplementedError

    @abstractmethod
    def update_credential(self, user: LocalUser, plaintext_password: str) -> None:
        """Store ``plaintext_password`` as the user's password credential."""
        raise NotImplementedError


class LocalUserRepository(LocalUserStore):
    """SQLModel backed local user store."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _row_by_username(self, username: str) -> LocalUserTable | None:
        statement = select(LocalUserTable).where(LocalUserTable.username == username)
        return self._session.exec(statement).first()

    def get(self, user_id: str) -> LocalUser | None:
        row = self._session.get(LocalUserTable, user_id)
        if row is None:
            return None
        return LocalUser.model_validate(row, from_attributes=True)

    def find_local_user(self, username: str) -> LocalUser | None:
        row = self._row_by_username(username)
        if row is None:
            return None
        return LocalUser.model_validate(row, from_attributes=True)

    def create_local_user(
        self,
        username: str,
        federation_source: str | None = None,
        created_at: datetime | None = None,
    ) -> LocalUser:
        timestamp = created_at or utc_now()
        row = LocalUserTable(
            username=username,
            federation_source=federation_source,
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._session.add(row)
        try:
            self._session.commit()
        except IntegrityError:
            # Another request imported the same username first
            self._session.rollback()
            existing = self._row_by_username(username)
            if existing is None:
                raise
            logger.info("Local user {} already created concurrently; reusing it", username)
            return LocalUser.model_validate(existing, from_attributes=True)

        self._session.refresh(row)
        return LocalUser.model_validate(row, from_attributes=True)

    def save(self, user: LocalUser) -> LocalUser:
        row = self._session.get(LocalUserTable, user.id)
        if row is None:
            raise ValueError(f"Local user {user.id} does not exist")

        row.email = user.email
        row.email_verified = user.email_verified
        row.first_name = user.first_name
        row.last_name = user.last_name
        row.enabled = user.enabled
        row.federation_link = user.federation_link
        row.federation_source = user.federation_source
        # JSON columns are only flushed on reassignment
        row.attributes = {name: list(values) for name, values in user.attributes.items()}
        row.updated_at = utc_now()

        self._session.add(row)
        self._session.commit()
        self._session.refresh(row)
        return LocalUser.model_validate(row, from_attributes=True)

    def _credential_row(self, user_id: str) -> LocalCredentialTable | None:
        statement = select(LocalCredentialTable).where(
            (LocalCredentialTable.user_id == user_id)
            & (LocalCredentialTable.type == PASSWORD_CREDENTIAL)
        )
        return self._session.exec(statement).first()

    def update_credential(self, user: LocalUser, plaintext_password: str) -> None:
        credential = self._credential_row(user.id)
        secret_hash = hash_password(plaintext_password)
        if credential is None:
            credential = LocalCredentialTable(
                user_id=user.id, type=PASSWORD_CREDENTIAL, secret_hash=secret_hash
            )
        else:
            credential.secret_hash = secret_hash
            credential.rotated_at = utc_now()

        self._session.add(credential)
        self._session.commit()

    def verify_credential(self, user: LocalUser, plaintext_password: str) -> bool:
        credential = self._credential_row(user.id)
        if credential is None:
            return False
        return verify_password(plaintext_password, credential.secret_hash)

    def list_users(self, limit: int = 100) -> list[LocalUser]:
        statement = select(LocalUserTable).order_by(LocalUserTable.username).limit(limit)
        return [
            LocalUser.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]
