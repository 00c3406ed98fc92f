"""Local user database table models."""

from datetime import datetime

from sqlalchemy import JSON, Column, String, UniqueConstraint
from sqlmodel import Field

from src.legacy_bridge.entities.core._base import EntityTable, utc_now


class LocalUserTable(EntityTable, table=True):
    """Database persistence model for local users.

    The unique constraint on ``username`` is what makes concurrent imports of
    the same legacy user converge on a single row.
    """

    __table_args__ = (UniqueConstraint("username", name="uq_local_user_username"),)

    username: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    email: str | None = Field(default=None, sa_column=Column(String(320), nullable=True, index=True))
    email_verified: bool = False
    first_name: str | None = None
    last_name: str | None = None
    enabled: bool = False
    federation_link: str | None = None
    federation_source: str | None = None
    attributes: dict[str, list[str]] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )


class LocalCredentialTable(EntityTable, table=True):
    """Stored password credential, one per local user."""

    __table_args__ = (UniqueConstraint("user_id", "type", name="uq_local_credential_user_type"),)

    user_id: str = Field(foreign_key="localusertable.id", index=True)
    type: str = Field(default="password", max_length=32)
    secret_hash: str
    rotated_at: datetime = Field(default_factory=utc_now)
