"""Remote user profile as published by the legacy facade."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RemoteProfile(BaseModel):
    """A user as known by the legacy system.

    Instances are frozen and ``roles`` is always a tuple, so a profile can be
    shared between the cache and callers without defensive copies.
    Unknown fields in the facade response are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    username: str = Field(min_length=1, description="Stable legacy identifier")
    display_name: str | None = Field(
        default=None, alias="displayName", description="Free text, 'first last...' convention"
    )
    email: str | None = Field(default=None, description="Email address, if known")
    roles: tuple[str, ...] = Field(default=(), description="Ordered legacy role names")

    @field_validator("username")
    @classmethod
    def _reject_blank_username(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username must not be blank")
        return value

    @field_validator("roles", mode="before")
    @classmethod
    def _roles_never_null(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            raise ValueError("roles must be a list of strings")
        return tuple(value)

    def name_parts(self) -> tuple[str | None, str | None]:
        """Split ``display_name`` into ``(first_name, last_name)``.

        Blank display names yield ``(None, None)``; a single token yields
        ``(token, None)``; further tokens are rejoined with single spaces.
        """
        return split_display_name(self.display_name)


def split_display_name(display_name: str | None) -> tuple[str | None, str | None]:
    if display_name is None:
        return None, None
    parts = display_name.split()
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], " ".join(parts[1:])
