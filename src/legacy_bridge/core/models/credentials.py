"""Credential input models."""

from enum import StrEnum

from pydantic import BaseModel, Field, SecretStr


class CredentialType(StrEnum):
    PASSWORD = "password"
    OTP = "otp"
    WEBAUTHN = "webauthn"


class CredentialInput(BaseModel):
    """A credential submitted for validation.

    ``type`` is free text so that callers can submit credential kinds this
    bridge does not know about; those are simply unsupported.
    """

    type: str = Field(description="Credential type, e.g. 'password'")
    value: SecretStr = Field(description="Submitted secret (challenge response)")

    @property
    def challenge_response(self) -> str:
        return self.value.get_secret_value()

    @classmethod
    def password(cls, plaintext: str) -> "CredentialInput":
        return cls(type=CredentialType.PASSWORD, value=SecretStr(plaintext))
