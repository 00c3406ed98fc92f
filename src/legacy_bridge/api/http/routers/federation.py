"""Federation endpoints consumed by the identity host."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, SecretStr

from src.legacy_bridge.api.http.deps import (
    get_federation_service,
    get_local_user_repository,
)
from src.legacy_bridge.core.errors import MalformedIdError
from src.legacy_bridge.core.models.credentials import CredentialInput
from src.legacy_bridge.core.services import (
    LegacyFederationService,
    LookupKind,
    ValidationOutcome,
)
from src.legacy_bridge.entities.core.local_user import LocalUserRepository

router = APIRouter(prefix="/federation", tags=["federation"])


class CredentialPayload(BaseModel):
    type: str = Field(description="Credential type, e.g. 'password'")
    value: SecretStr


class ValidateCredentialRequest(BaseModel):
    username: str = Field(min_length=1)
    credential: CredentialPayload


class ValidateCredentialResponse(BaseModel):
    valid: bool
    outcome: ValidationOutcome
    user_id: str | None = None


class CredentialTypeResponse(BaseModel):
    credential_type: str
    supported: bool


@router.get("/users/{kind}/{identifier:path}")
async def lookup_user(
    kind: LookupKind,
    identifier: str,
    service: LegacyFederationService = Depends(get_federation_service),
) -> dict[str, Any]:
    """Resolve a legacy user by username, storage id or (cached) email."""
    try:
        view = await service.lookup_user(identifier, kind)
    except MalformedIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if view is None:
        raise HTTPException(status_code=404, detail="User not found")
    return view.to_response()


@router.get("/credential-types/{credential_type}", response_model=CredentialTypeResponse)
async def supports_credential_type(
    credential_type: str,
    service: LegacyFederationService = Depends(get_federation_service),
) -> CredentialTypeResponse:
    return CredentialTypeResponse(
        credential_type=credential_type,
        supported=service.supports_credential_type(credential_type),
    )


@router.post("/credentials/validate", response_model=ValidateCredentialResponse)
async def validate_credential(
    body: ValidateCredentialRequest,
    service: LegacyFederationService = Depends(get_federation_service),
    repository: LocalUserRepository = Depends(get_local_user_repository),
) -> ValidateCredentialResponse:
    """Validate a credential against the legacy facade.

    The user is located the way the host would: local store first, then a
    legacy lookup. An unknown user is an ordinary rejection.
    """
    user = repository.find_local_user(body.username) or await service.lookup_user(
        body.username, LookupKind.USERNAME
    )
    if user is None:
        return ValidateCredentialResponse(valid=False, outcome=ValidationOutcome.REJECTED)

    credential = CredentialInput(type=body.credential.type, value=body.credential.value)
    result = await service.authenticate(user, credential)
    return ValidateCredentialResponse(
        valid=result.succeeded,
        outcome=result.outcome,
        user_id=result.user.id if result.user else None,
    )
