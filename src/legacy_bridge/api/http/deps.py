"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.legacy_bridge.api.http.app_data import ApplicationDependencies
from src.legacy_bridge.core.services import (
    IdentityResolver,
    LegacyFederationService,
    ProvisioningEngine,
)
from src.legacy_bridge.entities.core.local_user import LocalUserRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Yield a database session that is closed after the request."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_identity_resolver(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> IdentityResolver:
    return app_deps.identity_resolver


def get_local_user_repository(db: Session = Depends(get_db_session)) -> LocalUserRepository:
    return LocalUserRepository(db)


def get_federation_service(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
    repository: LocalUserRepository = Depends(get_local_user_repository),
) -> LegacyFederationService:
    """Build a federation service bound to this request's database session."""
    if not app_deps.federation_enabled:
        raise HTTPException(status_code=503, detail="Legacy federation is disabled")
    provisioning = ProvisioningEngine(repository, app_deps.federation_source_id)
    return LegacyFederationService(
        resolver=app_deps.identity_resolver,
        client=app_deps.legacy_client,
        provisioning=provisioning,
        federation_source_id=app_deps.federation_source_id,
        stats=app_deps.federation_stats,
    )
