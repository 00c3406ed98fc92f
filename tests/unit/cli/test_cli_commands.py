"""Tests for the legacy-bridge CLI."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.legacy_bridge.cli import app
from src.legacy_bridge.core.models import RemoteProfile
from src.legacy_bridge.core.services import (
    DbSessionService,
    LegacyIdentityClient,
    ProvisioningEngine,
)
from src.legacy_bridge.entities.core.local_user import LocalUserRepository
from src.legacy_bridge.runtime.config.config_data import ConfigData, DatabaseConfig
from src.legacy_bridge.runtime.context import with_context
from tests.fixtures.legacy import FakeLegacyFacade

runner = CliRunner()


@pytest.fixture
def cli_database(tmp_path: Path):
    override = ConfigData(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'cli.db'}"))
    with with_context(override):
        yield


@pytest.fixture
def patched_client(monkeypatch, legacy_client: LegacyIdentityClient):
    monkeypatch.setattr(
        LegacyIdentityClient, "from_config", classmethod(lambda cls, config: legacy_client)
    )
    return legacy_client


class TestLookupCommand:
    def test_existing_user(self, patched_client):
        result = runner.invoke(app, ["lookup", "analyst-mila"])

        assert result.exit_code == 0
        assert "Mila Analyst" in result.output
        assert "analyst, reporter" in result.output

    def test_unknown_user(self, patched_client):
        result = runner.invoke(app, ["lookup", "ghost"])
        assert result.exit_code == 1

    def test_facade_unavailable(self, patched_client, fake_facade: FakeLegacyFacade):
        fake_facade.unreachable = True

        result = runner.invoke(app, ["lookup", "test-user"])

        assert result.exit_code == 2


class TestUsersCommands:
    def test_init_db_then_empty_list(self, cli_database):
        assert runner.invoke(app, ["init-db"]).exit_code == 0

        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "No local users found" in result.output

    def test_list_provisioned_users(self, cli_database, federation_source_id: str):
        db_service = DbSessionService()
        db_service.create_all()
        with db_service.session_scope() as session:
            engine = ProvisioningEngine(LocalUserRepository(session), federation_source_id)
            engine.provision(RemoteProfile(username="ada", roles=["admin"]), "pw")
        db_service.dispose()

        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "ada" in result.output
        assert "admin" in result.output
