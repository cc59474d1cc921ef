"""Settings — verifies URL coercion and role credential collection."""

from qr_inventory.config import Settings
from qr_inventory.core.domain_types import Role, RoleCredentialConfig


def test_plain_postgres_url_gets_asyncpg_driver():
    settings = Settings(database_url="postgresql://u:p@host:5432/inv")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/inv"


def test_role_credentials_skip_incomplete_roles():
    settings = Settings(
        administrator_pass_key="a", administrator_limit_days=7,
        equipment_manager_pass_key="m",
        general_pass_key=None, general_limit_days=None,
    )

    assert settings.role_credentials() == {
        Role.ADMINISTRATOR: RoleCredentialConfig(secret="a", ttl_days=7),
    }


def test_role_credentials_read_environment(monkeypatch):
    monkeypatch.setenv("GENERAL_PASS_KEY", "g")
    monkeypatch.setenv("GENERAL_LIMIT_DAYS", "1")

    configured = Settings().role_credentials()

    assert configured[Role.GENERAL] == RoleCredentialConfig(secret="g", ttl_days=1)
