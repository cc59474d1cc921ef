"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - A role with a missing pass key or limit is simply absent from role_credentials()

Design Decisions:
    - Role secrets are plain optional fields so a deployment can enable only
      the roles it hands out
    - store_timeout_seconds bounds every registry and index call
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from qr_inventory.core.domain_types import Role, RoleCredentialConfig


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://qr:qr@db:5432/qr"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Every external store call
    store_timeout_seconds: float = 5.0

    # Meilisearch
    meilisearch_url: str = "http://localhost:7700"
    meilisearch_api_key: str | None = None
    search_index_name: str = "items"

    # Role credentials
    administrator_pass_key: str | None = None
    administrator_limit_days: int | None = None
    equipment_manager_pass_key: str | None = None
    equipment_manager_limit_days: int | None = None
    general_pass_key: str | None = None
    general_limit_days: int | None = None

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def role_credentials(self) -> dict[Role, RoleCredentialConfig]:
        """Collect the (secret, ttl_days) pairs of every fully configured role."""
        configured = {}
        for role in Role:
            secret = getattr(self, f"{role.value}_pass_key")
            limit_days = getattr(self, f"{role.value}_limit_days")
            if secret is None or limit_days is None:
                continue
            configured[role] = RoleCredentialConfig(
                secret=secret, ttl_days=limit_days,
            )
        return configured


@lru_cache
def get_settings() -> Settings:
    return Settings()
