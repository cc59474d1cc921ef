"""Credential Issuer/Validator — mints and checks role-scoped bearer tokens.

Invariants:
    - issue() persists nothing unless the presented secret matches the configured one
    - A role without (secret, ttl_days) configuration raises ConfigMissingError,
      and only for that role
    - validate(): unknown token → NotFoundError; expired → UnauthorizedError
      (the row stays in storage, it is never renewed or purged here)
    - authorize() = validate() + role membership in the operation's allowed set;
      an unknown token is UnauthorizedError there, never NotFoundError
    - Tokens and secrets are never logged

Design Decisions:
    - Role configuration is handed in by the caller (Settings.role_credentials());
      this module never reads the environment
    - clock is injectable so expiry is testable without sleeping
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Mapping

from qr_inventory.core import credential_rules
from qr_inventory.core.domain_types import Role, RoleCredentialConfig
from qr_inventory.core.errors import (
    ConfigMissingError, NotFoundError, UnauthorizedError,
)
from qr_inventory.infrastructure.database import DatabaseSessionManager
from qr_inventory.models.credential import Credential as CredentialRow
from qr_inventory.schemas.credential import Credential

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CredentialService:
    """Issues and validates bearer tokens bound to one Role each."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        role_config: Mapping[Role, RoleCredentialConfig],
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.db = db
        self.role_config = dict(role_config)
        self.clock = clock

    async def issue(self, role: Role, presented_secret: str) -> Credential:
        config = self.role_config.get(role)
        if config is None:
            logger.error(
                "Credential requested for unconfigured role",
                extra={"role": role.value, "error_code": "CONFIG_MISSING"},
            )
            raise ConfigMissingError(role.value)
        if not credential_rules.secret_matches(config.secret, presented_secret):
            logger.warning(
                "Credential refused: wrong secret",
                extra={"role": role.value, "error_code": "UNAUTHORIZED"},
            )
            raise UnauthorizedError("secret does not match")

        credential = Credential(
            token=credential_rules.generate_token(),
            role=role,
            created_at=self.clock(),
            limit_days=config.ttl_days,
        )
        async with self.db.session() as session:
            session.add(CredentialRow(
                token=credential.token,
                role=credential.role.value,
                created_at=credential.created_at,
                limit_days=credential.limit_days,
            ))
            await session.commit()
        logger.info(
            f"Credential issued, valid for {config.ttl_days} day(s)",
            extra={"role": role.value},
        )
        return credential

    async def issue_from_strings(self, role_name: str, presented_secret: str) -> Credential:
        """issue() for raw transport input; unknown role names raise ParseError."""
        return await self.issue(Role.parse(role_name), presented_secret)

    async def validate(self, token: str) -> Role:
        async with self.db.session() as session:
            row = await session.get(CredentialRow, token)
        if row is None:
            raise NotFoundError("Credential", "<redacted>")
        credential = Credential.model_validate(row)
        if not credential_rules.is_valid(
            credential.created_at, credential.limit_days, self.clock(),
        ):
            logger.info(
                "Expired credential presented",
                extra={"role": credential.role.value, "error_code": "UNAUTHORIZED"},
            )
            raise UnauthorizedError("credential expired")
        return credential.role

    async def authorize(self, token: str | None, allowed: frozenset[Role]) -> Role:
        """Guard for an operation: the token's role must be in `allowed`."""
        if not token:
            raise UnauthorizedError("no credential presented")
        try:
            role = await self.validate(token)
        except NotFoundError:
            # Unknown and forged tokens are indistinguishable to guarded callers
            raise UnauthorizedError("unknown credential") from None
        if not credential_rules.role_allowed(role, allowed):
            logger.warning(
                "Role not permitted for operation",
                extra={"role": role.value, "error_code": "UNAUTHORIZED"},
            )
            raise UnauthorizedError(f"role '{role.value}' not permitted")
        return role
