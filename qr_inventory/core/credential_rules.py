"""Credential Rules — pure token minting, expiry and role checks.

Invariants:
    - Pure functions: no IO, no async, no DB
    - A token is uuid4 text followed by 200..299 random alphanumerics
    - Valid iff created_at + limit_days > now; expiry is permanent (no renewal)
    - Secret comparison is constant-time

Design Decisions:
    - secrets module over random: tokens are bearer credentials
    - Suffix length itself is random so token length leaks nothing about issuance
"""

import hmac
import secrets
import string
import uuid
from datetime import datetime, timedelta

from qr_inventory.core.domain_types import Role

TOKEN_SUFFIX_MIN = 200
TOKEN_SUFFIX_MAX = 300  # exclusive
_ALPHANUMERIC = string.ascii_letters + string.digits

MUTATION_ROLES = frozenset({Role.EQUIPMENT_MANAGER, Role.ADMINISTRATOR})
DESTRUCTIVE_ROLES = frozenset({Role.ADMINISTRATOR})
READ_ROLES = frozenset(Role)


def generate_token() -> str:
    """Mint a high-entropy bearer token."""
    length = TOKEN_SUFFIX_MIN + secrets.randbelow(TOKEN_SUFFIX_MAX - TOKEN_SUFFIX_MIN)
    suffix = "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))
    return str(uuid.uuid4()) + suffix


def secret_matches(expected: str, presented: str) -> bool:
    return hmac.compare_digest(expected.encode(), presented.encode())


def expires_at(created_at: datetime, limit_days: int) -> datetime:
    return created_at + timedelta(days=limit_days)


def is_valid(created_at: datetime, limit_days: int, now: datetime) -> bool:
    """True while the expiry instant is strictly in the future."""
    return expires_at(created_at, limit_days) > now


def role_allowed(role: Role, allowed: frozenset[Role]) -> bool:
    return role in allowed
