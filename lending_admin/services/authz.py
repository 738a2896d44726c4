from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from lending_admin.core.errors import ForbiddenError, UnauthenticatedError
from lending_admin.core.security import JWTKeyError, decode_token


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


_ROLE_RANK = {
    Role.USER: 0,
    Role.ADMIN: 1,
    Role.SUPERADMIN: 2,
}


@dataclass(frozen=True, slots=True)
class ActorIdentity:
    actor_id: str
    email: str | None
    role: Role
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.actor_id


def has_role(actor: ActorIdentity, role: Role) -> bool:
    return _ROLE_RANK[actor.role] >= _ROLE_RANK[role]


def identity_from_claims(claims: dict[str, Any]) -> ActorIdentity:
    actor_id = claims.get("sub") or claims.get("userId")
    if not actor_id:
        raise UnauthenticatedError("Invalid token")
    try:
        role = Role(str(claims.get("role") or Role.USER.value).lower())
    except ValueError:
        # Unknown roles never gain admin rights
        role = Role.USER
    return ActorIdentity(
        actor_id=str(actor_id),
        email=claims.get("email"),
        role=role,
        name=claims.get("name"),
    )


def authenticate(credential: str | None) -> ActorIdentity:
    """Resolve a session credential to an identity of any role."""
    if not credential:
        raise UnauthenticatedError()
    try:
        claims = decode_token(credential)
    except (ValueError, JWTKeyError) as exc:
        raise UnauthenticatedError("Invalid token") from exc
    return identity_from_claims(claims)


def authorize(credential: str | None) -> ActorIdentity:
    """Resolve a credential and require an administrative role."""
    actor = authenticate(credential)
    require_role(actor, Role.ADMIN)
    return actor


def require_role(actor: ActorIdentity, role: Role) -> ActorIdentity:
    if not has_role(actor, role):
        raise ForbiddenError()
    return actor
