from __future__ import annotations

from functools import lru_cache
from typing import Any

from jose import JWTError, jwt

from lending_admin.core.settings import settings


class JWTKeyError(RuntimeError):
    pass


@lru_cache(maxsize=1)
def _load_verification_key() -> str:
    if settings.jwt_algorithm.upper().startswith("HS"):
        if settings.jwt_secret:
            return settings.jwt_secret
        raise JWTKeyError("JWT secret not configured")
    if settings.jwt_public_key:
        return settings.jwt_public_key
    if settings.jwt_public_key_path:
        return _read_key(settings.jwt_public_key_path)
    raise JWTKeyError("JWT public key not configured")


def _read_key(path: str) -> str:
    with open(path, "r", encoding="utf-8") as key_file:
        return key_file.read()


def decode_token(token: str) -> dict[str, Any]:
    """Verify a session token issued by the auth service and return its claims.

    Token issuance lives with the auth service; this side only verifies.
    """
    key = _load_verification_key()
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
