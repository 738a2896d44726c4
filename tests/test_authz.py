import pytest
from jose import jwt

from lending_admin.api import deps
from lending_admin.core import context, security
from lending_admin.core.errors import ForbiddenError, UnauthenticatedError
from lending_admin.core.settings import settings
from lending_admin.services import authz
from lending_admin.services.authz import Role


def _token(**claims) -> str:
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture(autouse=True)
def _fresh_key_cache():
    security._load_verification_key.cache_clear()
    yield
    security._load_verification_key.cache_clear()


def test_authorize_returns_admin_identity():
    actor = authz.authorize(_token(sub="admin-1", email="admin@test.com", role="admin"))
    assert actor.actor_id == "admin-1"
    assert actor.email == "admin@test.com"
    assert actor.role is Role.ADMIN
    assert actor.display_name == "admin@test.com"


def test_authorize_accepts_user_id_claim_and_name():
    actor = authz.authorize(_token(userId="root-1", email="root@test.com", role="superadmin", name="Root"))
    assert actor.actor_id == "root-1"
    assert actor.role is Role.SUPERADMIN
    assert actor.display_name == "Root"


@pytest.mark.parametrize("credential", [None, "", "not-a-jwt"])
def test_missing_or_invalid_credential_is_unauthenticated(credential):
    with pytest.raises(UnauthenticatedError):
        authz.authorize(credential)


def test_token_signed_with_another_secret_is_rejected():
    forged = jwt.encode({"sub": "admin-1", "role": "admin"}, "other-secret", algorithm="HS256")
    with pytest.raises(UnauthenticatedError):
        authz.authorize(forged)


@pytest.mark.parametrize("role", ["user", "auditor", None])
def test_non_admin_roles_are_forbidden(role):
    claims = {"sub": "user-1", "email": "user@test.com"}
    if role is not None:
        claims["role"] = role
    with pytest.raises(ForbiddenError) as excinfo:
        authz.authorize(_token(**claims))
    assert excinfo.value.status_code == 403
    assert excinfo.value.message == "You do not have permission to perform this action"


def test_superadmin_satisfies_admin_but_not_vice_versa():
    admin = authz.identity_from_claims({"sub": "a", "role": "admin"})
    superadmin = authz.identity_from_claims({"sub": "s", "role": "superadmin"})
    assert authz.require_role(superadmin, Role.ADMIN) is superadmin
    with pytest.raises(ForbiddenError):
        authz.require_role(admin, Role.SUPERADMIN)


@pytest.mark.asyncio
async def test_admin_dependency_authorizes_and_binds_the_actor():
    try:
        actor = await deps.get_current_admin(_token(sub="admin-3", role="superadmin"))
        assert actor.role is Role.SUPERADMIN
        assert context.get_actor_id() == "admin-3"
    finally:
        context.clear_context()


@pytest.mark.asyncio
async def test_admin_dependency_refuses_user_tokens():
    with pytest.raises(ForbiddenError):
        await deps.get_current_admin(_token(sub="user-3", role="user"))
