from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lending_admin.core.context import set_actor_id
from lending_admin.core.settings import settings
from lending_admin.services import authz
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.mutations import MutationPipeline

bearer_scheme = HTTPBearer(auto_error=False)


async def get_credential(
    request: Request,
    authorization: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Session token from the Authorization header, falling back to the web client's cookie."""
    if authorization and authorization.credentials:
        return authorization.credentials
    return request.cookies.get(settings.auth_cookie_name)


async def get_current_actor(credential: str | None = Depends(get_credential)) -> ActorIdentity:
    actor = authz.authenticate(credential)
    set_actor_id(actor.actor_id)
    return actor


async def get_current_admin(credential: str | None = Depends(get_credential)) -> ActorIdentity:
    actor = authz.authorize(credential)
    set_actor_id(actor.actor_id)
    return actor


def get_pipeline(request: Request) -> MutationPipeline:
    return request.app.state.pipeline
