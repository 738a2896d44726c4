from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.api import deps
from lending_admin.db.session import get_db
from lending_admin.schemas.common import NotificationReceipt
from lending_admin.schemas.profile import ProfileDTO, ProfileMutationRequest, ProfileMutationResponse
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.mutations import MutationPipeline
from lending_admin.services.profile_admin import PROFILE_TARGET

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.put(
    "/{user_id}/profile",
    response_model=ProfileMutationResponse,
    summary="Edit a user's activation profile",
)
async def update_user_profile(
    user_id: UUID,
    payload: ProfileMutationRequest,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> ProfileMutationResponse:
    outcome = await pipeline.run(db, PROFILE_TARGET, user_id, payload, actor)
    return ProfileMutationResponse(
        profile=ProfileDTO.model_validate(outcome.entity),
        notification=NotificationReceipt(**outcome.receipt),
    )
