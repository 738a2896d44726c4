from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.api import deps
from lending_admin.core.errors import UnauthenticatedError
from lending_admin.db.session import get_db
from lending_admin.schemas.notification import (
    NotificationDTO,
    NotificationListResponse,
    NotificationReadAllResponse,
    NotificationReadResponse,
)
from lending_admin.services import notifications
from lending_admin.services.authz import ActorIdentity

router = APIRouter(prefix="/user/notifications", tags=["notifications"])


def _owner_id(actor: ActorIdentity) -> UUID:
    try:
        return UUID(actor.actor_id)
    except ValueError as exc:
        raise UnauthenticatedError("Invalid token") from exc


@router.get("", response_model=NotificationListResponse, summary="Notifications for the signed-in user")
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=200),
    actor: ActorIdentity = Depends(deps.get_current_actor),
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    owner_id = _owner_id(actor)
    items = await notifications.list_for_user(db, owner_id, unread_only=unread_only, limit=limit)
    unread = await notifications.unread_count(db, owner_id)
    return NotificationListResponse(
        notifications=[NotificationDTO.model_validate(item) for item in items],
        unread_count=unread,
    )


@router.put("/read-all", response_model=NotificationReadAllResponse, summary="Mark every notification read")
async def mark_all_notifications_read(
    actor: ActorIdentity = Depends(deps.get_current_actor),
    db: AsyncSession = Depends(get_db),
) -> NotificationReadAllResponse:
    updated = await notifications.mark_all_read(db, _owner_id(actor))
    return NotificationReadAllResponse(updated=updated)


@router.put(
    "/{notification_id}/read",
    response_model=NotificationReadResponse,
    summary="Mark one notification read",
)
async def mark_notification_read(
    notification_id: UUID,
    actor: ActorIdentity = Depends(deps.get_current_actor),
    db: AsyncSession = Depends(get_db),
) -> NotificationReadResponse:
    notification = await notifications.mark_read(db, _owner_id(actor), notification_id)
    return NotificationReadResponse(notification=NotificationDTO.model_validate(notification))
