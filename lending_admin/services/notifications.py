from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.core.errors import NotFoundError
from lending_admin.core.settings import settings
from lending_admin.models.notification import Notification
from lending_admin.schemas.notification import NotificationType
from lending_admin.services.diff_engine import ChangeKind, MutationClassification
from lending_admin.utils.redis_client import get_redis_client, redis_key

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notifications"
DEFAULT_LIMIT = 50

_SUBJECTS = {
    "loan": ("loan application", "Loan Status Updated", "Application Details Updated"),
    "withdrawal": ("withdrawal request", "Withdrawal Status Updated", "Withdrawal Details Updated"),
}

_FIELD_LABELS = {
    "loan_amount": "loan amount",
    "duration_months": "duration",
    "interest_rate": "interest rate",
    "admin_notes": "admin notes",
    "admin_note": "admin note",
    "transaction_id": "transaction reference",
    "full_name": "full name",
    "date_of_birth": "date of birth",
    "marital_status": "marital status",
    "residing_country": "residing country",
    "state_region_province": "state/region/province",
    "town_city": "town/city",
    "id_type": "ID type",
    "id_number": "ID number",
    "account_type": "account type",
    "bank_name": "bank name",
    "account_number": "account number",
    "account_holder_name": "account holder name",
    "activation_status": "activation status",
}


@dataclass(frozen=True)
class NotificationContent:
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any]


def field_label(name: str) -> str:
    return _FIELD_LABELS.get(name, name.replace("_", " "))


def build_content(classification: MutationClassification, actor_display_name: str) -> NotificationContent:
    """Derive title, message and payload from the classification alone."""
    labels = ", ".join(field_label(name) for name in classification.changed_fields)

    if classification.kind is ChangeKind.PROFILE_UPDATED:
        return NotificationContent(
            type=NotificationType.PROFILE_UPDATED,
            title="Profile Updated by Administrator",
            message=f"Your profile information has been updated by an administrator: {labels}.",
            data={
                "changedFields": list(classification.changed_fields),
                "updatedBy": actor_display_name,
            },
        )

    subject, status_title, details_title = _SUBJECTS.get(
        classification.target_type, (classification.target_type.replace("_", " "), "Status Updated", "Details Updated")
    )
    if classification.kind is ChangeKind.STATUS_CHANGED:
        return NotificationContent(
            type=NotificationType.STATUS_CHANGED,
            title=status_title,
            message=(
                f"Your {subject} status has been updated from "
                f"{classification.old_status} to {classification.new_status}."
            ),
            data={
                "oldStatus": classification.old_status,
                "newStatus": classification.new_status,
                "targetType": classification.target_type,
                "targetId": classification.target_id,
            },
        )
    if classification.kind is ChangeKind.DETAILS_MODIFIED:
        return NotificationContent(
            type=NotificationType.DETAILS_MODIFIED,
            title=details_title,
            message=f"Your {subject} details have been updated by an administrator: {labels}.",
            data={
                "changedFields": list(classification.changed_fields),
                "changes": classification.changes,
                "targetType": classification.target_type,
                "targetId": classification.target_id,
            },
        )
    raise ValueError("No notification for a mutation that changed nothing")


def dispatch(
    db: AsyncSession,
    owner_id: UUID,
    classification: MutationClassification,
    actor_display_name: str,
) -> Notification:
    """Stage the owner's notification in the caller's transaction."""
    content = build_content(classification, actor_display_name)
    notification = Notification(
        user_id=owner_id,
        type=content.type.value,
        title=content.title,
        message=content.message,
        data=content.data,
        read=False,
    )
    db.add(notification)
    return notification


class NotificationDeliverer(Protocol):
    async def deliver(self, notification: Notification) -> None:
        ...


def delivery_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": str(notification.id),
        "userId": str(notification.user_id),
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data or {},
    }


class LoggingNotificationDeliverer:
    """Stand-in transport that records each delivery on the application log."""

    async def deliver(self, notification: Notification) -> None:
        logger.info(
            "Notification %s (%s) ready for user %s",
            notification.id,
            notification.type,
            notification.user_id,
        )


class RedisNotificationDeliverer:
    """Publish committed notifications on a per-user channel for live clients."""

    def __init__(self, client=None) -> None:
        self._client = client

    @staticmethod
    def channel_for_user(user_id) -> str:
        return redis_key(CHANNEL_PREFIX, str(user_id))

    async def deliver(self, notification: Notification) -> None:
        client = self._client or get_redis_client()
        try:
            await client.publish(
                self.channel_for_user(notification.user_id),
                json.dumps(delivery_payload(notification)),
            )
        except RedisError as exc:
            logger.warning("Notification %s publish failed: %s", notification.id, exc)


class DisabledNotificationDeliverer:
    async def deliver(self, notification: Notification) -> None:
        return None


def build_deliverer() -> NotificationDeliverer:
    if not settings.notification_delivery_enabled:
        return DisabledNotificationDeliverer()
    if settings.notification_delivery_backend == "redis":
        return RedisNotificationDeliverer()
    return LoggingNotificationDeliverer()


async def list_for_user(
    db: AsyncSession, user_id: UUID, *, unread_only: bool = False, limit: int = DEFAULT_LIMIT
) -> list[Notification]:
    conditions = [Notification.user_id == user_id]
    if unread_only:
        conditions.append(Notification.read.is_(False))
    stmt = select(Notification).where(*conditions).order_by(Notification.created_at.desc()).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, user_id: UUID) -> int:
    stmt = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return int((await db.execute(stmt)).scalar_one() or 0)


async def mark_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> Notification:
    stmt = select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    notification = (await db.execute(stmt)).scalar_one_or_none()
    if notification is None:
        # Another user's notification is reported the same as a missing one
        raise NotFoundError("Notification not found")
    if not notification.read:
        notification.read = True
        notification.read_at = datetime.now(timezone.utc)
        await db.commit()
    return notification


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    unread = await list_for_user(db, user_id, unread_only=True, limit=10_000)
    if not unread:
        return 0
    now = datetime.now(timezone.utc)
    for notification in unread:
        notification.read = True
        notification.read_at = now
    await db.commit()
    return len(unread)
