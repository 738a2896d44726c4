"""Transactional pipeline shared by every admin mutation.

A mutation either commits the entity change, its audit entry and the owner's
notification together, or leaves the database exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from lending_admin.core.errors import (
    ConflictError,
    MutationError,
    MutationValidationError,
    NotFoundError,
    TransactionalError,
    UnexpectedError,
)
from lending_admin.models.audit_entry import AuditEntry
from lending_admin.models.notification import Notification
from lending_admin.services import audit, notifications
from lending_admin.services.authz import ActorIdentity, Role, require_role
from lending_admin.services.diff_engine import MutationClassification, classify
from lending_admin.services.notifications import NotificationDeliverer
from lending_admin.services.transitions import TransitionPolicy
from lending_admin.services.validation import ValidationResult

logger = logging.getLogger(__name__)


class MutationStage(str, Enum):
    STARTED = "started"
    VALIDATED = "validated"
    LOADED = "loaded"
    COMPUTED = "computed"
    PERSISTED = "persisted"
    AUDITED = "audited"
    NOTIFIED = "notified"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class MutationTarget:
    """Describes one kind of admin mutation: what it may touch and how."""

    target_type: ClassVar[str]
    model: ClassVar[type]
    lookup_column: ClassVar[str] = "id"
    status_field: ClassVar[str | None] = "status"
    snapshot_fields: ClassVar[tuple[str, ...]] = ()
    tracked_fields: ClassVar[tuple[str, ...]] = ()
    not_found_message: ClassVar[str] = "Resource not found"

    def modification_type(self, request: BaseModel) -> str:
        raise NotImplementedError

    def required_role(self, request: BaseModel) -> Role:
        return Role.ADMIN

    def validate(self, request: BaseModel, actor: ActorIdentity) -> ValidationResult:
        raise NotImplementedError

    def validate_current(self, entity: Any, request: BaseModel, policy: TransitionPolicy) -> list[str]:
        return []

    def apply(self, entity: Any, request: BaseModel, now: datetime) -> None:
        raise NotImplementedError

    def owner_id(self, entity: Any):
        return entity.user_id

    def audit_target_id(self, entity: Any) -> str:
        return str(getattr(entity, self.lookup_column))

    def snapshot(self, entity: Any) -> dict[str, Any]:
        return audit.model_snapshot(entity, fields=self.snapshot_fields)


@dataclass(frozen=True)
class MutationOutcome:
    entity: Any
    audit_entry: AuditEntry
    notification: Notification
    classification: MutationClassification

    @property
    def receipt(self) -> dict[str, Any]:
        return {"sent": True, "type": self.notification.type}


def _check_version(entity: Any, request: BaseModel) -> None:
    expected = getattr(request, "expected_version", None)
    if expected is None:
        return
    current = getattr(entity, "version", None)
    if current is not None and current != expected:
        raise ConflictError()


class MutationPipeline:
    """Runs admin mutations as single all-or-nothing database transactions."""

    def __init__(
        self,
        *,
        deliverer: NotificationDeliverer,
        policy: TransitionPolicy,
    ) -> None:
        self.deliverer = deliverer
        self.policy = policy

    async def run(
        self,
        db: AsyncSession,
        target: MutationTarget,
        target_id: Any,
        request: BaseModel,
        actor: ActorIdentity,
    ) -> MutationOutcome:
        stage = MutationStage.STARTED
        require_role(actor, target.required_role(request))
        result = target.validate(request, actor)
        if not result.is_valid:
            raise MutationValidationError.from_errors(result.errors)
        stage = self._advance(target, target_id, MutationStage.VALIDATED)

        try:
            entity = await self._load(db, target, target_id)
            if entity is None:
                raise NotFoundError(target.not_found_message)
            stage = self._advance(target, target_id, MutationStage.LOADED)

            errors = target.validate_current(entity, request, self.policy)
            if errors:
                raise MutationValidationError.from_errors(errors)
            _check_version(entity, request)

            before = target.snapshot(entity)
            target.apply(entity, request, datetime.now(timezone.utc))
            after = target.snapshot(entity)
            stage = self._advance(target, target_id, MutationStage.COMPUTED)

            classification = classify(
                before,
                after,
                target_type=target.target_type,
                tracked_fields=target.tracked_fields,
                status_field=target.status_field,
                target_id=target.audit_target_id(entity),
            )
            if classification.is_no_op:
                raise MutationValidationError.from_errors(["No changes detected"])

            await db.flush()
            stage = self._advance(target, target_id, MutationStage.PERSISTED)

            entry = audit.record_audit_entry(
                db,
                actor,
                target_type=target.target_type,
                target_id=target.audit_target_id(entity),
                modification_type=target.modification_type(request),
                reason=request.reason,
                old_value=before,
                new_value=after,
            )
            await db.flush()
            stage = self._advance(target, target_id, MutationStage.AUDITED)

            notification = notifications.dispatch(
                db, target.owner_id(entity), classification, actor.display_name
            )
            await db.flush()
            entry.notification_id = notification.id
            stage = self._advance(target, target_id, MutationStage.NOTIFIED)

            await db.commit()
            stage = self._advance(target, target_id, MutationStage.COMMITTED)
        except MutationError as exc:
            await self._rollback(db, target, target_id, stage, exc)
            raise
        except StaleDataError as exc:
            await self._rollback(db, target, target_id, stage, exc)
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            await self._rollback(db, target, target_id, stage, exc)
            raise TransactionalError() from exc
        except Exception as exc:
            await self._rollback(db, target, target_id, stage, exc)
            raise UnexpectedError() from exc

        audit.emit_audit_event(entry, notification_type=notification.type)
        await self._deliver(notification)
        return MutationOutcome(
            entity=entity,
            audit_entry=entry,
            notification=notification,
            classification=classification,
        )

    async def _load(self, db: AsyncSession, target: MutationTarget, target_id: Any):
        column = getattr(target.model, target.lookup_column)
        stmt = select(target.model).where(column == target_id).with_for_update()
        return (await db.execute(stmt)).scalar_one_or_none()

    @staticmethod
    def _advance(target: MutationTarget, target_id: Any, stage: MutationStage) -> MutationStage:
        logger.debug("Mutation %s/%s reached %s", target.target_type, target_id, stage.value)
        return stage

    @classmethod
    async def _rollback(
        cls,
        db: AsyncSession,
        target: MutationTarget,
        target_id: Any,
        stage: MutationStage,
        exc: Exception,
    ) -> MutationStage:
        await db.rollback()
        if isinstance(exc, MutationError) and exc.status_code < 500:
            logger.warning(
                "Mutation %s/%s rolled back after %s: %s",
                target.target_type,
                target_id,
                stage.value,
                exc.message,
            )
        else:
            logger.error(
                "Mutation %s/%s rolled back after %s",
                target.target_type,
                target_id,
                stage.value,
                exc_info=exc,
            )
        return cls._advance(target, target_id, MutationStage.ROLLED_BACK)

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self.deliverer.deliver(notification)
        except Exception:
            # Delivery is best effort once the mutation has committed
            logger.warning("Notification %s delivery failed", notification.id, exc_info=True)
