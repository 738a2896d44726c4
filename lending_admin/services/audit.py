from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.core.logging import get_audit_logger
from lending_admin.models.audit_entry import AuditEntry
from lending_admin.schemas.profile import mask_sensitive
from lending_admin.services.authz import ActorIdentity

SENSITIVE_FIELDS = frozenset({"id_number", "account_number"})
DEFAULT_LIMIT = 50


def serialize_for_audit(value: Any) -> Any:
    return jsonable_encoder(
        value,
        custom_encoder={
            Decimal: lambda v: str(v),
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        },
    )


def mask_snapshot(snapshot: dict[str, Any] | None) -> dict[str, Any] | None:
    if snapshot is None:
        return None
    return {
        key: mask_sensitive(value) if key in SENSITIVE_FIELDS and value is not None else value
        for key, value in snapshot.items()
    }


def model_snapshot(
    model: Any, *, fields: Iterable[str] | None = None, exclude: Iterable[str] | None = None
) -> dict[str, Any]:
    if model is None:
        return {}
    excluded = set(exclude or [])
    names = list(fields) if fields is not None else [column.name for column in model.__table__.columns]
    data: dict[str, Any] = {}
    for name in names:
        if name in excluded:
            continue
        data[name] = getattr(model, name)
    return serialize_for_audit(data)


def _diff_values(old: Any, new: Any, prefix: str = "") -> dict[str, dict[str, Any]]:
    changes: dict[str, dict[str, Any]] = {}
    if isinstance(old, dict) and isinstance(new, dict):
        keys = sorted(set(old.keys()) | set(new.keys()))
        for key in keys:
            path = f"{prefix}.{key}" if prefix else str(key)
            changes.update(_diff_values(old.get(key), new.get(key), path))
        return changes
    if old != new:
        changes[prefix or "value"] = {"from": old, "to": new}
    return changes


def _mask_changes(changes: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    masked = dict(changes)
    for path in SENSITIVE_FIELDS & masked.keys():
        masked[path] = {side: mask_sensitive(value) for side, value in masked[path].items()}
    return masked


def record_audit_entry(
    db: AsyncSession,
    actor: ActorIdentity,
    *,
    target_type: str,
    target_id: str,
    modification_type: str,
    reason: str,
    old_value: dict[str, Any] | None,
    new_value: dict[str, Any] | None,
) -> AuditEntry:
    """Stage an audit row in the caller's transaction."""
    plain_old = serialize_for_audit(old_value) if old_value is not None else None
    plain_new = serialize_for_audit(new_value) if new_value is not None else None
    # Diff before masking: two numbers sharing their last four digits still differ
    changes = _mask_changes(_diff_values(plain_old or {}, plain_new or {})) or None
    serialized_old = mask_snapshot(plain_old)
    serialized_new = mask_snapshot(plain_new)
    entry = AuditEntry(
        actor_id=actor.actor_id,
        actor_name=actor.display_name,
        actor_email=actor.email,
        target_type=target_type,
        target_id=str(target_id),
        modification_type=modification_type,
        old_value=serialized_old,
        new_value=serialized_new,
        changes=changes,
        reason=reason.strip(),
    )
    db.add(entry)
    return entry


def emit_audit_event(entry: AuditEntry, *, notification_type: str | None = None) -> None:
    """Write the committed mutation to the audit log stream."""
    changed = sorted((entry.changes or {}).keys())
    get_audit_logger().info(
        "%s %s/%s by %s",
        entry.modification_type,
        entry.target_type,
        entry.target_id,
        entry.actor_id,
        extra={
            "event": {
                "audit_id": str(entry.id) if entry.id else None,
                "actor_id": entry.actor_id,
                "target_type": entry.target_type,
                "target_id": entry.target_id,
                "modification_type": entry.modification_type,
                "changed_fields": changed,
                "notification_type": notification_type,
            }
        },
    )


async def list_for_target(
    db: AsyncSession, target_type: str, target_id: str, *, limit: int = DEFAULT_LIMIT
) -> list[AuditEntry]:
    stmt = (
        select(AuditEntry)
        .where(AuditEntry.target_type == target_type, AuditEntry.target_id == str(target_id))
        .order_by(AuditEntry.created_at.desc())
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_recent(
    db: AsyncSession,
    *,
    target_type: str | None = None,
    actor_id: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> tuple[list[AuditEntry], int]:
    conditions = []
    if target_type:
        conditions.append(AuditEntry.target_type == target_type)
    if actor_id:
        conditions.append(AuditEntry.actor_id == actor_id)

    count_stmt = select(func.count()).select_from(AuditEntry).where(*conditions)
    total = int((await db.execute(count_stmt)).scalar_one() or 0)

    stmt = (
        select(AuditEntry)
        .where(*conditions)
        .order_by(AuditEntry.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total
