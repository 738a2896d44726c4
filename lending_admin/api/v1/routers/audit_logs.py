from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.api import deps
from lending_admin.db.session import get_db
from lending_admin.schemas.audit import AuditEntryDTO, AuditEntryListResponse, TargetType
from lending_admin.services import audit
from lending_admin.services.authz import ActorIdentity

router = APIRouter(prefix="/admin/audit-logs", tags=["audit-logs"])


@router.get("", response_model=AuditEntryListResponse, summary="Recent admin modifications")
async def list_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200, alias="pageSize"),
    target_type: TargetType | None = Query(default=None, alias="targetType"),
    actor_id: str | None = Query(default=None, alias="actorId"),
    _: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> AuditEntryListResponse:
    entries, total = await audit.list_recent(
        db,
        target_type=target_type.value if target_type else None,
        actor_id=actor_id,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return AuditEntryListResponse(
        items=[AuditEntryDTO.model_validate(entry) for entry in entries],
        total=total,
    )


@router.get(
    "/{target_type}/{target_id}",
    response_model=AuditEntryListResponse,
    summary="Modification history of one record, newest first",
)
async def list_audit_logs_for_target(
    target_type: TargetType,
    target_id: str,
    limit: int = Query(50, ge=1, le=200),
    _: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> AuditEntryListResponse:
    entries = await audit.list_for_target(db, target_type.value, target_id, limit=limit)
    return AuditEntryListResponse(
        items=[AuditEntryDTO.model_validate(entry) for entry in entries],
        total=len(entries),
    )
