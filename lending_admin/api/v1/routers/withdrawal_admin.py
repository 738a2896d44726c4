from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.api import deps
from lending_admin.db.session import get_db
from lending_admin.schemas.common import NotificationReceipt
from lending_admin.schemas.withdrawal import (
    WithdrawalAction,
    WithdrawalActionRequest,
    WithdrawalDTO,
    WithdrawalMutationResponse,
    WithdrawalUpdateRequest,
)
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.mutations import MutationOutcome, MutationPipeline
from lending_admin.services.withdrawal_admin import target_for

router = APIRouter(prefix="/admin/withdrawals", tags=["admin-withdrawals"])


def _response(outcome: MutationOutcome) -> WithdrawalMutationResponse:
    return WithdrawalMutationResponse(
        withdrawal=WithdrawalDTO.model_validate(outcome.entity),
        notification=NotificationReceipt(**outcome.receipt),
    )


@router.put("/{withdrawal_id}", response_model=WithdrawalMutationResponse, summary="Edit a withdrawal request")
async def update_withdrawal(
    withdrawal_id: UUID,
    payload: WithdrawalUpdateRequest,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> WithdrawalMutationResponse:
    outcome = await pipeline.run(db, target_for(WithdrawalAction.UPDATE), withdrawal_id, payload, actor)
    return _response(outcome)


async def _run_action(
    action: WithdrawalAction,
    withdrawal_id: UUID,
    payload: WithdrawalActionRequest | None,
    actor: ActorIdentity,
    db: AsyncSession,
    pipeline: MutationPipeline,
) -> WithdrawalMutationResponse:
    request = payload or WithdrawalActionRequest()
    outcome = await pipeline.run(db, target_for(action), withdrawal_id, request, actor)
    return _response(outcome)


@router.post(
    "/{withdrawal_id}/review",
    response_model=WithdrawalMutationResponse,
    summary="Move a withdrawal to review",
)
async def review_withdrawal(
    withdrawal_id: UUID,
    payload: WithdrawalActionRequest | None = None,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> WithdrawalMutationResponse:
    return await _run_action(WithdrawalAction.REVIEW, withdrawal_id, payload, actor, db, pipeline)


@router.post("/{withdrawal_id}/approve", response_model=WithdrawalMutationResponse, summary="Approve a withdrawal")
async def approve_withdrawal(
    withdrawal_id: UUID,
    payload: WithdrawalActionRequest | None = None,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> WithdrawalMutationResponse:
    return await _run_action(WithdrawalAction.APPROVE, withdrawal_id, payload, actor, db, pipeline)


@router.post("/{withdrawal_id}/reject", response_model=WithdrawalMutationResponse, summary="Reject a withdrawal")
async def reject_withdrawal(
    withdrawal_id: UUID,
    payload: WithdrawalActionRequest | None = None,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> WithdrawalMutationResponse:
    return await _run_action(WithdrawalAction.REJECT, withdrawal_id, payload, actor, db, pipeline)
