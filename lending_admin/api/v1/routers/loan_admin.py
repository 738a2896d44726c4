from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lending_admin.api import deps
from lending_admin.db.session import get_db
from lending_admin.schemas.common import NotificationReceipt
from lending_admin.schemas.loan import LoanDTO, LoanMutationRequest, LoanMutationResponse
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.loan_admin import LOAN_TARGET
from lending_admin.services.mutations import MutationPipeline

router = APIRouter(prefix="/admin/loans", tags=["admin-loans"])


@router.put("/{loan_id}", response_model=LoanMutationResponse, summary="Update loan details or status")
async def update_loan(
    loan_id: UUID,
    payload: LoanMutationRequest,
    actor: ActorIdentity = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db),
    pipeline: MutationPipeline = Depends(deps.get_pipeline),
) -> LoanMutationResponse:
    outcome = await pipeline.run(db, LOAN_TARGET, loan_id, payload, actor)
    return LoanMutationResponse(
        loan=LoanDTO.model_validate(outcome.entity),
        notification=NotificationReceipt(**outcome.receipt),
    )
