from __future__ import annotations

from datetime import datetime

from lending_admin.models.loan import Loan
from lending_admin.schemas.audit import ModificationType, TargetType
from lending_admin.schemas.loan import LoanMutationRequest, LoanStatus
from lending_admin.services import calculator, validation
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.mutations import MutationTarget
from lending_admin.services.transitions import TransitionPolicy

_TERMS = ("loan_amount", "duration_months", "interest_rate")


class LoanTarget(MutationTarget):
    target_type = TargetType.LOAN.value
    model = Loan
    snapshot_fields = (
        "loan_amount",
        "duration_months",
        "interest_rate",
        "monthly_payment",
        "total_amount",
        "total_interest",
        "status",
        "admin_notes",
        "approval_date",
    )
    tracked_fields = ("loan_amount", "duration_months", "interest_rate", "admin_notes")
    not_found_message = "Loan application not found"

    def modification_type(self, request: LoanMutationRequest) -> str:
        return ModificationType.LOAN_UPDATE.value

    def validate(self, request: LoanMutationRequest, actor: ActorIdentity) -> validation.ValidationResult:
        return validation.validate_loan_mutation(request, actor)

    def validate_current(self, loan: Loan, request: LoanMutationRequest, policy: TransitionPolicy) -> list[str]:
        return validation.status_against_current(
            target_type=self.target_type,
            current=loan.status,
            proposed=request.status,
            explicit=validation.explicit_status_change(request, "status"),
            policy=policy,
        )

    def apply(self, loan: Loan, request: LoanMutationRequest, now: datetime) -> None:
        supplied = request.model_fields_set
        if request.loan_amount is not None:
            loan.loan_amount = calculator.round_money(request.loan_amount)
        if request.duration_months is not None:
            loan.duration_months = int(request.duration_months)
        if request.interest_rate is not None:
            loan.interest_rate = calculator.round_money(request.interest_rate)
        if "admin_notes" in supplied:
            loan.admin_notes = request.admin_notes

        if request.status is not None and request.status != loan.status:
            loan.status = request.status
            if request.status == LoanStatus.APPROVED.value:
                loan.approval_date = now.date()

        # Stored payment figures are always derived, never taken from the caller
        if any(getattr(request, name) is not None for name in _TERMS) or loan.monthly_payment is None:
            terms = calculator.amortize(loan.loan_amount, loan.interest_rate, loan.duration_months)
            loan.monthly_payment = terms.monthly_payment
            loan.total_amount = terms.total_amount
            loan.total_interest = terms.total_interest


LOAN_TARGET = LoanTarget()
