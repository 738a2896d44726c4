from __future__ import annotations

from datetime import datetime

from lending_admin.models.withdrawal import Withdrawal
from lending_admin.schemas.audit import ModificationType, TargetType
from lending_admin.schemas.withdrawal import (
    WithdrawalAction,
    WithdrawalStatus,
    WithdrawalUpdateRequest,
)
from lending_admin.services import calculator, validation
from lending_admin.services.authz import ActorIdentity, Role
from lending_admin.services.mutations import MutationTarget
from lending_admin.services.transitions import TransitionPolicy

EDITABLE_STATUSES = frozenset({WithdrawalStatus.PENDING.value, WithdrawalStatus.REVIEW.value})

_ACTION_STATUS = {
    WithdrawalAction.REVIEW: WithdrawalStatus.REVIEW.value,
    WithdrawalAction.APPROVE: WithdrawalStatus.APPROVED.value,
    WithdrawalAction.REJECT: WithdrawalStatus.REJECTED.value,
}

_ACTION_MODIFICATION = {
    WithdrawalAction.UPDATE: ModificationType.WITHDRAWAL_UPDATE.value,
    WithdrawalAction.REVIEW: ModificationType.WITHDRAWAL_REVIEW.value,
    WithdrawalAction.APPROVE: ModificationType.WITHDRAWAL_APPROVE.value,
    WithdrawalAction.REJECT: ModificationType.WITHDRAWAL_REJECT.value,
}


class WithdrawalTarget(MutationTarget):
    target_type = TargetType.WITHDRAWAL.value
    model = Withdrawal
    snapshot_fields = (
        "amount",
        "previous_balance",
        "new_balance",
        "status",
        "admin_note",
        "transaction_id",
        "processed_at",
    )
    tracked_fields = ("amount", "admin_note", "transaction_id")
    not_found_message = "Withdrawal request not found"

    def __init__(self, action: WithdrawalAction) -> None:
        self.action = action

    @property
    def target_status(self) -> str | None:
        return _ACTION_STATUS.get(self.action)

    def modification_type(self, request) -> str:
        return _ACTION_MODIFICATION[self.action]

    def required_role(self, request) -> Role:
        if self.action is WithdrawalAction.APPROVE:
            return Role.SUPERADMIN
        return Role.ADMIN

    def validate(self, request, actor: ActorIdentity) -> validation.ValidationResult:
        result = validation.validate_withdrawal_mutation(request, actor, status=self.target_status)
        if self.action in (WithdrawalAction.REVIEW, WithdrawalAction.REJECT) and request.transaction_id:
            result.extend(["Transaction ID can only be recorded on approval"])
        return result

    def validate_current(self, withdrawal: Withdrawal, request, policy: TransitionPolicy) -> list[str]:
        if self.action is WithdrawalAction.UPDATE:
            errors = []
            if withdrawal.status not in EDITABLE_STATUSES:
                errors.append(f"Withdrawal is already {withdrawal.status} and can no longer be edited")
            if request.amount is not None:
                errors.extend(
                    validation.withdrawal_amount_against_balance(request.amount, withdrawal.previous_balance)
                )
            return errors
        return validation.status_against_current(
            target_type=self.target_type,
            current=withdrawal.status,
            proposed=self.target_status,
            explicit=True,
            policy=policy,
        )

    def apply(self, withdrawal: Withdrawal, request, now: datetime) -> None:
        supplied = request.model_fields_set
        if "admin_note" in supplied:
            withdrawal.admin_note = request.admin_note

        if self.action is WithdrawalAction.UPDATE:
            self._apply_update(withdrawal, request)
            return

        withdrawal.status = self.target_status
        if self.action is WithdrawalAction.APPROVE and request.transaction_id:
            withdrawal.transaction_id = request.transaction_id
        if self.action in (WithdrawalAction.APPROVE, WithdrawalAction.REJECT):
            withdrawal.processed_at = now

    @staticmethod
    def _apply_update(withdrawal: Withdrawal, request: WithdrawalUpdateRequest) -> None:
        if request.amount is None:
            return
        withdrawal.amount = calculator.round_money(request.amount)
        withdrawal.new_balance = calculator.remaining_balance(withdrawal.previous_balance, withdrawal.amount)


UPDATE_TARGET = WithdrawalTarget(WithdrawalAction.UPDATE)
REVIEW_TARGET = WithdrawalTarget(WithdrawalAction.REVIEW)
APPROVE_TARGET = WithdrawalTarget(WithdrawalAction.APPROVE)
REJECT_TARGET = WithdrawalTarget(WithdrawalAction.REJECT)


def target_for(action: WithdrawalAction) -> WithdrawalTarget:
    return {
        WithdrawalAction.UPDATE: UPDATE_TARGET,
        WithdrawalAction.REVIEW: REVIEW_TARGET,
        WithdrawalAction.APPROVE: APPROVE_TARGET,
        WithdrawalAction.REJECT: REJECT_TARGET,
    }[action]

